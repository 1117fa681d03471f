"""sniaff configuration.

Paths come from environment variables with defaults under ~/.sniaff:
- SNIAFF_DIR: base data directory (default ~/.sniaff)
- SNIAFF_SESSIONS_DIR: session directories (default {SNIAFF_DIR}/sessions)
- SNIAFF_LOGS_DIR: log files (default {SNIAFF_DIR}/logs)

Other settings may also be given in {SNIAFF_DIR}/config.json and are
overridden by their SNIAFF_* environment variable.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import orjson

CONFIG_FILE = "config.json"

# config.json key -> (environment variable, default)
_SETTINGS = {
    "containerPrefix": ("SNIAFF_CONTAINER_PREFIX", "sniaff"),
    "dockerBin": ("SNIAFF_DOCKER_BIN", "docker"),
    "containerRuntime": ("SNIAFF_CONTAINER_RUNTIME", "docker"),
    "logLevel": ("SNIAFF_LOG_LEVEL", "INFO"),
}


@dataclass(frozen=True)
class Config:
    """Resolved configuration.

    Attributes:
        sniaff_dir: Base data directory
        sessions_dir: Root of the per-session directories
        logs_dir: Directory for log files
        container_prefix: Prefix of sandbox container names
        docker_bin: docker executable used for container teardown
        container_runtime: "docker", or "none" to skip container teardown
        log_level: Logging level name
    """

    sniaff_dir: Path
    sessions_dir: Path
    logs_dir: Path
    container_prefix: str = "sniaff"
    docker_bin: str = "docker"
    container_runtime: str = "docker"
    log_level: str = "INFO"


def get_sniaff_dir() -> Path:
    """Get the base data directory."""
    if env_dir := os.environ.get("SNIAFF_DIR"):
        return Path(env_dir)
    return Path.home() / ".sniaff"


def read_config(sniaff_dir: Path) -> dict:
    """Read config.json, returning empty dict if missing or invalid."""
    config_path = sniaff_dir / CONFIG_FILE
    if not config_path.exists():
        return {}
    try:
        content = config_path.read_bytes()
        data = orjson.loads(content) if content else {}
    except (orjson.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def load_config() -> Config:
    """Resolve configuration from the environment and config.json."""
    sniaff_dir = get_sniaff_dir()
    file_config = read_config(sniaff_dir)

    settings: dict[str, str] = {}
    for key, (env_var, default) in _SETTINGS.items():
        value = os.environ.get(env_var) or file_config.get(key) or default
        settings[key] = str(value)

    return Config(
        sniaff_dir=sniaff_dir,
        sessions_dir=Path(
            os.environ.get("SNIAFF_SESSIONS_DIR") or sniaff_dir / "sessions"
        ),
        logs_dir=Path(os.environ.get("SNIAFF_LOGS_DIR") or sniaff_dir / "logs"),
        container_prefix=settings["containerPrefix"],
        docker_bin=settings["dockerBin"],
        container_runtime=settings["containerRuntime"],
        log_level=settings["logLevel"].upper(),
    )
