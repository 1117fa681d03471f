"""Container teardown for sniaff sessions.

Each session may own one sandbox container, started by the revdocker worker
and named "{prefix}-revdocker-{session_id}". The registry removes it before
deleting the session directory because the container mounts part of that
directory as a volume.

The registry only depends on the ContainerRemover protocol, so the docker
CLI can be swapped for a no-op or a test double.
"""

import subprocess
from typing import Protocol

# Marker in docker's stderr when the container does not exist
_NOT_FOUND_MARKER = "no such container"


class ContainerError(Exception):
    """Raised when a container cannot be removed."""


class ContainerRemover(Protocol):
    """Removes a container by name, tolerating its absence."""

    def remove(self, name: str) -> bool:
        """Remove a container.

        Returns:
            True if a container was removed, False if none existed.

        Raises:
            ContainerError: If removal failed for any other reason.
        """
        ...


def container_name(prefix: str, session_id: str) -> str:
    """Get the sandbox container name for a session.

    Args:
        prefix: Container name prefix (e.g., "sniaff")
        session_id: The session ID (e.g., "sniaff-a1b2c3d4")

    Returns:
        Container name (e.g., "sniaff-revdocker-sniaff-a1b2c3d4")
    """
    return f"{prefix}-revdocker-{session_id}"


class DockerContainerRemover:
    """Removes containers with `docker rm -f` (stop + remove)."""

    def __init__(self, docker_bin: str = "docker", timeout: float = 30.0) -> None:
        self.docker_bin = docker_bin
        self.timeout = timeout

    def _docker_cmd(self, args: list[str]) -> list[str]:
        return [self.docker_bin] + args

    def remove(self, name: str) -> bool:
        try:
            result = subprocess.run(
                self._docker_cmd(["rm", "-f", name]),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ContainerError(f"{self.docker_bin} not found: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise ContainerError(
                f"Timed out removing container {name} after {self.timeout}s"
            ) from e
        except OSError as e:
            raise ContainerError(f"Failed to run {self.docker_bin}: {e}") from e

        if result.returncode == 0:
            return True
        if _NOT_FOUND_MARKER in result.stderr.lower():
            return False
        raise ContainerError(
            f"Failed to remove container {name}: {result.stderr.strip()}"
        )


class NullContainerRemover:
    """Remover for hosts without a container runtime; never removes anything."""

    def remove(self, name: str) -> bool:
        return False
