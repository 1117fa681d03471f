"""Logging setup for sniaff.

Logs go to {logs_dir}/sniaff-core.log. stdout carries the JSON command
output, so console logging goes to stderr and only when asked for.
"""

import logging
import sys
from pathlib import Path

LOG_FILE = "sniaff-core.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Attribute marking handlers installed by setup_logging
_HANDLER_MARK = "_sniaff_handler"


def setup_logging(
    logs_dir: Path, level: str = "INFO", verbose: bool = False
) -> logging.Logger:
    """Configure the "sniaff" logger.

    Replaces any handlers installed by a previous call.

    Args:
        logs_dir: Directory for the log file (created if needed).
        level: Logging level name.
        verbose: Also log to stderr.

    Returns:
        The configured "sniaff" logger.
    """
    logger = logging.getLogger("sniaff")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = []

    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(logs_dir / LOG_FILE, encoding="utf-8"))
    except OSError as e:
        print(f"sniaff: cannot open log file in {logs_dir}: {e}", file=sys.stderr)

    if verbose:
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        logger.addHandler(handler)

    return logger
