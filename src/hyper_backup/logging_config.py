"""Logging configuration for hyper-backup.

Only the entry point configures handlers. Library classes receive a logger at
construction and never touch the root logger themselves.

The configuration is safe to call multiple times.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional


LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DIVIDER = "═" * 64

_CONFIGURED_MARKER = "_hyper_backup_logging_configured"


def resolve_level(log_level: Optional[str]) -> Optional[int]:
    """Translate a level name into its numeric value.

    Args:
        log_level: Level name such as "debug" or "INFO".

    Returns:
        Optional[int]: The numeric level, or None when the name is unknown.
    """

    name = str(log_level or "").strip().upper()
    if not name:
        return logging.INFO
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else None


def configure_logging(*, log_level: str = "INFO", stream=None) -> None:
    """Configure process-wide console logging.

    An unknown level name falls back to INFO with a warning rather than failing startup.

    Args:
        log_level: Root log level name.
        stream: Output stream, stdout by default.

    Returns:
        None
    """

    root = logging.getLogger()
    if getattr(root, _CONFIGURED_MARKER, False):
        return

    level = resolve_level(log_level)
    invalid = level is None
    if invalid:
        level = logging.INFO

    root.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)

    logging.captureWarnings(True)
    setattr(root, _CONFIGURED_MARKER, True)

    if invalid:
        logging.getLogger(__name__).warning("Invalid LOG_LEVEL: %s. Falling back to info", log_level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger instance.

    Args:
        name: Logger name.

    Returns:
        logging.Logger: Logger instance.
    """

    return logging.getLogger(name or "hyper_backup")


def log_divider(logger: logging.Logger) -> None:
    """Emit the divider line separating backup cycles."""

    logger.info(DIVIDER)
