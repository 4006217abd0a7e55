"""Centralized logger configuration for db-counter.

All modules log through :func:`get_logger` so output shares one timestamped
format.
"""

import logging
import os
import sys
from typing import Optional

# Track if root logger has been configured
_root_logger_configured = False


def configure_root_logger(level: Optional[str] = None) -> None:
    """Configure the root logger with standard formatting.

    Subsequent calls are idempotent.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If None, reads from DB_COUNTER_LOG_LEVEL env var or defaults to INFO.
    """
    global _root_logger_configured

    if _root_logger_configured:
        return

    if level is None:
        level = os.environ.get("DB_COUNTER_LOG_LEVEL", "INFO")
    level = level.upper()

    formatter = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    _root_logger_configured = True


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Return a configured logger with standardized formatting.

    The root logger is configured automatically on first call.

    Args:
        name: Logger name (typically __name__ of the calling module)
        level: Optional log level override. If None, uses root logger level.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Counter ready")
        2024-01-15 10:30:45.123 | INFO     | db_counter.counter | Counter ready
    """
    if not _root_logger_configured:
        configure_root_logger(level)

    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(level.upper())

    return logger
