"""
utils/logger.py
Simple logging wrapper for httpver
"""

import logging
import sys


# Third-party loggers that chatter at INFO (request lines, QUIC buffer warnings)
_NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "h2", "quic")


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Get a configured logger instance.

    Logs go to stderr so JSON written to stdout stays machine-readable.

    Args:
        name: Logger name (usually module name)
        level: Logging level (default: INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    # Format: LEVEL - message
    formatter = logging.Formatter(
        '%(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    # Each httpver logger owns its handler; don't double-print via the parent
    logger.propagate = False

    return logger


def set_level(level: str) -> None:
    """Apply a level name (e.g. "DEBUG") to every httpver logger."""
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    names = [n for n in logging.Logger.manager.loggerDict if n.split(".")[0] == "httpver"]
    for name in names:
        logger = get_logger(name)
        logger.setLevel(value)
        for handler in logger.handlers:
            handler.setLevel(value)


def quiet_dependency_loggers(level: int = logging.WARNING) -> None:
    """Silence INFO chatter from the HTTP and QUIC client libraries."""
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)


# Default logger instance
log = get_logger("httpver")


__all__ = ["get_logger", "log", "set_level", "quiet_dependency_loggers"]
