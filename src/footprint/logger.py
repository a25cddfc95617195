"""
Logging configuration for Footprint.

One stdout handler lives on the ``footprint`` package logger; module loggers
are its children and propagate to it.
"""
import logging
import sys
from typing import Iterable, Optional

from .config import Config

PACKAGE_LOGGER = "footprint"

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("openai", "httpx", "httpcore")


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: Optional[str] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure a logger with a single stdout handler.

    Calling it again replaces the handler instead of stacking a new one.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string

    Returns:
        Configured logger instance
    """
    level = level or Config.LOG_LEVEL
    format_string = format_string or Config.LOG_FORMAT
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(format_string))

    configured = logging.getLogger(name)
    configured.setLevel(numeric_level)
    configured.handlers = [handler]
    configured.propagate = False
    return configured


def quiet_loggers(names: Iterable[str] = NOISY_LOGGERS, level: int = logging.WARNING) -> None:
    """Raise the level of third-party loggers."""
    for name in names:
        logging.getLogger(name).setLevel(level)


logger = setup_logger()
quiet_loggers()


def get_logger(name: str) -> logging.Logger:
    """
    Get a child of the package logger for a module.

    Args:
        name: Module name (usually __name__)

    Returns:
        Logger instance
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
