"""Logging configuration."""

import logging
import sys
from typing import Optional
from pythonjsonlogger import jsonlogger
from logqueue.config import settings

PACKAGE_LOGGER = "logqueue"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(threadName)s %(message)s"


def _json_handler(logger: logging.Logger) -> logging.Handler:
    """Return the stdout JSON handler of ``logger``, adding it on first use."""
    for handler in logger.handlers:
        if isinstance(handler.formatter, jsonlogger.JsonFormatter):
            return handler

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(handler)
    logger.propagate = False
    return handler


def setup_logger(name: str, log_level: Optional[str] = None) -> logging.Logger:
    """
    Set up a logger with JSON formatting.

    Loggers inside the package share one handler on the ``logqueue`` logger
    and propagate to it. Any other name (e.g. a script's ``__main__``) gets
    its own handler. Calling this again for the same name only adjusts the
    level.

    Args:
        name: Logger name (typically __name__)
        log_level: Logging level (defaults to settings.log_level)

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = settings.log_level
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        owner = logging.getLogger(PACKAGE_LOGGER)
        if owner.level == logging.NOTSET:
            owner.setLevel(level)
    else:
        owner = logger

    _json_handler(owner)
    return logger
