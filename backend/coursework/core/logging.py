"""
Logging configuration for the application.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from coursework.core.config import get_config, get_log_path

LOGGER_NAME = "coursework"

# Client libraries that log every request at INFO
CHATTY_LOGGERS = ("httpx", "httpcore")

_logger: Optional[logging.Logger] = None


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Set up the coursework logger with a rotating file and stdout.

    Args:
        level: Overrides logging.level from config. Passing a level
            rebuilds the handlers even if logging is already set up.

    Returns:
        Configured logger instance.
    """
    global _logger

    if _logger is not None and level is None:
        return _logger

    log_config = get_config().logging
    resolved = getattr(logging, (level or log_config.level).upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_config.format)

    file_handler = RotatingFileHandler(
        get_log_path(),
        maxBytes=log_config.max_size * 1024 * 1024,
        backupCount=log_config.backup_count,
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler(sys.stdout)
    for handler in (file_handler, console_handler):
        handler.setLevel(resolved)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Request lines from the HTTP backend only show up when debugging
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING)

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Get the coursework logger, setting it up on first use."""
    if _logger is None:
        return setup_logging()
    return _logger
