"""Centralized logging utilities."""

import logging
import sys
from typing import Optional
from pathlib import Path


PACKAGE_LOGGER = 'audiobatch'
DEFAULT_FORMAT = '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s'

# Chatty HTTP libraries, kept at WARNING unless running with DEBUG
NOISY_LOGGERS = ('urllib3', 'requests')


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Configure the package logger with a stdout handler and an optional file.

    Module loggers obtained via ``get_logger(__name__)`` propagate here, so
    this is called once by the entry point. Calling it again replaces the
    handlers instead of stacking them.

    Args:
        name: Logger name (default: the package logger)
        level: Logging level
        log_file: Optional file that receives the same records
        format_string: Custom format string

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt='%H:%M:%S')
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    noisy_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(noisy_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; records propagate to the package logger."""
    return logging.getLogger(name)
