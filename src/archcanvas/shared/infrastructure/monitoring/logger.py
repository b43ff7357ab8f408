"""
Centralized logging configuration for ArchCanvas.
"""

import logging
import sys
from functools import lru_cache

from ...config.settings import get_settings


@lru_cache()
def setup_logging(log_level: str = "INFO") -> None:
    """
    Setup centralized logging configuration.

    Args:
        log_level: Logging level used when settings do not name one
    """
    settings = get_settings()
    config = settings.logging_config

    level_str = config.get('level', log_level).upper()
    level = getattr(logging, level_str, logging.INFO)

    formatter = logging.Formatter(config['format'], datefmt='%Y-%m-%d %H:%M:%S')

    # Only the package logger is configured; the hosting screen owns the root logger
    package_logger = logging.getLogger('archcanvas')
    package_logger.setLevel(level)

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    logging.getLogger('asyncio').setLevel(logging.WARNING)


@lru_cache()
def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with consistent configuration.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    setup_logging()

    return logging.getLogger(name)
