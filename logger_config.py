"""
Logging configuration for the command-line tool.

This module provides a standardized logging setup: one stdout handler per
named logger, so worker threads emit whole lines without interleaving.
"""
import logging
import os
import sys

# Names of loggers configured through get_logger
_configured: set[str] = set()


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (defaults to this module's name if not provided)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name or __name__)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    # Set log level from environment variable, default to INFO
    log_level = os.environ.get('LOG_LEVEL', 'INFO').upper()
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.NOTSET)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Prevent propagation to root logger to avoid duplicate logs
    logger.propagate = False

    _configured.add(logger.name)
    return logger


def set_log_level(level: str) -> None:
    """
    Apply a log level to every logger created by get_logger.

    Args:
        level: Level name such as 'DEBUG' or 'INFO'
    """
    resolved = getattr(logging, level.upper(), logging.INFO)
    for name in _configured:
        logging.getLogger(name).setLevel(resolved)
