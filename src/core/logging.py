"""
Logging configuration for Reviewer Assigner.
"""

import sys
from typing import Optional

from loguru import logger

from src.config import settings

DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[logger_name]}</magenta> | "
    "<blue>{function}</blue>:<blue>{line}</blue> - "
    "<level>{message}</level>"
)

PLAIN_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | "
    "{extra[logger_name]} | {function}:{line} - {message}"
)


def configure_logging() -> None:
    """Configure logging sinks for the current environment."""

    logger.remove()
    logger.configure(extra={"logger_name": "app"})

    log_level = "DEBUG" if settings.debug else "INFO"

    if settings.environment == "development":
        logger.add(
            sys.stderr,
            format=DEV_FORMAT,
            level=log_level,
            colorize=True,
            backtrace=True,
            diagnose=True,
        )
    else:
        # Structured output for log shippers
        logger.add(
            sys.stderr,
            format=PLAIN_FORMAT,
            level=log_level,
            serialize=True,
        )


configure_logging()


def get_logger(name: Optional[str] = None):
    """Get a logger instance with optional name binding."""
    if name:
        return logger.bind(logger_name=name)
    return logger
