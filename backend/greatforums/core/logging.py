"""
Loguru setup.
"""

import sys

from loguru import logger

from greatforums.core.config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logging() -> None:
    """Replace loguru's default sink with one at the configured level."""
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, backtrace=settings.debug)
