"""
Logger factory used across the service.

Level comes from ``settings.LOG_LEVEL`` when set, otherwise from the
environment mode: ``dev`` logs everything, ``prod`` only warnings and errors.

Usage:
    from portfolio_bot.logger import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys
from typing import Optional

from portfolio_bot.settings import settings

_ENV_LEVEL_MAP = {
    "dev": logging.DEBUG,
    "prod": logging.WARNING,
}


def _default_level() -> int:
    if settings.LOG_LEVEL:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        # getLevelName returns "Level X" for unknown names
        return level if isinstance(level, int) else logging.INFO
    return _ENV_LEVEL_MAP.get(settings.ENV, logging.INFO)


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Return a named logger with the shared stdout handler attached once."""
    resolved_level = level if level is not None else _default_level()
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(resolved_level)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(resolved_level)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)
        # no duplicate lines through the root logger
        logger.propagate = False

    return logger
