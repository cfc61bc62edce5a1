"""Mini README: Application-wide logging helpers for FinTrack.

Structure:
    * configure_root_logger - attach one formatted handler to the root logger.
    * get_logger - module logger factory guaranteeing baseline configuration.

Usage:
    Modules call ``get_logger(__name__)`` once at import time and keep the
    result in a module level ``LOGGER``. Entry points may call
    ``configure_root_logger`` earlier with the level taken from settings;
    later calls are ignored so handlers are never duplicated.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

_LOGGER_INITIALISED = False


def _coerce_level(level: Union[int, str]) -> int:
    """Translate level names such as ``"debug"`` into logging constants."""

    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(str(level).strip().upper())
    if isinstance(numeric, int):
        return numeric
    raise ValueError(f"Unknown logging level: {level}")


def configure_root_logger(level: Union[int, str] = logging.INFO) -> None:
    """Configure the root logger with a readable, timestamped formatter."""

    global _LOGGER_INITIALISED
    if _LOGGER_INITIALISED:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(_coerce_level(level))
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger ensuring baseline configuration."""

    configure_root_logger()
    return logging.getLogger(name)
