"""Logging helpers with consistent formatting."""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from rich.logging import RichHandler

from sessionguard.utils.env import get_bool_env


LOG_LEVEL_ENV = "SESSIONGUARD_LOG_LEVEL"
RICH_LOGS_ENV = "SESSIONGUARD_RICH_LOGS"


def _level_from_env() -> int:
    name = os.getenv(LOG_LEVEL_ENV, "INFO").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level {name!r} in {LOG_LEVEL_ENV}")
    return level


def get_logger(name: str, level: Optional[int] = None, *, rich: Optional[bool] = None) -> logging.Logger:
    """Configure and return a logger under the ``sessionguard`` namespace.

    ``level`` and ``rich`` fall back to ``SESSIONGUARD_LOG_LEVEL`` and
    ``SESSIONGUARD_RICH_LOGS``.
    """
    if not name.startswith("sessionguard"):
        name = f"sessionguard.{name}"
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    if level is None:
        level = _level_from_env()
    if rich is None:
        rich = get_bool_env(RICH_LOGS_ENV, default=True)
    logger.setLevel(level)

    if rich:
        # URLs and header names contain brackets rich would treat as markup
        handler: logging.Handler = RichHandler(
            level=level,
            markup=False,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(name)s %(levelname)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    logger.addHandler(handler)
    logger.propagate = False
    return logger
