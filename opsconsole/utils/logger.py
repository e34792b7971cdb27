"""Process-wide logging setup."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from opsconsole.utils.config import get_settings


_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Install the console handler once.

    Module loggers are created at import time, before an app factory knows
    which settings it was given. A later call with an explicit `level` only
    retunes the root logger, so `create_app(settings=...)` can apply the
    level of the settings it was handed without adding a second handler.
    """

    global _LOGGER_INITIALIZED
    resolved_level = (level or get_settings().log_level).upper()
    if _LOGGER_INITIALIZED:
        if level is not None:
            logging.getLogger().setLevel(resolved_level)
        return

    logging.basicConfig(level=resolved_level, format=_LOG_FORMAT, stream=sys.stdout)
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
