#!/usr/bin/env python3
"""
Purpose:
    Applies the `logging` section of the fmdirectives configuration to the
    package logger.
"""

import logging
from typing import Any, Dict, Optional

PACKAGE_LOGGER = "fmdirectives"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Set the package logger level from `config['logging']['level']`.

    A stream handler is attached only when the package logger has none and
    the root logger is unconfigured, so host applications keep control.
    Unknown level names fall back to INFO.
    """
    level_name = str(((config or {}).get("logging") or {}).get("level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    if not logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    return logger
