"""Logging setup for the ``showbiz`` package."""

from __future__ import annotations

import logging
from typing import Optional, TextIO

__all__ = ["LOG_FORMAT", "configure_logging", "reset_logging"]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "showbiz-stream"


def configure_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> logging.Logger:
    """Attach one stream handler to the package logger.

    Calling it again only updates the level, so handlers never pile up.
    """
    logger = logging.getLogger("showbiz")
    logger.setLevel(level.upper())
    for handler in logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return logger

    handler = logging.StreamHandler(stream)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def reset_logging() -> None:
    logger = logging.getLogger("showbiz")
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
