"""
Structured logging for the dashboard API.

Every module asks for its own logger via ``get_logger(__name__)``; the
Google client libraries are held at WARNING so a sheet refresh does not
flood the output with HTTP chatter.
"""
from __future__ import annotations

import logging
import sys

from src.core.config import get_settings

_NOISY_LOGGERS = ("gspread", "google.auth", "urllib3", "httpx")
_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _quiet_client_libraries() -> None:
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    settings = get_settings()
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
        _quiet_client_libraries()
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    return logger
