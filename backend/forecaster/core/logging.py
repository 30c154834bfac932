"""
logging.py — Logging Setup for the Forecasting Backend

Purpose:
- One format for API requests, forecast generation and scenario runs:
  timestamp | level | module | message
- Level taken from settings.LOG_LEVEL unless a caller passes one.

Console only (stdout), picked up by Uvicorn when served.
"""

import logging
from typing import Optional

from forecaster.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Per-request access lines are noise next to the engine's own INFO logs
_QUIET_LOGGERS = ("uvicorn.access",)


def configure_logging(level: Optional[str] = None) -> int:
    """
    Configure the root logger once at startup (main.py).

    Unknown level names fall back to INFO. The root level is set explicitly
    so it applies even when handlers were installed earlier (e.g. by a test
    runner). Returns the numeric level applied.
    """
    name = (level or settings.LOG_LEVEL).strip().upper()
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)
    for quiet in _QUIET_LOGGERS:
        logging.getLogger(quiet).setLevel(max(numeric, logging.WARNING))

    logging.getLogger(__name__).info("Logging initialized with level %s", logging.getLevelName(numeric))
    return numeric


def get_logger(name: str) -> logging.Logger:
    """Module logger: logger = get_logger(__name__)."""
    return logging.getLogger(name)
