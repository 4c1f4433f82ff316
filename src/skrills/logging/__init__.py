"""
Logging setup for Skrills.

Modules log through ``logging.getLogger(__name__)``; this package only
configures the ``skrills`` logger for command-line use. Output goes to
stderr because stdout carries the hook payload.
"""

from __future__ import annotations

import json as _json
import logging as _logging
import sys as _sys

LOGGER_NAME = "skrills"

_PLAIN_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"


class JSONFormatter(_logging.Formatter):
    """One JSON object per record."""

    def format(self, record: _logging.LogRecord) -> str:
        data = {
            "ts": record.created,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return _json.dumps(data)


def setup_logging(level: str = "WARNING", json_output: bool = False) -> _logging.Logger:
    """
    Configure and return the ``skrills`` logger.

    Calling again only adjusts the level; handlers are installed once.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ...).
        json_output: Emit JSON lines instead of plain text.
    """
    logger = _logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(_logging, level.upper(), _logging.WARNING))

    if logger.handlers:
        return logger

    handler = _logging.StreamHandler(_sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(_logging.Formatter(_PLAIN_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> _logging.Logger:
    """Get a child logger under the skrills namespace."""
    return _logging.getLogger(f"{LOGGER_NAME}.{name}")


__all__ = ["JSONFormatter", "LOGGER_NAME", "get_logger", "setup_logging"]
