"""Structured logging configuration."""

import logging
import json
import sys
from typing import Any, Dict, Optional

from ..config.settings import settings

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RECORD_FIELDS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_loggers: Dict[str, logging.Logger] = {}


class JSONFormatter(logging.Formatter):
    """Format logs as one JSON object per line.

    Keys passed with ``extra=`` (row counts, layout, pooling method) are
    emitted next to the message.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_FIELDS and not key.startswith("_"):
                log_data[key] = value
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def _level(name: Optional[str]) -> int:
    return getattr(logging, (name or settings.log_level).upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        if settings.log_format == "json":
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(_level(None))
    _loggers[name] = logger
    return logger


def set_log_level(level: str) -> None:
    """Change the level of every forestprep logger, e.g. for ``--verbose``."""
    for logger in _loggers.values():
        logger.setLevel(_level(level))
