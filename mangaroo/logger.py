"""Application-wide logging set-up with console and JSON output."""

from __future__ import annotations

import json
import logging
from datetime import datetime

LOGGER_NAME = "mangaroo"

_LEVELS = {
    logging.DEBUG: ("DEBUG", "\x1b[35m"),
    logging.INFO: ("INFO", "\x1b[34m"),
    logging.WARNING: ("WARN", "\x1b[33m"),
    logging.ERROR: ("ERROR", "\x1b[31m"),
    logging.CRITICAL: ("FATAL", "\x1b[31m"),
}

_handler: logging.Handler | None = None


class _Formatter(logging.Formatter):
    def __init__(self, as_json: bool) -> None:
        super().__init__()
        self.as_json = as_json

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).astimezone().isoformat(timespec="milliseconds")
        level, colour = _LEVELS.get(record.levelno, (record.levelname, ""))
        fields = getattr(record, "fields", None)
        fields = dict(fields) if isinstance(fields, dict) else {}
        caller = f"{record.filename}:{record.lineno}"
        trace = self.formatException(record.exc_info) if record.exc_info else ""
        if self.as_json:
            payload = {"level": level.lower(), "timestamp": stamp, "logger": record.name,
                       "caller": caller, "msg": record.getMessage(), **fields}
            if trace:
                payload["stacktrace"] = trace
            return json.dumps(payload, default=str)
        parts = [stamp, f"{colour}{level}\x1b[0m" if colour else level, record.name,
                 caller, record.getMessage()]
        if fields:
            parts.append(json.dumps(fields, default=str))
        return "\t".join(parts) + (f"\n{trace}" if trace else "")


def init_logger(production: bool = False) -> logging.Logger:
    """Configure the application logger and return it."""
    global _handler
    logger = logging.getLogger(LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
    _handler = logging.StreamHandler()
    _handler.setFormatter(_Formatter(as_json=production))
    logger.addHandler(_handler)
    logger.setLevel(logging.INFO if production else logging.DEBUG)
    return logger


def get_logger() -> logging.Logger:
    """Return the application logger."""
    return logging.getLogger(LOGGER_NAME)