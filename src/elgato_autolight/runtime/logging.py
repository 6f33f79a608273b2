"""Logging setup shared by the monitor and the CLI."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import sys
from typing import Any, Dict

import orjson

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_RESERVED_RECORD_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with any ``extra=`` fields merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_ATTRS or key.startswith("_"):
                continue
            payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        def _default(obj: Any) -> Any:
            try:
                return repr(obj)
            except Exception:  # pragma: no cover
                return "<unrepr-able>"

        return orjson.dumps(payload, default=_default).decode()


def configure_logging(
    level: str = "INFO",
    *,
    json_format: bool = False,
    name: str = "elgato-autolight",
) -> logging.Logger:
    """Route all records to stderr and return the named logger.

    stdout stays free for the human-readable output of the CLI commands.
    """

    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logging.getLogger(name)


__all__ = ["JsonFormatter", "TEXT_FORMAT", "configure_logging"]
