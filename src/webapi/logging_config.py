from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Third-party loggers that echo full request URLs at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore", "stripe")


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:12]


class CorrelationFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get("") or "-"
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, tagged with the service and request correlation id."""

    def __init__(self, service: str = "damage-assessment") -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", None) or correlation_id.get("") or None,
        }
        data = getattr(record, "extra_data", None)
        if data:
            entry["data"] = data
        if record.exc_info and record.exc_info[1]:
            entry["exc_type"] = type(record.exc_info[1]).__name__
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationFilter())
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-8s [%(name)s] [%(correlation_id)s] %(message)s"
        ))
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
