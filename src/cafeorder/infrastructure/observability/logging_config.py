from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from opentelemetry import trace

from cafeorder.api.middleware.request_id import get_request_id

_LOGGING_CONFIGURED = False

# attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}

# probes hit these every few seconds
_QUIET_LOGGERS = ("uvicorn.access",)


def _trace_fields() -> tuple[str | None, str | None]:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None, None
    return (
        format(span_context.trace_id, "032x"),
        format(span_context.span_id, "016x"),
    )


def _record_fields(record: logging.LogRecord) -> dict[str, Any]:
    trace_id, span_id = _trace_fields()
    fields: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
        "request_id": get_request_id(),
        "trace_id": trace_id,
        "span_id": span_id,
    }
    for key, value in vars(record).items():
        if key in _RESERVED_ATTRS or key in fields or value is None:
            continue
        fields[key] = value
    return fields


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = _record_fields(record)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ConsoleFormatter(logging.Formatter):
    """``LOG_FORMAT=console``: one readable line per record for local runs."""

    def format(self, record: logging.LogRecord) -> str:
        fields = _record_fields(record)
        head = f"{fields.pop('timestamp')} {fields.pop('level'):<7} {fields.pop('logger')}"
        message = fields.pop("message")
        context = " ".join(f"{key}={value}" for key, value in fields.items() if value is not None)
        line = f"{head} {message} {context}".rstrip()
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "console":
        return ConsoleFormatter()
    return JsonFormatter()


def configure_logging() -> None:
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(os.getenv("LOG_FORMAT", "json").lower()))
    root_logger.addHandler(handler)
    root_logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _LOGGING_CONFIGURED = True
