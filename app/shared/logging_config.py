"""
Structured logging configuration.

JSON lines in production, a readable single-line format in development.
Both carry the request correlation ID, and both pass ``extra`` fields
through the redaction in ``app.core.logging_utils`` so journal text,
symptoms and credentials never reach the log stream.

Usage (main.py):
    setup_logging(service_name="plusnote-health-journal")

JSON output, one object per line:
    {"timestamp": "...", "level": "INFO", "logger": "Plusnote.Analysis",
     "message": "Health pattern analysis completed",
     "service": "plusnote-health-journal", "correlation_id": "abc123",
     "user_id": "123", "health_score": 72, "score_label": "Good"}
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

from app.core.logging_utils import sanitize_for_logging
from app.shared.correlation import get_correlation_id

# Attributes every LogRecord carries; anything else came in via ``extra``.
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
}

NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "hpack",
    "anthropic",
    "asyncio",
]


def extra_fields(record: logging.LogRecord) -> dict:
    """Redacted ``extra`` fields of a record."""
    extras = {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }
    return sanitize_for_logging(extras) if extras else {}


class CorrelationIdFilter(logging.Filter):
    """Stamps each record with the current correlation ID ('-' outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    def __init__(self, service_name: str = "plusnote"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        correlation_id = getattr(record, "correlation_id", "-")
        if correlation_id != "-":
            entry["correlation_id"] = correlation_id

        entry.update(extra_fields(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class HumanReadableFormatter(logging.Formatter):
    """``time [LEVEL] [cid] logger: message | k=v, ...`` for local development."""

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = getattr(record, "correlation_id", "-")
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        extras = extra_fields(record)
        suffix = " | " + ", ".join(f"{k}={v}" for k, v in extras.items()) if extras else ""

        line = f"{timestamp} [{record.levelname}] [{correlation_id}] {record.name}: {record.getMessage()}{suffix}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    service_name: str,
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Configure root logging for the service.

    Args:
        service_name: Name reported in every JSON line
        level: DEBUG/INFO/WARNING/ERROR; defaults to LOG_LEVEL or INFO
        json_output: Defaults to True unless ENVIRONMENT=development
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level, logging.INFO)

    environment = os.getenv("ENVIRONMENT", "production").lower()
    if json_output is None:
        json_output = environment != "development"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(
        JSONFormatter(service_name=service_name) if json_output else HumanReadableFormatter()
    )
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(f"{service_name}.startup").info(
        "Logging configured",
        extra={"log_level": level, "json_output": json_output, "environment": environment},
    )
