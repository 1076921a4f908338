"""Structured JSON logging.

One JSON object per line: timestamp, level, logger, message, request_id.
Request and database context rides on the ``extra`` dict of a log call
(method, path, status_code, duration_ms for access logs; db_host, sqlstate
for database failures) and is copied into the entry when present.

Password, secret, token, credential and authorization values are masked
before anything is written, including exception tracebacks.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from typing import Any, TextIO

from agrolytix.models.responses import utc_timestamp

REDACTED = "[REDACTED]"

_KEY_VALUE_SECRET = re.compile(
    r"(password|passwd|secret|token|credential|authorization)\s*[=:]\s*\S+",
    re.IGNORECASE,
)
_BEARER_VALUE = re.compile(r"bearer\s+[A-Za-z0-9._~+/=-]+", re.IGNORECASE)

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

CONTEXT_FIELDS = ("method", "path", "status_code", "duration_ms", "db_host", "sqlstate")


def redact(text: str) -> str:
    """Mask bearer tokens and ``key=value`` secrets in free text."""
    text = _BEARER_VALUE.sub(f"Bearer {REDACTED}", text)
    return _KEY_VALUE_SECRET.sub(REDACTED, text)


class JsonFormatter(logging.Formatter):
    """Render a record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": utc_timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }
        entry.update(
            (name, getattr(record, name)) for name in CONTEXT_FIELDS if hasattr(record, name)
        )

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = redact(self.formatException(record.exc_info))

        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Send every log record to ``stream`` (stderr by default) as JSON.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output. Unknown level names fall back to INFO.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    name = level.upper()
    root.setLevel(getattr(logging, name) if name in _LEVELS else logging.INFO)
