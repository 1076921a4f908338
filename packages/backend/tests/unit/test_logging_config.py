"""Unit tests for JSON logging setup and redaction."""

from __future__ import annotations

import io
import json
import logging

from agrolytix.logging_config import JsonFormatter, configure_logging, redact


def test_configure_logging_replaces_root_handlers():
    configure_logging("DEBUG")
    configure_logging("WARNING")

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert root.level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    configure_logging("chatty")
    assert logging.getLogger().level == logging.INFO


def test_records_are_written_as_json_lines():
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)

    logging.getLogger("agrolytix.db").error(
        "Database ping failed: %s", "timeout", extra={"db_host": "db.internal", "sqlstate": None}
    )

    entry = json.loads(stream.getvalue().strip())
    assert entry["logger"] == "agrolytix.db"
    assert entry["message"] == "Database ping failed: timeout"
    assert entry["db_host"] == "db.internal"
    assert entry["sqlstate"] is None
    assert entry["timestamp"].endswith("Z")


def test_redact_masks_secrets_and_keeps_the_rest():
    text = "connect user=agro password=hunter2 host=db Authorization: Bearer abc.def"
    masked = redact(text)

    assert "hunter2" not in masked
    assert "abc.def" not in masked
    assert "user=agro" in masked
    assert "host=db" in masked
