"""Unit tests for the request context middleware."""

from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI
from fastapi.testclient import TestClient

from agrolytix import envelope
from agrolytix.middleware.request_id import SECURITY_HEADERS, RequestIdMiddleware


def _make_app(access_log: bool = False) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestIdMiddleware, access_log=access_log)

    @app.get("/echo")
    async def echo():
        return envelope.success({"seen": True})

    return app


def test_generates_request_id():
    resp = TestClient(_make_app()).get("/echo")
    request_id = resp.headers["X-Request-ID"]
    assert uuid.UUID(request_id).version == 4


def test_propagates_incoming_request_id():
    resp = TestClient(_make_app()).get("/echo", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_security_headers_present():
    resp = TestClient(_make_app()).get("/echo")
    for name, value in SECURITY_HEADERS.items():
        assert resp.headers[name] == value


def test_access_log(caplog):
    with caplog.at_level(logging.INFO, logger="agrolytix.middleware.request_id"):
        TestClient(_make_app(access_log=True)).get("/echo", headers={"X-Request-ID": "req-1"})

    records = [r for r in caplog.records if r.name == "agrolytix.middleware.request_id"]
    assert len(records) == 1
    assert records[0].request_id == "req-1"
    assert records[0].status_code == 200
    assert records[0].path == "/echo"


def test_no_access_log_by_default(caplog):
    with caplog.at_level(logging.INFO, logger="agrolytix.middleware.request_id"):
        TestClient(_make_app()).get("/echo")

    assert not [r for r in caplog.records if r.name == "agrolytix.middleware.request_id"]
