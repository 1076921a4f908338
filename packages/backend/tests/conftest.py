"""Shared test fixtures for the backend test suite."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

import pytest

from agrolytix.config.settings import AppSettings, DatabaseSettings, SmokeSettings
from agrolytix.ops.db_probe import DatabaseUnavailableError, ProbeResult


# ---------------------------------------------------------------------------
# Keep the developer's environment out of the settings under test
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run each test from an empty directory with no APP_/DB_/SMOKE_ overrides."""
    for key in list(os.environ):
        if key.startswith(("APP_", "DB_", "SMOKE_")):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """configure_logging() replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# ---------------------------------------------------------------------------
# Settings fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(environment="production", log_level="WARNING")


@pytest.fixture
def dev_settings() -> AppSettings:
    return AppSettings(environment="development", log_level="WARNING")


@pytest.fixture
def db_settings() -> DatabaseSettings:
    return DatabaseSettings(
        host="db.internal",
        port=5432,
        user="agro",
        password="p@ss:word",
        name="agrolytix-db",
    )


@pytest.fixture
def smoke_settings() -> SmokeSettings:
    return SmokeSettings(
        base_url="http://api.test/api",
        identifier="admin@agrolytix.com",
        secret="admin123",
    )


# ---------------------------------------------------------------------------
# Database probe stubs
# ---------------------------------------------------------------------------

class StubProbe:
    """Stands in for DatabaseProbe without a database."""

    def __init__(self, failure: DatabaseUnavailableError | None = None) -> None:
        self.failure = failure
        self.ping_calls = 0
        self.closed = False

    def ping(self) -> ProbeResult:
        self.ping_calls += 1
        if self.failure is not None:
            raise self.failure
        return ProbeResult(
            server_time=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
            database="agrolytix-db",
            version="PostgreSQL 16.2 on x86_64-pc-linux-gnu",
        )

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def healthy_probe() -> StubProbe:
    return StubProbe()


@pytest.fixture
def failing_probe() -> StubProbe:
    return StubProbe(
        DatabaseUnavailableError(
            reason="connection_refused",
            message="connection refused",
            hints=["Check that the PostgreSQL server is running"],
        )
    )
