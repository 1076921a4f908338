"""PostgreSQL connectivity probe.

Opens one connection through SQLAlchemy (psycopg driver), runs a trivial
query and reports server time, database name and server version. Failures
are classified so operators get an actionable hint instead of a raw driver
traceback. Used by ``agrolytix-ops db check`` and ``GET /api/health``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from agrolytix.config.settings import DatabaseSettings

logger = logging.getLogger(__name__)

_PING_SQL = text(
    "SELECT NOW() AS server_time, current_database() AS database, version() AS version"
)
_TABLES_SQL = text(
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = :schema ORDER BY table_name"
)

_HINTS: dict[str, list[str]] = {
    "connection_refused": [
        "Check that the PostgreSQL server is running",
        "Check that DB_HOST points at the right machine",
        "Check that DB_PORT is open on the server firewall",
    ],
    "host_not_found": [
        "Host name could not be resolved; check DB_HOST",
    ],
    "authentication": [
        "Check DB_USER and DB_PASSWORD",
        "Remove surrounding quotes from DB_PASSWORD in .env",
        "Try connecting manually with psql using the same credentials",
    ],
    "database_missing": [
        "Check DB_NAME; the database does not exist on this server",
    ],
    "timeout": [
        "The server did not answer in time; check network reachability",
        "Raise DB_CONNECT_TIMEOUT_SECONDS if the server is slow to accept connections",
    ],
    "unknown": [],
}


@dataclass(frozen=True)
class ProbeResult:
    server_time: datetime
    database: str
    version: str

    @property
    def short_version(self) -> str:
        """``PostgreSQL 16.2`` out of the full ``version()`` banner."""
        return " ".join(self.version.split()[:2])


class DatabaseUnavailableError(Exception):
    """The database could not be reached or queried."""

    def __init__(
        self,
        reason: str,
        message: str,
        sqlstate: str | None = None,
        hints: list[str] | None = None,
    ) -> None:
        self.reason = reason
        self.message = message
        self.sqlstate = sqlstate
        self.hints = hints or []
        super().__init__(message)


def classify_failure(exc: BaseException) -> str:
    """Classify a connection failure from the driver's message."""
    text_ = str(exc).lower()
    if "connection refused" in text_:
        return "connection_refused"
    if (
        "could not translate host name" in text_
        or "name or service not known" in text_
        or "nodename nor servname" in text_
    ):
        return "host_not_found"
    if "password" in text_ or "scram" in text_ or "authentication failed" in text_:
        return "authentication"
    if "database" in text_ and "does not exist" in text_:
        return "database_missing"
    if "timeout" in text_ or "timed out" in text_:
        return "timeout"
    return "unknown"


def _unavailable(exc: SQLAlchemyError) -> DatabaseUnavailableError:
    source: BaseException = exc.orig if isinstance(exc, DBAPIError) and exc.orig else exc
    reason = classify_failure(source)
    lines = str(source).strip().splitlines()
    sqlstate = getattr(source, "sqlstate", None)
    return DatabaseUnavailableError(
        reason=reason,
        message=lines[0] if lines else type(source).__name__,
        sqlstate=sqlstate if isinstance(sqlstate, str) else None,
        hints=list(_HINTS[reason]),
    )


class DatabaseProbe:
    """Connectivity checks against one PostgreSQL database.

    Parameters
    ----------
    settings:
        Connection settings, read from ``DB_*`` variables when omitted.
    engine:
        Pre-built SQLAlchemy engine; when given, no engine is created from
        ``settings``.
    """

    def __init__(
        self,
        settings: DatabaseSettings | None = None,
        *,
        engine: Engine | None = None,
    ) -> None:
        self._settings = settings or DatabaseSettings()
        self._engine = engine or create_engine(
            self._settings.url,
            pool_pre_ping=True,
            pool_size=1,
            max_overflow=0,
        )

    @property
    def settings(self) -> DatabaseSettings:
        return self._settings

    def ping(self) -> ProbeResult:
        """Connect and run a trivial query.

        Raises
        ------
        DatabaseUnavailableError
            If the connection or the query fails.
        """
        try:
            with self._engine.connect() as conn:
                row = conn.execute(_PING_SQL).mappings().one()
        except SQLAlchemyError as exc:
            error = _unavailable(exc)
            logger.error(
                "Database ping failed: %s",
                error.reason,
                extra={"db_host": self._settings.host, "sqlstate": error.sqlstate},
            )
            raise error from exc

        return ProbeResult(
            server_time=row["server_time"],
            database=row["database"],
            version=row["version"],
        )

    def list_tables(self, schema: str = "public") -> list[str]:
        """Names of the tables in ``schema``, sorted."""
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(_TABLES_SQL, {"schema": schema}).scalars().all()
        except SQLAlchemyError as exc:
            raise _unavailable(exc) from exc
        return list(rows)

    def close(self) -> None:
        self._engine.dispose()
