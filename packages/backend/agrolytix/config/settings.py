"""Pydantic Settings for the backend and its operator tools.

Values come from environment variables (or a local ``.env`` file):

- ``APP_*``   application behaviour, e.g. APP_ENVIRONMENT=production
- ``DB_*``    PostgreSQL connection, e.g. DB_HOST=10.0.0.5 DB_NAME=agrolytix
- ``SMOKE_*`` end-to-end smoke test, e.g. SMOKE_IDENTIFIER=admin@example.com
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class AppSettings(BaseSettings):
    """Application configuration validated from environment variables."""

    environment: Literal["development", "production", "test"] = "development"
    log_level: str = "INFO"
    port: int = Field(default=3001, ge=1, le=65535)

    # Listing limits, exposed to page_params through app.state.page_limits
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:3001",
    ]

    model_config = {"env_prefix": "APP_", "env_file": ".env", "extra": "ignore"}

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection settings."""

    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    user: str = "postgres"
    password: str | None = None
    name: str = "agrolytix"
    connect_timeout_seconds: int = Field(default=5, ge=1)
    ssl: bool = False

    model_config = {"env_prefix": "DB_", "env_file": ".env", "extra": "ignore"}

    @property
    def url(self) -> URL:
        # URL.create escapes special characters in the password.
        return URL.create(
            "postgresql+psycopg",
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.name,
            query={
                "connect_timeout": str(self.connect_timeout_seconds),
                "sslmode": "require" if self.ssl else "disable",
            },
        )

    def describe(self) -> dict[str, str]:
        """Printable summary; the password is reported only as set or not set."""
        return {
            "host": self.host,
            "port": str(self.port),
            "user": self.user,
            "database": self.name,
            "password": "[SET]" if self.password else "[NOT SET]",
        }


class SmokeSettings(BaseSettings):
    """Target and credentials for the login + listing smoke test."""

    base_url: str = "http://localhost:3000/api"
    identifier: str = "admin@agrolytix.com"
    secret: str = ""
    timeout_seconds: float = Field(default=10.0, gt=0)

    model_config = {"env_prefix": "SMOKE_", "env_file": ".env", "extra": "ignore"}
