"""Configuration module: application, database and smoke-test settings."""

from agrolytix.config.settings import AppSettings, DatabaseSettings, SmokeSettings

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "SmokeSettings",
]
