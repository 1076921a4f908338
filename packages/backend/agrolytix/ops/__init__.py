"""Operator tooling: credential hashing, database probe and smoke test."""

from agrolytix.ops.credentials import CredentialHasher
from agrolytix.ops.db_probe import DatabaseProbe, DatabaseUnavailableError, ProbeResult
from agrolytix.ops.smoke import SmokeReport, SmokeTester, SmokeTestFailure

__all__ = [
    "CredentialHasher",
    "DatabaseProbe",
    "DatabaseUnavailableError",
    "ProbeResult",
    "SmokeReport",
    "SmokeTestFailure",
    "SmokeTester",
]
