"""Credential hashing for operator scripts.

Stored credentials are bcrypt hashes (``$2a$``/``$2b$``, cost 10). This module
generates new hashes and checks a plaintext against a stored one; it is not
used by request handling.
"""

from __future__ import annotations

import logging

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10


class CredentialHasher:
    """bcrypt hashing and verification.

    Parameters
    ----------
    rounds:
        bcrypt cost factor (log2 of the iteration count). 4..31.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {rounds}")
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plain: str) -> str:
        return self._context.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True when ``plain`` matches ``hashed``.

        A malformed or unsupported hash is a mismatch, not an error.
        """
        try:
            return self._context.verify(plain, hashed)
        except (ValueError, TypeError) as exc:
            logger.warning("Stored hash could not be checked: %s", type(exc).__name__)
            return False

    @staticmethod
    def update_statement(
        hashed: str, email: str, table: str = "usuarios", column: str = "senha"
    ) -> str:
        """SQL an operator can paste to store ``hashed`` for ``email``."""
        safe_email = email.replace("'", "''")
        return f"UPDATE {table} SET {column} = '{hashed}' WHERE email = '{safe_email}';"
