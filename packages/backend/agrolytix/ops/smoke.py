"""End-to-end smoke test: log in, then list products.

Talks to a running backend over HTTP and reads every body through
``parse_envelope``, so a deployment that drifts from the envelope contract
fails here as loudly as one that rejects the credentials.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from agrolytix.config.settings import SmokeSettings
from agrolytix.models.responses import (
    EnvelopeFormatError,
    ErrorEnvelope,
    PaginatedEnvelope,
    PaginationMeta,
    SuccessEnvelope,
    parse_envelope,
)

logger = logging.getLogger(__name__)


class SmokeTestFailure(Exception):
    """A smoke-test step did not produce the expected envelope."""

    def __init__(self, step: str, message: str, status_code: int | None = None) -> None:
        self.step = step
        self.message = message
        self.status_code = status_code
        super().__init__(f"{step}: {message}")


@dataclass(frozen=True)
class SmokeReport:
    status_code: int
    item_count: int
    pagination: PaginationMeta | None
    message: str


def _count_items(data: Any) -> int:
    """Items in a listing payload: a list, or a dict holding one list."""
    if isinstance(data, list):
        return len(data)
    if isinstance(data, dict):
        for value in data.values():
            if isinstance(value, list):
                return len(value)
    return 0


class SmokeTester:
    """Login + listing round trip against a running backend.

    Parameters
    ----------
    settings:
        Target URL and credentials.
    transport:
        Optional httpx transport, used to point the client at a mock.
    """

    def __init__(
        self,
        settings: SmokeSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._base_url = settings.base_url.rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._settings.timeout_seconds,
            transport=self._transport,
            headers={"Content-Type": "application/json"},
        )

    @staticmethod
    def _read(step: str, response: httpx.Response):
        try:
            envelope = parse_envelope(response.json())
        except (ValueError, EnvelopeFormatError) as exc:
            raise SmokeTestFailure(
                step, f"response is not a valid envelope ({exc})", response.status_code
            ) from exc
        if isinstance(envelope, ErrorEnvelope):
            raise SmokeTestFailure(step, envelope.message, response.status_code)
        return envelope

    async def login(self, client: httpx.AsyncClient) -> str:
        """Authenticate and return the bearer token."""
        response = await client.post(
            "/auth/login",
            json={"identifier": self._settings.identifier, "secret": self._settings.secret},
        )
        envelope = self._read("login", response)

        data = envelope.data if isinstance(envelope.data, dict) else {}
        token = data.get("token") or response.json().get("token")
        if not isinstance(token, str) or not token:
            raise SmokeTestFailure("login", "success envelope carries no token", response.status_code)

        logger.info("Login succeeded for %s", self._settings.identifier)
        return token

    async def list_products(
        self,
        client: httpx.AsyncClient,
        token: str,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[int, SuccessEnvelope[Any] | PaginatedEnvelope[Any]]:
        response = await client.get(
            "/products",
            params={"page": page, "page_size": page_size},
            headers={"Authorization": f"Bearer {token}"},
        )
        return response.status_code, self._read("list_products", response)

    async def run(self) -> SmokeReport:
        """Run login then one listing call.

        Raises
        ------
        SmokeTestFailure
            On an error envelope, a malformed body or a missing token.
        httpx.HTTPError
            On transport failures (connection refused, timeout).
        """
        async with self._client() as client:
            token = await self.login(client)
            status_code, envelope = await self.list_products(client, token)

        pagination = envelope.pagination if isinstance(envelope, PaginatedEnvelope) else None
        report = SmokeReport(
            status_code=status_code,
            item_count=_count_items(envelope.data),
            pagination=pagination,
            message=envelope.message,
        )
        logger.info("Listing returned %d item(s)", report.item_count)
        return report
