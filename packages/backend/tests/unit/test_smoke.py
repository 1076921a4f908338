"""Unit tests for the login + listing smoke test."""

from __future__ import annotations

import json

import httpx
import pytest

from agrolytix.config.settings import SmokeSettings
from agrolytix.ops.smoke import SmokeTester, SmokeTestFailure

_TS = "2024-05-01T12:00:00.000Z"


def _login_ok(token: str = "eyJhbGciOiJIUzI1NiJ9.payload.sig") -> dict:
    return {"ok": True, "message": "Login successful", "data": {"token": token}, "timestamp": _TS}


def _listing_ok(items: list) -> dict:
    return {
        "ok": True,
        "message": "Data listed successfully",
        "data": items,
        "pagination": {
            "total": 25,
            "current_page": 1,
            "page_size": 10,
            "total_pages": 3,
            "has_next": True,
            "has_previous": False,
        },
        "timestamp": _TS,
    }


def _transport(login_body: dict, listing_body: dict | None = None, seen: list | None = None,
               login_status: int = 200, listing_status: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path == "/api/auth/login":
            return httpx.Response(login_status, json=login_body)
        if request.url.path == "/api/products":
            return httpx.Response(listing_status, json=listing_body)
        return httpx.Response(404, json={"ok": False, "message": "Route not found", "timestamp": _TS})

    return httpx.MockTransport(handler)


class TestSmokeTester:
    @pytest.mark.asyncio
    async def test_full_run(self, smoke_settings: SmokeSettings) -> None:
        seen: list[httpx.Request] = []
        tester = SmokeTester(
            smoke_settings,
            transport=_transport(_login_ok("tok-1"), _listing_ok([{"id": 1}, {"id": 2}]), seen),
        )

        report = await tester.run()

        assert report.status_code == 200
        assert report.item_count == 2
        assert report.pagination is not None
        assert report.pagination.total_pages == 3

        login_request, listing_request = seen
        assert json.loads(login_request.content) == {
            "identifier": "admin@agrolytix.com",
            "secret": "admin123",
        }
        assert listing_request.headers["Authorization"] == "Bearer tok-1"
        assert listing_request.url.params["page"] == "1"
        assert listing_request.url.params["page_size"] == "10"

    @pytest.mark.asyncio
    async def test_token_at_top_level(self, smoke_settings: SmokeSettings) -> None:
        login = {"ok": True, "message": "Login successful", "data": None, "token": "tok-top", "timestamp": _TS}
        seen: list[httpx.Request] = []
        tester = SmokeTester(smoke_settings, transport=_transport(login, _listing_ok([]), seen))

        await tester.run()

        assert seen[1].headers["Authorization"] == "Bearer tok-top"

    @pytest.mark.asyncio
    async def test_items_nested_in_object(self, smoke_settings: SmokeSettings) -> None:
        listing = {
            "ok": True,
            "message": "Operation completed successfully",
            "data": {"products": [{"id": 1}, {"id": 2}, {"id": 3}], "total": 3},
            "timestamp": _TS,
        }
        tester = SmokeTester(smoke_settings, transport=_transport(_login_ok(), listing))

        report = await tester.run()

        assert report.item_count == 3
        assert report.pagination is None

    @pytest.mark.asyncio
    async def test_login_rejected(self, smoke_settings: SmokeSettings) -> None:
        rejected = {"ok": False, "message": "Invalid credentials", "timestamp": _TS}
        tester = SmokeTester(smoke_settings, transport=_transport(rejected, login_status=401))

        with pytest.raises(SmokeTestFailure) as exc_info:
            await tester.run()

        assert exc_info.value.step == "login"
        assert exc_info.value.message == "Invalid credentials"
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_login_without_token(self, smoke_settings: SmokeSettings) -> None:
        login = {"ok": True, "message": "Login successful", "data": {"user": "admin"}, "timestamp": _TS}
        tester = SmokeTester(smoke_settings, transport=_transport(login))

        with pytest.raises(SmokeTestFailure, match="no token"):
            await tester.run()

    @pytest.mark.asyncio
    async def test_listing_error_envelope(self, smoke_settings: SmokeSettings) -> None:
        denied = {"ok": False, "message": "Token expired.", "timestamp": _TS}
        tester = SmokeTester(smoke_settings, transport=_transport(_login_ok(), denied, listing_status=401))

        with pytest.raises(SmokeTestFailure) as exc_info:
            await tester.run()

        assert exc_info.value.step == "list_products"
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_body_outside_the_envelope(self, smoke_settings: SmokeSettings) -> None:
        legacy = {"success": True, "data": []}
        tester = SmokeTester(smoke_settings, transport=_transport(_login_ok(), legacy))

        with pytest.raises(SmokeTestFailure, match="not a valid envelope"):
            await tester.run()

    @pytest.mark.asyncio
    async def test_non_json_body(self, smoke_settings: SmokeSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        tester = SmokeTester(smoke_settings, transport=httpx.MockTransport(handler))

        with pytest.raises(SmokeTestFailure) as exc_info:
            await tester.run()
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self, smoke_settings: SmokeSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        tester = SmokeTester(smoke_settings, transport=httpx.MockTransport(handler))

        with pytest.raises(httpx.ConnectError):
            await tester.run()
