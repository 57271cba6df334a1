from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from opg_screener.config import Settings
from opg_screener.news.client import (
    NewsDecodeError,
    NewsStatusError,
    NewsTransportError,
    SeekingAlphaNewsClient,
)

_PAYLOAD = {
    "data": [
        {"attributes": {"publishOn": "2024-03-01T08:30:00-05:00", "title": "XYZ beats estimates"}},
        {"attributes": {"publishOn": "2024-02-28T16:00:00-05:00", "title": "XYZ guidance raised"}},
    ],
    "included": [],
    "meta": {"page": {"size": 2}},
}


def _settings() -> Settings:
    return Settings(
        seeking_alpha_url="https://news.example.com/list?id=",
        api_key_header="X-Api-Key",
        api_key="secret",
    )


def _fetch(handler: object, symbol: str = "XYZ", settings: Settings | None = None) -> object:
    async def _run() -> object:
        transport = httpx.MockTransport(handler)  # type: ignore[arg-type]
        async with httpx.AsyncClient(transport=transport) as http:
            client = SeekingAlphaNewsClient(settings or _settings(), client=http)
            return await client.fetch(symbol)

    return asyncio.run(_run())


def test_fetch_parses_items_in_order_and_sends_auth_header() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("X-Api-Key", "")
        return httpx.Response(200, json=_PAYLOAD)

    items = _fetch(handler)
    assert seen["url"] == "https://news.example.com/list?id=XYZ"
    assert seen["key"] == "secret"
    assert [item.headline for item in items] == ["XYZ beats estimates", "XYZ guidance raised"]
    assert items[0].published_at.astimezone(timezone.utc) == datetime(
        2024, 3, 1, 13, 30, tzinfo=timezone.utc
    )


def test_fetch_empty_data_returns_empty_list() -> None:
    items = _fetch(lambda request: httpx.Response(200, json={"data": []}))
    assert items == []


def test_non_success_status_raises() -> None:
    with pytest.raises(NewsStatusError) as info:
        _fetch(lambda request: httpx.Response(429, text="slow down"))
    assert info.value.status_code == 429


def test_malformed_body_raises() -> None:
    with pytest.raises(NewsDecodeError):
        _fetch(lambda request: httpx.Response(200, text="<html>not json</html>"))
    with pytest.raises(NewsDecodeError):
        _fetch(lambda request: httpx.Response(200, json={"data": [{"attributes": {}}]}))


def test_transport_failure_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NewsTransportError):
        _fetch(handler)
