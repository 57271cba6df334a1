"""News lookup client."""

from __future__ import annotations

import time
from typing import Protocol

import httpx
from pydantic import ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from opg_screener.config import Settings
from opg_screener.news.schemas import NewsResponse
from opg_screener.types import NewsItem
from opg_screener.utils.logging import get_logger, log_news_lookup


class NewsLookupError(Exception):
    """Base news lookup error."""


class NewsTransportError(NewsLookupError):
    """Raised when the request could not be completed."""


class NewsStatusError(NewsLookupError):
    """Raised on a non-2xx response."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"unsuccessful_response_code: {status_code}")
        self.status_code = status_code


class NewsDecodeError(NewsLookupError):
    """Raised when the response body does not match the expected shape."""


class NewsLookup(Protocol):
    async def fetch(self, symbol: str) -> list[NewsItem]: ...


class SeekingAlphaNewsClient:
    """Fetch recent headlines for a ticker.

    The request URL is the configured base URL with the symbol appended, and
    the configured header name/value pair authenticates it.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.news_timeout)
        self._owns_client = client is None
        self._logger = get_logger("opg_screener.news.client")

    async def __aenter__(self) -> SeekingAlphaNewsClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, symbol: str) -> list[NewsItem]:
        """Fetch news items for one symbol in provider order."""
        started = time.perf_counter()
        try:
            items = await self._fetch_with_retry(symbol)
        except NewsLookupError as exc:
            log_news_lookup(
                self._logger,
                symbol=symbol,
                success=False,
                latency_ms=(time.perf_counter() - started) * 1000,
                reason=type(exc).__name__,
            )
            raise
        log_news_lookup(
            self._logger,
            symbol=symbol,
            success=True,
            latency_ms=(time.perf_counter() - started) * 1000,
            articles=len(items),
        )
        return items

    async def _fetch_with_retry(self, symbol: str) -> list[NewsItem]:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(NewsTransportError),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            stop=stop_after_attempt(self._settings.news_max_attempts),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._request(symbol)
        raise NewsTransportError("retry_exhausted")

    async def _request(self, symbol: str) -> list[NewsItem]:
        headers = {}
        if self._settings.api_key_header:
            headers[self._settings.api_key_header] = self._settings.api_key

        try:
            url = self._settings.seeking_alpha_url + symbol
            response = await self._client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise NewsTransportError(str(exc)) from exc

        if not response.is_success:
            raise NewsStatusError(response.status_code)

        try:
            payload = NewsResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise NewsDecodeError(f"malformed_news_body: {exc.errors()[0]['msg']}") from exc
        return payload.to_items()
