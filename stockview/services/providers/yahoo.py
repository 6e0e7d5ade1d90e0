# stockview/services/providers/yahoo.py
from __future__ import annotations

import logging
from typing import Any, Dict, Sequence
from urllib.parse import quote

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from ...config import settings
from ...constants import CHART_PATH, QUOTE_PATH, SEARCH_PATH
from ...exceptions import RateLimitError, UpstreamUnavailableError
from ...utils.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


def _parse_retry_after(value: str | None) -> float | None:
    try:
        secs = float(value) if value is not None else 0.0
    except ValueError:
        return None
    return secs if secs > 0 else None


class YahooFinanceClient:
    """
    Thin async client for the public Yahoo Finance JSON endpoints.

    The endpoints are unauthenticated and routinely refuse server-side
    traffic, so requests carry browser-like headers. Every failure mode
    (offline mode, 429 cool-down, network error, non-2xx, unparsable body)
    surfaces as UpstreamUnavailableError; callers decide on the fallback.
    """
    name = "yahoo"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        retries: int | None = None,
        limiter: RateLimiter | None = None,
        offline: bool | None = None,
        debug: bool | None = None,
    ):
        self.base_url = (base_url or settings.yahoo_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.yahoo_timeout
        self.retries = max(1, retries if retries is not None else settings.yahoo_retries)
        self.offline = offline if offline is not None else settings.offline
        self.debug = debug if debug is not None else settings.yahoo_debug
        self.limiter = limiter or RateLimiter(rpm=settings.yahoo_rpm, burst=settings.yahoo_burst)
        self._client = client or httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)

    # ---------- internal helpers ----------

    def _headers(self) -> Dict[str, str]:
        return {
            "User-Agent": settings.yahoo_user_agent,
            "Accept": "application/json",
            "Accept-Language": settings.yahoo_accept_language,
            "Referer": "https://finance.yahoo.com/",
            "Accept-Encoding": "gzip, deflate",
            "Cache-Control": "no-cache",
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "none",
            "Sec-Fetch-User": "?1",
            "Upgrade-Insecure-Requests": "1",
        }

    async def get_json(self, path: str, params: Dict[str, str] | None = None) -> Any:
        """GET `path` and return the decoded JSON body."""
        if self.offline:
            raise UpstreamUnavailableError(path, reason="offline mode")

        cooldown = self.limiter.blocked_for()
        if cooldown > 0:
            raise RateLimitError(path, retry_after=cooldown)

        await self.limiter.wait()
        url = f"{self.base_url}{path}"

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retries),
                wait=wait_exponential_jitter(initial=0.5, max=4),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = await self._client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(path, reason=str(e) or type(e).__name__) from e

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            if retry_after:
                self.limiter.block_for(retry_after)
            raise RateLimitError(path, retry_after=retry_after)

        if not response.is_success:
            if self.debug:
                logger.debug(f"[yahoo] {response.status_code} for {path}: {response.text[:160]}")
            raise UpstreamUnavailableError(path, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailableError(path, reason="response body is not JSON") from e

    # ---------- endpoints ----------

    async def quote(self, symbols: Sequence[str]) -> Any:
        return await self.get_json(QUOTE_PATH, {"symbols": ",".join(symbols)})

    async def chart(self, symbol: str, interval: str, range_: str) -> Any:
        path = CHART_PATH.format(symbol=quote(symbol, safe=""))
        return await self.get_json(path, {"interval": interval, "range": range_})

    async def search(self, query: str, quotes_count: int = 20) -> Any:
        return await self.get_json(
            SEARCH_PATH,
            {"q": query, "quotesCount": str(quotes_count), "newsCount": "0"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "YahooFinanceClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
