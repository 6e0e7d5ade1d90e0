# stockview/services/quotes.py
"""
Live quotes for a batch of symbols, with deterministic mock fallback.
"""
from __future__ import annotations

import logging
from typing import Any, List, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config import settings
from ..exceptions import (
    BatchTooLargeError,
    EmptySymbolListError,
    MalformedPayloadError,
    UpstreamUnavailableError,
)
from ..models import LightQuote, Quote
from .catalog import company_name, is_domestic
from .mock_engine import DeterministicMockEngine, industry_for, price_change, sector_for
from .providers.yahoo import YahooFinanceClient

logger = logging.getLogger(__name__)


class _UpstreamQuote(BaseModel):
    """One item of quoteResponse.result; only the fields we use."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    symbol: str
    short_name: str | None = Field(None, alias="shortName")
    long_name: str | None = Field(None, alias="longName")
    price: float = Field(alias="regularMarketPrice")
    previous_close: float | None = Field(None, alias="regularMarketPreviousClose")
    change: float | None = Field(None, alias="regularMarketChange")
    change_percent: float | None = Field(None, alias="regularMarketChangePercent")
    volume: int | None = Field(None, alias="regularMarketVolume")
    market_cap: float | None = Field(None, alias="marketCap")
    fifty_two_week_low: float | None = Field(None, alias="fiftyTwoWeekLow")
    fifty_two_week_high: float | None = Field(None, alias="fiftyTwoWeekHigh")
    sector: str | None = None
    industry: str | None = None
    market_time: int | None = Field(None, alias="regularMarketTime")

    def changes(self) -> tuple[float, float]:
        if self.change is not None and self.change_percent is not None:
            return self.change, self.change_percent
        if self.previous_close:
            return price_change(self.price, self.previous_close)
        return self.change or 0.0, self.change_percent or 0.0


def _quote_rows(payload: Any) -> List[_UpstreamQuote]:
    try:
        rows = payload["quoteResponse"]["result"]
    except (KeyError, TypeError) as e:
        raise MalformedPayloadError("quoteResponse.result", "missing") from e
    if not isinstance(rows, list):
        raise MalformedPayloadError("quoteResponse.result", "not a list")
    try:
        return [_UpstreamQuote.model_validate(row) for row in rows]
    except ValidationError as e:
        raise MalformedPayloadError("quote item", str(e.errors()[0].get("msg"))) from e


def _check_symbols(symbols: Sequence[str], limit: int | None = None) -> List[str]:
    symbols = [s for s in symbols if s]
    if not symbols:
        raise EmptySymbolListError()
    if limit is not None and len(symbols) > limit:
        raise BatchTooLargeError(len(symbols), limit)
    return symbols


class QuoteService:
    """Full and light quotes; upstream failures are replaced by mock data."""

    def __init__(self, client: YahooFinanceClient, engine: DeterministicMockEngine):
        self.client = client
        self.engine = engine

    def _to_quote(self, row: _UpstreamQuote) -> Quote:
        change, change_pct = row.changes()
        name = row.short_name or row.long_name or company_name(row.symbol)
        return Quote(
            symbol=row.symbol,
            short_name=name,
            long_name=row.long_name or name,
            price=row.price,
            previous_close=row.previous_close,
            change=change,
            change_percent=change_pct,
            volume=row.volume or 0,
            market_cap=row.market_cap,
            fifty_two_week_low=row.fifty_two_week_low,
            fifty_two_week_high=row.fifty_two_week_high,
            # v7 quotes rarely carry a classification; use the static one
            sector=row.sector or sector_for(row.symbol),
            industry=row.industry or industry_for(row.symbol),
            is_domestic=is_domestic(row.symbol),
            market_time=row.market_time,
            source="yahoo",
        )

    async def fetch_quotes(self, symbols: Sequence[str]) -> List[Quote]:
        symbols = _check_symbols(symbols)
        try:
            payload = await self.client.quote(symbols)
        except UpstreamUnavailableError as e:
            logger.warning(f"Quote request failed, using mock data for {len(symbols)} symbols: {e}")
            return self.engine.generate_quotes(symbols)
        return [self._to_quote(row) for row in _quote_rows(payload)]

    async def fetch_latest_prices(self, symbols: Sequence[str]) -> List[LightQuote]:
        """Price/change/time only, for frequent polling."""
        symbols = _check_symbols(symbols, settings.latest_prices_limit)
        try:
            payload = await self.client.quote(symbols)
        except UpstreamUnavailableError as e:
            logger.warning(f"Latest price request failed, using mock data for {len(symbols)} symbols: {e}")
            return self.engine.generate_light_quotes(symbols)

        out: List[LightQuote] = []
        for row in _quote_rows(payload):
            change, change_pct = row.changes()
            out.append(LightQuote(
                symbol=row.symbol,
                price=row.price,
                change=change,
                change_percent=change_pct,
                market_time=row.market_time,
                is_domestic=is_domestic(row.symbol),
                source="yahoo",
            ))
        return out
