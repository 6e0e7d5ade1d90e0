# stockview/services/market_data.py
"""
Default wiring of the market-data services and module-level entry points
used by the API, the CLI and other collaborators.
"""
from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from ..config import settings
from ..models import ChartSeries, HistoricalPoint, LightQuote, Quote, SearchResult, StockPage
from ..timeframes import IntervalRange, Timeframe, map_timeframe_to_interval as _map_timeframe
from .batch import BatchOrchestrator, CancellationToken, PartialCallback, ProgressCallback
from .catalog import match_listing, paginate
from .charts import ChartService
from .history import HistoricalService
from .mock_engine import DeterministicMockEngine
from .providers.yahoo import YahooFinanceClient
from .quotes import QuoteService
from .search import SearchService


class MarketData:
    """One upstream client and one mock engine shared by every service."""

    def __init__(
        self,
        client: YahooFinanceClient | None = None,
        engine: DeterministicMockEngine | None = None,
    ):
        self.client = client or YahooFinanceClient()
        self.engine = engine or DeterministicMockEngine()
        self.quotes = QuoteService(self.client, self.engine)
        self.history = HistoricalService(self.client, self.engine)
        self.charts = ChartService(self.history)
        self.search = SearchService(self.client)
        # shared so a new refresh can cancel the previous one's pending progress reset
        self.batch = BatchOrchestrator(self.charts)

    async def list_stocks(self, query: str = "", page: int = 1, page_size: int | None = None) -> StockPage:
        matched = match_listing(query)
        symbols, pagination = paginate(matched, page, page_size or settings.page_size)
        stocks = await self.quotes.fetch_quotes(symbols) if symbols else []
        return StockPage(stocks=stocks, pagination=pagination)

    async def aclose(self) -> None:
        await self.client.aclose()


_default: MarketData | None = None


def get_market_data() -> MarketData:
    global _default
    if _default is None:
        _default = MarketData()
    return _default


async def close_market_data() -> None:
    global _default
    if _default is not None:
        await _default.aclose()
        _default = None


# --- public operations ---

async def fetch_quotes(symbols: Sequence[str]) -> List[Quote]:
    return await get_market_data().quotes.fetch_quotes(symbols)


async def fetch_latest_prices(symbols: Sequence[str]) -> List[LightQuote]:
    return await get_market_data().quotes.fetch_latest_prices(symbols)


async def fetch_historical_series(symbol: str, timeframe: str | Timeframe | None) -> List[HistoricalPoint]:
    return await get_market_data().history.fetch_historical_series(symbol, timeframe)


async def fetch_latest_charts(symbols: Sequence[str], timeframe: str | Timeframe | None = Timeframe.ONE_DAY) -> List[ChartSeries]:
    return await get_market_data().charts.fetch_latest_charts(symbols, timeframe)


async def fetch_charts_for_symbols(
    symbols: Sequence[str],
    timeframe: str | Timeframe | None = Timeframe.ONE_DAY,
    on_progress: ProgressCallback | None = None,
    on_partial: PartialCallback | None = None,
    *,
    existing: Mapping[str, ChartSeries] | None = None,
    cancel_token: CancellationToken | None = None,
) -> Dict[str, ChartSeries]:
    return await get_market_data().batch.fetch_charts_for_symbols(
        symbols, timeframe, on_progress, on_partial,
        existing=existing, cancel_token=cancel_token,
    )


async def search_stocks(query: str) -> List[SearchResult]:
    return await get_market_data().search.search(query)


async def list_stocks(query: str = "", page: int = 1, page_size: int | None = None) -> StockPage:
    return await get_market_data().list_stocks(query, page, page_size)


def map_timeframe_to_interval(timeframe: str | Timeframe | None) -> IntervalRange:
    return _map_timeframe(timeframe)


def clear_mock_cache() -> None:
    """Drop all generated mock data (test isolation)."""
    if _default is not None:
        _default.engine.reset()
