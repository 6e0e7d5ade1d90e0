# stockview/services/charts.py
"""
Batched chart lookups: up to MAX_CHART_SYMBOLS symbols per call, fetched
concurrently, each summarized with latest price and change.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence, Tuple

from ..config import settings
from ..constants import MAX_CHART_SYMBOLS
from ..exceptions import BatchTooLargeError, EmptySymbolListError
from ..models import ChartSeries, HistoricalPoint
from ..timeframes import Timeframe, parse_timeframe
from .catalog import is_domestic
from .history import HistoricalService
from .mock_engine import price_change

logger = logging.getLogger(__name__)


def summarize_series(points: Sequence[HistoricalPoint]) -> Tuple[float, float, float]:
    """(latest price, change, percent change) from first to last point."""
    if not points:
        return 0.0, 0.0, 0.0
    first, last = points[0].price, points[-1].price
    change, change_pct = price_change(last, first)
    return last, change, change_pct


class ChartService:
    def __init__(self, history: HistoricalService, limit: int | None = None):
        self.history = history
        self.limit = min(limit or settings.chart_batch_limit, MAX_CHART_SYMBOLS)

    async def _chart_for(self, symbol: str, timeframe: Timeframe) -> ChartSeries:
        try:
            points = await self.history.fetch_historical_series(symbol, timeframe)
        except Exception as e:
            logger.error(f"Chart data failed for {symbol}: {e}")
            return ChartSeries(
                symbol=symbol,
                is_domestic=is_domestic(symbol),
                error=f"Failed to load chart data for {symbol}",
            )

        latest, change, change_pct = summarize_series(points)
        return ChartSeries(
            symbol=symbol,
            chart_data=points,
            latest_price=latest,
            price_change=change,
            percent_change=change_pct,
            is_domestic=is_domestic(symbol),
        )

    async def fetch_latest_charts(
        self,
        symbols: Sequence[str],
        timeframe: str | Timeframe | None = Timeframe.ONE_DAY,
    ) -> List[ChartSeries]:
        symbols = list(symbols or [])
        if not symbols:
            raise EmptySymbolListError()
        if len(symbols) > self.limit:
            raise BatchTooLargeError(len(symbols), self.limit)

        tf = parse_timeframe(timeframe)
        charts = await asyncio.gather(*(self._chart_for(s, tf) for s in symbols))
        return list(charts)

    async def __call__(self, symbols: Sequence[str], timeframe: Timeframe) -> List[ChartSeries]:
        return await self.fetch_latest_charts(symbols, timeframe)
