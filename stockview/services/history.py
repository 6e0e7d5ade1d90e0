# stockview/services/history.py
"""
Historical chart series for one symbol and timeframe.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, ValidationError

from ..config import settings
from ..constants import DATE_LABEL_FORMAT, TIME_LABEL_FORMAT
from ..exceptions import UpstreamUnavailableError
from ..models import HistoricalPoint
from ..timeframes import Timeframe, map_interval_to_timeframe, map_timeframe_to_interval, parse_timeframe
from .mock_engine import DeterministicMockEngine
from .providers.yahoo import YahooFinanceClient

logger = logging.getLogger(__name__)


class _QuoteArrays(BaseModel):
    model_config = ConfigDict(extra="ignore")
    open: Optional[List[Optional[float]]] = None
    close: Optional[List[Optional[float]]] = None
    volume: Optional[List[Optional[float]]] = None


class _Indicators(BaseModel):
    model_config = ConfigDict(extra="ignore")
    quote: Optional[List[_QuoteArrays]] = None


class _ChartResult(BaseModel):
    model_config = ConfigDict(extra="ignore")
    timestamp: Optional[List[int]] = None
    indicators: Optional[_Indicators] = None


def _at(values: Optional[List[Optional[float]]], i: int) -> Optional[float]:
    if values is None or i >= len(values):
        return None
    return values[i]


def chart_result(payload: Any) -> Any:
    """chart.result[0] from a chart response, or None when absent."""
    try:
        results = payload["chart"]["result"]
    except (KeyError, TypeError):
        return None
    if not isinstance(results, list) or not results:
        return None
    return results[0]


def normalize_chart(result: Any, timezone: str | None = None) -> List[HistoricalPoint]:
    """
    Turn the upstream parallel arrays (timestamp + open/close/volume) into
    ordered points. Price is close, else open, else 0; volume defaults to 0.
    Payloads missing timestamp or indicators yield an empty list.
    """
    if not result:
        return []
    try:
        parsed = _ChartResult.model_validate(result)
    except ValidationError as e:
        logger.warning(f"Unusable chart payload: {e.errors()[0].get('msg')}")
        return []

    if not parsed.timestamp or parsed.indicators is None or not parsed.indicators.quote:
        return []

    arrays = parsed.indicators.quote[0]
    stamps = pd.to_datetime(parsed.timestamp, unit="s", utc=True).tz_convert(timezone or settings.timezone)

    points: List[HistoricalPoint] = []
    for i, ts in enumerate(stamps):
        price = _at(arrays.close, i) or _at(arrays.open, i) or 0
        volume = _at(arrays.volume, i) or 0
        points.append(HistoricalPoint(
            date=ts.strftime(DATE_LABEL_FORMAT),
            time=ts.strftime(TIME_LABEL_FORMAT),
            price=float(price),
            volume=int(volume),
            timestamp=ts.to_pydatetime(),
        ))
    return points


class HistoricalService:
    """One upstream chart request per symbol; mock series on failure."""

    def __init__(self, client: YahooFinanceClient, engine: DeterministicMockEngine):
        self.client = client
        self.engine = engine

    async def fetch_historical_series(
        self, symbol: str, timeframe: str | Timeframe | None
    ) -> List[HistoricalPoint]:
        tf = parse_timeframe(timeframe)
        interval, range_ = map_timeframe_to_interval(tf)
        try:
            payload = await self.client.chart(symbol, interval, range_)
        except UpstreamUnavailableError as e:
            logger.warning(f"Chart request failed for {symbol} ({interval}/{range_}), using mock data: {e}")
            return self.engine.generate_series(symbol, map_interval_to_timeframe(interval, range_))

        result = chart_result(payload)
        if result is None:
            logger.warning(f"Chart response for {symbol} has no result")
            return []
        return normalize_chart(result, self.engine.timezone)
