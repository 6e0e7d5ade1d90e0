# stockview/models.py
"""
Typed shapes handed to callers. Upstream JSON never leaves the service layer;
it is converted into these models at the edge.
"""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Source = Literal["yahoo", "mock"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Quote(_Frozen):
    symbol: str
    short_name: str
    long_name: str | None = None
    price: float
    previous_close: float | None = None
    change: float
    change_percent: float
    volume: int
    market_cap: float | None = None
    fifty_two_week_low: float | None = None
    fifty_two_week_high: float | None = None
    sector: str | None = None
    industry: str | None = None
    is_domestic: bool
    market_time: int | None = None  # epoch seconds
    source: Source


class LightQuote(_Frozen):
    """Price-only quote for high-frequency polling."""
    symbol: str
    price: float
    change: float
    change_percent: float
    market_time: int | None = None
    is_domestic: bool
    source: Source


class HistoricalPoint(_Frozen):
    date: str   # YYYY-MM-DD
    time: str   # HH:MM
    price: float
    volume: int
    timestamp: datetime


class ChartSeries(_Frozen):
    symbol: str
    chart_data: list[HistoricalPoint] = Field(default_factory=list)
    latest_price: float = 0.0
    price_change: float = 0.0
    percent_change: float = 0.0
    is_domestic: bool = False
    error: str | None = None


class SearchResult(_Frozen):
    symbol: str
    short_name: str
    exchange: str | None = None
    quote_type: str | None = None
    score: int | None = None


class Pagination(_Frozen):
    page: int
    page_size: int
    total_items: int
    total_pages: int


class StockPage(_Frozen):
    stocks: list[Quote]
    pagination: Pagination
