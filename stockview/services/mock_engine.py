# stockview/services/mock_engine.py
"""
Deterministic synthetic market data.

Every value is derived from the symbol string alone through `symbol_hash`
(sum of character code points). That hash is part of the contract: cached
charts and quotes must be reproducible across runs, so it must not be swapped
for Python's salted `hash()` or a different digest.
"""
from __future__ import annotations

import logging
import math
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Tuple

import pandas as pd

from ..config import settings
from ..constants import (
    DATE_LABEL_FORMAT,
    DEFAULT_VOLATILITY,
    FIFTY_TWO_WEEK_HIGH,
    FIFTY_TWO_WEEK_LOW,
    MIN_MOCK_PRICE,
    PREV_CLOSE_FACTOR,
    PREV_CLOSE_SUFFIX,
    TIME_LABEL_FORMAT,
)
from ..models import HistoricalPoint, LightQuote, Quote
from ..timeframes import Timeframe, parse_timeframe
from .catalog import company_name, is_domestic

logger = logging.getLogger(__name__)

# Realistic anchors for well-known listings (domestic prices in KRW)
BASE_PRICES: Dict[str, float] = {
    "005930.KS": 72500,   # Samsung Electronics
    "000660.KS": 135000,  # SK Hynix
    "051910.KS": 580000,  # LG Chem
    "035420.KS": 213000,  # NAVER
    "005380.KS": 185000,  # Hyundai Motor
    "000270.KS": 87500,   # Kia
    "068270.KS": 176000,  # Celltrion
    "035720.KS": 47500,   # Kakao
    "207940.KS": 780000,  # Samsung Biologics
    "006400.KS": 710000,  # Samsung SDI
    "AAPL": 175.5,
    "MSFT": 380.2,
    "GOOGL": 142.75,
    "AMZN": 178.3,
    "META": 480.15,
    "TSLA": 175.4,
    "NVDA": 880.25,
}

VOLATILITY: Dict[str, float] = {
    "TSLA": 0.03,
    "NVDA": 0.025,
    "AAPL": 0.01,
    "MSFT": 0.01,
    "GOOGL": 0.015,
    "AMZN": 0.02,
    "META": 0.018,
    "005930.KS": 0.01,
    "000660.KS": 0.02,
    "051910.KS": 0.015,
}

SECTORS: Tuple[str, ...] = (
    "Technology",
    "Healthcare",
    "Financial Services",
    "Consumer Cyclical",
    "Communication Services",
    "Industrials",
    "Consumer Defensive",
    "Energy",
    "Basic Materials",
    "Real Estate",
    "Utilities",
)

INDUSTRIES: Dict[str, Tuple[str, ...]] = {
    "Technology": ("Software", "Semiconductors", "Hardware", "IT Services"),
    "Healthcare": ("Pharmaceuticals", "Medical Devices", "Biotechnology", "Healthcare Services"),
    "Financial Services": ("Banks", "Insurance", "Asset Management", "Financial Technology"),
    "Consumer Cyclical": ("Retail", "Automotive", "Entertainment", "Hospitality"),
    "Communication Services": ("Telecom", "Media", "Social Media", "Entertainment"),
    "Industrials": ("Aerospace", "Defense", "Machinery", "Transportation"),
    "Consumer Defensive": ("Food", "Beverages", "Household Products", "Personal Products"),
    "Energy": ("Oil & Gas", "Renewable Energy", "Energy Equipment", "Energy Services"),
    "Basic Materials": ("Chemicals", "Metals & Mining", "Paper & Forest Products", "Construction Materials"),
    "Real Estate": ("REITs", "Real Estate Services", "Development", "Property Management"),
    "Utilities": ("Electric Utilities", "Gas Utilities", "Water Utilities", "Renewable Utilities"),
}

STATIC_SECTORS: Dict[str, str] = {
    "005930.KS": "Technology",
    "000660.KS": "Technology",
    "051910.KS": "Basic Materials",
    "035420.KS": "Communication Services",
    "005380.KS": "Consumer Cyclical",
    "000270.KS": "Consumer Cyclical",
    "068270.KS": "Healthcare",
    "035720.KS": "Communication Services",
    "207940.KS": "Healthcare",
    "006400.KS": "Technology",
    "055550.KS": "Financial Services",
    "105560.KS": "Financial Services",
    "AAPL": "Technology",
    "MSFT": "Technology",
    "GOOGL": "Communication Services",
    "AMZN": "Consumer Cyclical",
    "META": "Communication Services",
    "TSLA": "Consumer Cyclical",
    "NVDA": "Technology",
    "JPM": "Financial Services",
    "JNJ": "Healthcare",
    "XOM": "Energy",
}

STATIC_INDUSTRIES: Dict[str, str] = {
    "005930.KS": "Semiconductors",
    "000660.KS": "Semiconductors",
    "051910.KS": "Chemicals",
    "035420.KS": "Internet Content & Information",
    "005380.KS": "Automotive",
    "000270.KS": "Automotive",
    "068270.KS": "Biotechnology",
    "035720.KS": "Internet Content & Information",
    "207940.KS": "Biotechnology",
    "006400.KS": "Electronic Components",
    "055550.KS": "Banks",
    "105560.KS": "Banks",
    "AAPL": "Consumer Electronics",
    "MSFT": "Software-Infrastructure",
    "GOOGL": "Internet Content & Information",
    "AMZN": "Internet Retail",
    "META": "Internet Content & Information",
    "TSLA": "Auto Manufacturers",
    "NVDA": "Semiconductors",
    "JPM": "Banks-Diversified",
    "JNJ": "Drug Manufacturers-General",
    "XOM": "Oil & Gas Integrated",
}

# Steps walked back from "now"; the series holds POINTS + 1 observations
POINTS: Dict[Timeframe, int] = {
    Timeframe.ONE_DAY: 78,
    Timeframe.ONE_WEEK: 32,
    Timeframe.ONE_MONTH: 30,
    Timeframe.THREE_MONTH: 90,
    Timeframe.ONE_YEAR: 52,
    Timeframe.FIVE_YEAR: 60,
}

STEPS: Dict[Timeframe, Any] = {
    Timeframe.ONE_DAY: pd.Timedelta(minutes=5),
    Timeframe.ONE_WEEK: pd.Timedelta(hours=4),
    Timeframe.ONE_MONTH: pd.Timedelta(days=1),
    Timeframe.THREE_MONTH: pd.Timedelta(days=3),
    Timeframe.ONE_YEAR: pd.Timedelta(weeks=1),
    Timeframe.FIVE_YEAR: pd.DateOffset(months=2),
}


# ---------- pure derivations ----------

def symbol_hash(key: str) -> int:
    """Sum of the character code points of `key`."""
    return sum(ord(ch) for ch in key)


def base_price(symbol: str) -> float:
    if symbol in BASE_PRICES:
        return float(BASE_PRICES[symbol])
    return float(50 + symbol_hash(symbol) % 200)


def mock_price(base: float, key: str) -> float:
    return round(base + base * ((symbol_hash(key) % 100) / 1000), 2)


def price_change(current: float, previous: float) -> Tuple[float, float]:
    """Absolute and percent change, each rounded to 2 decimals."""
    change = round(current - previous, 2)
    if not previous:
        return change, 0.0
    return change, round(change / previous * 100, 2)


def volatility_for(symbol: str) -> float:
    return VOLATILITY.get(symbol, DEFAULT_VOLATILITY)


def points_for(timeframe: str | Timeframe) -> int:
    return POINTS[parse_timeframe(timeframe)]


def sector_for(symbol: str) -> str:
    if symbol in STATIC_SECTORS:
        return STATIC_SECTORS[symbol]
    return SECTORS[symbol_hash(symbol) % len(SECTORS)]


def industry_for(symbol: str) -> str:
    if symbol in STATIC_INDUSTRIES:
        return STATIC_INDUSTRIES[symbol]
    options = INDUSTRIES.get(sector_for(symbol), INDUSTRIES["Technology"])
    return options[symbol_hash(symbol) % len(options)]


# ---------- cache ----------

CacheKey = Tuple[str, Optional[str], str]


class MockCache:
    """
    Process-lifetime store of generated values, keyed by
    (symbol, timeframe, kind). Entries never expire; `reset()` is for tests.
    """

    def __init__(self) -> None:
        self._entries: Dict[Hashable, Any] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: CacheKey, factory: Callable[[], Any]) -> Any:
        # Held across the factory so concurrent first lookups agree
        with self._lock:
            if key not in self._entries:
                self._entries[key] = factory()
            return self._entries[key]

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


# ---------- engine ----------

class DeterministicMockEngine:
    """Synthetic quotes and chart series, reproducible per symbol/timeframe."""

    def __init__(
        self,
        cache: MockCache | None = None,
        clock: Callable[[], datetime] | None = None,
        timezone: str | None = None,
    ):
        self.cache = cache if cache is not None else MockCache()
        self.timezone = timezone or settings.timezone
        self.clock = clock or self._system_clock

    def _system_clock(self) -> datetime:
        return pd.Timestamp.now(tz=self.timezone).to_pydatetime()

    def now(self) -> pd.Timestamp:
        ts = pd.Timestamp(self.clock())
        if ts.tzinfo is None:
            return ts.tz_localize(self.timezone)
        return ts.tz_convert(self.timezone)

    def reset(self) -> None:
        self.cache.reset()

    # --- quotes ---

    def _snapshot(self, symbol: str) -> Tuple[float, float, float, float, float]:
        base = base_price(symbol)
        current = mock_price(base, symbol)
        previous = mock_price(base * PREV_CLOSE_FACTOR, symbol + PREV_CLOSE_SUFFIX)
        change, change_pct = price_change(current, previous)
        return base, current, previous, change, change_pct

    def _build_quote(self, symbol: str) -> Quote:
        base, current, previous, change, change_pct = self._snapshot(symbol)
        h = symbol_hash(symbol)
        name = company_name(symbol)
        return Quote(
            symbol=symbol,
            short_name=name,
            long_name=name,
            price=current,
            previous_close=previous,
            change=change,
            change_percent=change_pct,
            volume=100_000 + (h % 10) * 1_000_000,
            market_cap=current * (10_000_000 + (h % 100) * 1_000_000_000),
            fifty_two_week_low=base * FIFTY_TWO_WEEK_LOW,
            fifty_two_week_high=base * FIFTY_TWO_WEEK_HIGH,
            sector=sector_for(symbol),
            industry=industry_for(symbol),
            is_domestic=is_domestic(symbol),
            source="mock",
        )

    def generate_quote(self, symbol: str) -> Quote:
        return self.cache.get_or_create(
            (symbol, None, "quote"), lambda: self._build_quote(symbol)
        )

    def generate_quotes(self, symbols: Sequence[str]) -> List[Quote]:
        return [self.generate_quote(s) for s in symbols]

    def generate_light_quotes(self, symbols: Sequence[str]) -> List[LightQuote]:
        market_time = int(self.now().timestamp())
        out: List[LightQuote] = []
        for symbol in symbols:
            _, current, _, change, change_pct = self._snapshot(symbol)
            out.append(LightQuote(
                symbol=symbol,
                price=current,
                change=change,
                change_percent=change_pct,
                market_time=market_time,
                is_domestic=is_domestic(symbol),
                source="mock",
            ))
        return out

    # --- series ---

    def _build_series(self, symbol: str, timeframe: Timeframe) -> Tuple[HistoricalPoint, ...]:
        now = self.now()
        steps = POINTS[timeframe]
        step = STEPS[timeframe]
        volatility = volatility_for(symbol)
        seed = symbol_hash(symbol)

        price = base_price(symbol)
        points: List[HistoricalPoint] = []
        for i in range(steps, -1, -1):
            ts = now - step * i
            price = max(MIN_MOCK_PRICE, price * (1 + math.sin(seed + i) * volatility))
            volume = math.floor((math.sin(seed + i * 2) + 1.1) * 5_000_000) + 100_000
            points.append(HistoricalPoint(
                date=ts.strftime(DATE_LABEL_FORMAT),
                time=ts.strftime(TIME_LABEL_FORMAT),
                price=round(price, 2),
                volume=int(volume),
                timestamp=ts.to_pydatetime(),
            ))
        logger.debug(f"Generated {len(points)} mock points for {symbol} ({timeframe.value})")
        return tuple(points)

    def generate_series(self, symbol: str, timeframe: str | Timeframe) -> List[HistoricalPoint]:
        tf = parse_timeframe(timeframe)
        cached = self.cache.get_or_create(
            (symbol, tf.value, "series"), lambda: self._build_series(symbol, tf)
        )
        return list(cached)
