# stockview/timeframes.py
"""
Chart timeframes and their upstream (interval, range) vocabulary.
The mapping is a fixed bijection; anything unknown resolves to one month.
"""
from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class Timeframe(str, Enum):
    ONE_DAY = "1-day"
    ONE_WEEK = "1-week"
    ONE_MONTH = "1-month"
    THREE_MONTH = "3-month"
    ONE_YEAR = "1-year"
    FIVE_YEAR = "5-year"


class IntervalRange(NamedTuple):
    interval: str
    range: str


DEFAULT_TIMEFRAME = Timeframe.ONE_MONTH

TIMEFRAME_TO_INTERVAL: dict[Timeframe, IntervalRange] = {
    Timeframe.ONE_DAY: IntervalRange("5m", "1d"),
    Timeframe.ONE_WEEK: IntervalRange("15m", "5d"),
    Timeframe.ONE_MONTH: IntervalRange("1d", "1mo"),
    Timeframe.THREE_MONTH: IntervalRange("1d", "3mo"),
    Timeframe.ONE_YEAR: IntervalRange("1wk", "1y"),
    Timeframe.FIVE_YEAR: IntervalRange("1mo", "5y"),
}

INTERVAL_TO_TIMEFRAME: dict[IntervalRange, Timeframe] = {
    v: k for k, v in TIMEFRAME_TO_INTERVAL.items()
}

# Labels used by the domestic-market UI
TIMEFRAME_ALIASES: dict[str, Timeframe] = {
    "1일": Timeframe.ONE_DAY,
    "1주": Timeframe.ONE_WEEK,
    "1개월": Timeframe.ONE_MONTH,
    "3개월": Timeframe.THREE_MONTH,
    "1년": Timeframe.ONE_YEAR,
    "5년": Timeframe.FIVE_YEAR,
}


def parse_timeframe(value: str | Timeframe | None) -> Timeframe:
    """Resolve a label (canonical or alias) to a Timeframe; unknown -> 1-month."""
    if isinstance(value, Timeframe):
        return value
    label = (value or "").strip()
    try:
        return Timeframe(label)
    except ValueError:
        return TIMEFRAME_ALIASES.get(label, DEFAULT_TIMEFRAME)


def map_timeframe_to_interval(timeframe: str | Timeframe | None) -> IntervalRange:
    return TIMEFRAME_TO_INTERVAL[parse_timeframe(timeframe)]


def map_interval_to_timeframe(interval: str, range_: str) -> Timeframe:
    return INTERVAL_TO_TIMEFRAME.get(IntervalRange(interval, range_), DEFAULT_TIMEFRAME)
