# tests/test_timeframes.py
import pytest

from stockview.services.market_data import map_timeframe_to_interval
from stockview.timeframes import (
    TIMEFRAME_TO_INTERVAL,
    Timeframe,
    map_interval_to_timeframe,
    parse_timeframe,
)


class TestTimeframeMapping:
    """Timeframe to (interval, range) resolution."""

    @pytest.mark.parametrize(
        "label,interval,range_",
        [
            ("1-day", "5m", "1d"),
            ("1-week", "15m", "5d"),
            ("1-month", "1d", "1mo"),
            ("3-month", "1d", "3mo"),
            ("1-year", "1wk", "1y"),
            ("5-year", "1mo", "5y"),
        ],
    )
    def test_mapping(self, label, interval, range_):
        """Each label maps to its interval and range."""
        result = map_timeframe_to_interval(label)
        assert (result.interval, result.range) == (interval, range_)

    def test_one_month_example(self):
        """1-month requests daily bars over one month."""
        assert map_timeframe_to_interval("1-month") == ("1d", "1mo")

    def test_unknown_defaults_to_month(self):
        """Unknown or missing labels resolve to 1-month."""
        assert map_timeframe_to_interval("2-decade") == ("1d", "1mo")
        assert map_timeframe_to_interval(None) == ("1d", "1mo")

    def test_domestic_aliases(self):
        """Hangul labels resolve to the same timeframes."""
        assert parse_timeframe("1일") is Timeframe.ONE_DAY
        assert parse_timeframe("5년") is Timeframe.FIVE_YEAR

    def test_mapping_is_a_bijection(self):
        """Every (interval, range) maps back to its timeframe."""
        assert len(set(TIMEFRAME_TO_INTERVAL.values())) == len(Timeframe)
        for tf, ir in TIMEFRAME_TO_INTERVAL.items():
            assert map_interval_to_timeframe(ir.interval, ir.range) is tf

    def test_reverse_unknown_defaults_to_month(self):
        """Unknown pairs map back to 1-month."""
        assert map_interval_to_timeframe("1h", "2d") is Timeframe.ONE_MONTH
