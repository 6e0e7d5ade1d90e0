# tests/test_history.py
"""
HistoricalService: chart normalization and mock fallback.
"""
import httpx
import pytest

from stockview.services.history import HistoricalService, chart_result, normalize_chart


class TestNormalize:
    """Chart payload normalisation."""

    def test_parallel_arrays(self, sample_chart_payload):
        """Close, else open, else 0; missing volume is 0; labels in local time."""
        points = normalize_chart(chart_result(sample_chart_payload), "Asia/Seoul")
        assert [p.price for p in points] == [171.5, 171.0, 0.0]
        assert [p.volume for p in points] == [1000, 0, 3000]
        # 1760832000 == 2025-10-19T00:00:00Z == 09:00 in Seoul
        assert (points[0].date, points[0].time) == ("2025-10-19", "09:00")
        assert [p.date for p in points] == ["2025-10-19", "2025-10-20", "2025-10-21"]

    @pytest.mark.parametrize(
        "result",
        [
            None,
            {},
            {"timestamp": [1760832000]},
            {"indicators": {"quote": [{"close": [1.0]}]}},
            {"timestamp": [1760832000], "indicators": {}},
            {"timestamp": [1760832000], "indicators": {"quote": []}},
            {"timestamp": "garbage", "indicators": {"quote": [{}]}},
        ],
    )
    def test_malformed_returns_empty(self, result):
        """Incomplete payloads give an empty series."""
        assert normalize_chart(result) == []

    def test_short_arrays(self):
        """Arrays shorter than timestamps are padded with defaults."""
        result = {"timestamp": [1760832000, 1760918400], "indicators": {"quote": [{"close": [5.0]}]}}
        points = normalize_chart(result)
        assert [(p.price, p.volume) for p in points] == [(5.0, 0), (0.0, 0)]


class TestHistoricalService:
    """Series lookup with mock fallback."""

    @pytest.mark.asyncio
    async def test_live_request(self, make_client, engine, recorded, sample_chart_payload):
        """One chart request with the mapped interval and range."""
        def handler(request):
            recorded.append(request)
            return httpx.Response(200, json=sample_chart_payload)

        points = await HistoricalService(make_client(handler), engine).fetch_historical_series("AAPL", "1-month")
        assert len(points) == 3
        assert recorded[0].url.path == "/v8/finance/chart/AAPL"
        assert recorded[0].url.params["interval"] == "1d"
        assert recorded[0].url.params["range"] == "1mo"

    @pytest.mark.asyncio
    async def test_unknown_timeframe_requests_month(self, make_client, engine, recorded, sample_chart_payload):
        """Unknown timeframes request the 1-month range."""
        def handler(request):
            recorded.append(request)
            return httpx.Response(200, json=sample_chart_payload)

        await HistoricalService(make_client(handler), engine).fetch_historical_series("AAPL", "forever")
        assert (recorded[0].url.params["interval"], recorded[0].url.params["range"]) == ("1d", "1mo")

    @pytest.mark.asyncio
    async def test_missing_result_is_empty(self, make_client, engine):
        """A 200 without chart.result gives an empty series."""
        payload = {"chart": {"result": None, "error": {"code": "Not Found"}}}
        client = make_client(lambda request: httpx.Response(200, json=payload))
        assert await HistoricalService(client, engine).fetch_historical_series("AAPL", "1-day") == []

    @pytest.mark.asyncio
    async def test_unreachable_upstream_yields_mock_month(self, broken_client, engine):
        """Unreachable upstream gives 31 ascending positive mock points."""
        points = await HistoricalService(broken_client, engine).fetch_historical_series("UNKNOWN_SYM", "1-month")
        assert len(points) == 31
        dates = [p.date for p in points]
        assert all(a < b for a, b in zip(dates, dates[1:]))
        assert all(p.price > 0 for p in points)
        assert points == engine.generate_series("UNKNOWN_SYM", "1-month")

    @pytest.mark.asyncio
    async def test_fallback_keeps_timeframe(self, failing_client, engine):
        """The mock series matches the requested timeframe."""
        service = HistoricalService(failing_client, engine)
        assert len(await service.fetch_historical_series("AAPL", "1-day")) == 79
        assert len(await service.fetch_historical_series("AAPL", "1-year")) == 53

    @pytest.mark.asyncio
    async def test_fallback_is_stable(self, failing_client, engine):
        """Repeated fallbacks return the same series."""
        service = HistoricalService(failing_client, engine)
        first = await service.fetch_historical_series("TSLA", "3-month")
        second = await service.fetch_historical_series("TSLA", "3-month")
        assert first == second
