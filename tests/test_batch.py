# tests/test_batch.py
"""
BatchOrchestrator: chunking, pacing, progress and failure isolation.
"""
import asyncio
import math

import httpx
import pytest

from stockview.exceptions import (
    BatchFailedError,
    ConfigurationError,
    EmptySymbolListError,
    UpstreamUnavailableError,
)
from stockview.models import ChartSeries
from stockview.services.batch import (
    BatchOrchestrator,
    CancellationToken,
    HttpChartFetcher,
    chunk_symbols,
    progress_percent,
)
from stockview.timeframes import Timeframe


class RecordingFetcher:
    """Returns one chart per symbol; fails the calls listed in `fail_on` (1-based)."""

    def __init__(self, fail_on=(), delay=0.0):
        self.calls = []
        self.fail_on = set(fail_on)
        self.delay = delay

    async def __call__(self, symbols, timeframe):
        self.calls.append((list(symbols), timeframe))
        if self.delay:
            await asyncio.sleep(self.delay)
        if len(self.calls) in self.fail_on:
            raise UpstreamUnavailableError("/api/stocks/latest-charts", status_code=500)
        return [ChartSeries(symbol=s, latest_price=float(len(self.calls))) for s in symbols]


class FakeSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def _symbols(n):
    return [f"SYM{i:03d}" for i in range(n)]


def _orchestrator(fetcher, sleep=None, **kwargs):
    kwargs.setdefault("chunk_delay", 0.3)
    kwargs.setdefault("reset_delay", 0)
    return BatchOrchestrator(fetcher, sleep=sleep or FakeSleep(), **kwargs)


class TestHelpers:
    """Chunking and progress arithmetic."""

    def test_chunk_symbols(self):
        """45 symbols split into 20/20/5."""
        chunks = chunk_symbols(_symbols(45), 20)
        assert [len(c) for c in chunks] == [20, 20, 5]

    def test_progress_rounds_half_up(self):
        """12.5% rounds to 13, thirds to 33/67."""
        assert progress_percent(1, 8) == 13
        assert progress_percent(1, 3) == 33
        assert progress_percent(2, 3) == 67
        assert progress_percent(3, 3) == 100


class TestOrchestrator:
    """Sequential chunk loop."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [1, 19, 20, 21, 45, 100])
    async def test_chunk_count_and_size(self, count):
        """ceil(L/20) calls of at most 20 symbols, covering every symbol once in order."""
        fetcher = RecordingFetcher()
        charts = await _orchestrator(fetcher).fetch_charts_for_symbols(_symbols(count), "1-day")
        assert len(fetcher.calls) == math.ceil(count / 20)
        assert all(len(symbols) <= 20 for symbols, _ in fetcher.calls)
        assert [s for symbols, _ in fetcher.calls for s in symbols] == _symbols(count)
        assert set(charts) == set(_symbols(count))

    @pytest.mark.asyncio
    async def test_timeframe_is_resolved(self):
        """Domestic-script labels reach the fetcher as a Timeframe."""
        fetcher = RecordingFetcher()
        await _orchestrator(fetcher).fetch_charts_for_symbols(["A"], "1일")
        assert fetcher.calls[0][1] is Timeframe.ONE_DAY

    @pytest.mark.asyncio
    async def test_pause_between_chunks_only(self):
        """Pause after every chunk but the last."""
        sleep = FakeSleep()
        await _orchestrator(RecordingFetcher(), sleep=sleep).fetch_charts_for_symbols(_symbols(45), "1-day")
        assert sleep.delays == [0.3, 0.3]

    @pytest.mark.asyncio
    async def test_progress_and_partials(self):
        """Progress per chunk, a final 100, then a scheduled reset to 0."""
        progress, partials = [], []
        await _orchestrator(RecordingFetcher()).fetch_charts_for_symbols(
            _symbols(45), "1-day", progress.append, partials.append
        )
        assert progress == [33, 67, 100, 100]
        assert progress == sorted(progress)
        assert [len(p) for p in partials] == [20, 40, 45]

        await asyncio.sleep(0.01)
        assert progress[-1] == 0

    @pytest.mark.asyncio
    async def test_back_to_back_runs_keep_progress_monotonic(self):
        """A reset pending from the previous run never fires inside the next one."""
        orchestrator = BatchOrchestrator(
            RecordingFetcher(delay=0.03), chunk_delay=0.03, reset_delay=0.05,
        )
        progress = []

        await orchestrator.fetch_charts_for_symbols(["A"], "1-day", progress.append)
        assert progress == [100, 100]

        progress.clear()
        await orchestrator.fetch_charts_for_symbols(_symbols(60), "1-day", progress.append)
        assert progress == [33, 67, 100, 100]

        await asyncio.sleep(0.1)
        assert progress == [33, 67, 100, 100, 0]

    @pytest.mark.asyncio
    async def test_partial_snapshot_is_a_copy(self):
        """on_partial gets a snapshot, not the map being built."""
        partials = []
        result = await _orchestrator(RecordingFetcher()).fetch_charts_for_symbols(
            _symbols(25), "1-day", on_partial=partials.append
        )
        assert partials[0] is not result
        assert len(partials[0]) == 20

    @pytest.mark.asyncio
    async def test_failed_chunk_is_isolated(self):
        """Chunk 2 fails; chunks 1 and 3 are still merged and progress still advances."""
        symbols = _symbols(60)
        fetcher = RecordingFetcher(fail_on={2})
        progress = []
        charts = await _orchestrator(fetcher).fetch_charts_for_symbols(symbols, "1-day", progress.append)

        assert len(fetcher.calls) == 3
        assert set(charts) == set(symbols[:20]) | set(symbols[40:])
        assert not set(charts) & set(symbols[20:40])
        assert progress[:4] == [33, 67, 100, 100]

    @pytest.mark.asyncio
    async def test_failed_chunk_keeps_existing_entries(self):
        """Existing entries survive a failed chunk; successful chunks overwrite theirs."""
        symbols = _symbols(60)
        stale = ChartSeries(symbol=symbols[25], latest_price=-1.0)
        charts = await _orchestrator(RecordingFetcher(fail_on={2})).fetch_charts_for_symbols(
            symbols, "1-day", existing={symbols[25]: stale, symbols[0]: stale}
        )
        assert charts[symbols[25]] is stale
        assert charts[symbols[0]].latest_price == 1.0

    @pytest.mark.asyncio
    async def test_all_chunks_failing_raises(self):
        """Every chunk failing raises BatchFailedError with one error per chunk."""
        fetcher = RecordingFetcher(fail_on={1, 2})
        with pytest.raises(BatchFailedError) as exc:
            await _orchestrator(fetcher).fetch_charts_for_symbols(_symbols(30), "1-day")
        assert exc.value.chunks == 2
        assert len(exc.value.errors) == 2

    @pytest.mark.asyncio
    async def test_empty_symbols_rejected(self):
        """No symbols, no fetch."""
        fetcher = RecordingFetcher()
        with pytest.raises(EmptySymbolListError):
            await _orchestrator(fetcher).fetch_charts_for_symbols([], "1-day")
        assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_cancellation_between_chunks(self):
        """Cancelling after chunk 1 returns its results without the final 100."""
        token = CancellationToken()
        fetcher = RecordingFetcher()
        progress = []

        def on_partial(_):
            token.cancel()

        charts = await _orchestrator(fetcher).fetch_charts_for_symbols(
            _symbols(60), "1-day", progress.append, on_partial, cancel_token=token
        )
        assert len(fetcher.calls) == 1
        assert len(charts) == 20
        assert progress == [33]

    def test_chunk_size_limit(self):
        """Chunks above the endpoint limit are a configuration error."""
        with pytest.raises(ConfigurationError):
            BatchOrchestrator(RecordingFetcher(), chunk_size=21)


class TestHttpChartFetcher:
    """Chunks fetched through the HTTP API."""

    @pytest.mark.asyncio
    async def test_end_to_end_through_api(self, failing_client, engine):
        """25 symbols through the real app: two chunks, mock series for every symbol."""
        from stockview.server.api import app
        from stockview.services.market_data import MarketData, get_market_data

        market = MarketData(client=failing_client, engine=engine)
        app.dependency_overrides[get_market_data] = lambda: market
        try:
            client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
            fetcher = HttpChartFetcher(client=client, base_url="http://testserver")
            progress = []
            charts = await _orchestrator(fetcher).fetch_charts_for_symbols(
                _symbols(25), "1-day", progress.append
            )
            await client.aclose()
        finally:
            app.dependency_overrides.clear()

        assert len(charts) == 25
        assert all(len(c.chart_data) == 79 for c in charts.values())
        assert charts["SYM000"].chart_data == engine.generate_series("SYM000", "1-day")
        assert progress[:3] == [50, 100, 100]

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        """A 400 from the API surfaces as UpstreamUnavailableError."""
        def handler(request):
            return httpx.Response(400, json={"error": "At most 20 symbols"})

        fetcher = HttpChartFetcher(
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            base_url="http://testserver",
        )
        with pytest.raises(UpstreamUnavailableError) as exc:
            await fetcher(_symbols(21), Timeframe.ONE_DAY)
        assert exc.value.status_code == 400
