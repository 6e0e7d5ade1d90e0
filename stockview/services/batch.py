# stockview/services/batch.py
"""
Client-side orchestration of chart refreshes for long symbol lists.

Symbols are split into chunks of at most MAX_CHART_SYMBOLS. Chunks run one
after another with a pause in between; a failed chunk is logged and skipped.
Progress and partial results are reported after every chunk.
"""
from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

import httpx

from ..config import settings
from ..constants import MAX_CHART_SYMBOLS
from ..exceptions import (
    BatchFailedError,
    ConfigurationError,
    EmptySymbolListError,
    MalformedPayloadError,
    UpstreamUnavailableError,
)
from ..models import ChartSeries
from ..timeframes import Timeframe, parse_timeframe

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]
PartialCallback = Callable[[Dict[str, ChartSeries]], None]

LATEST_CHARTS_PATH = "/api/stocks/latest-charts"


class ChartBatchFetcher(Protocol):
    async def __call__(self, symbols: List[str], timeframe: Timeframe) -> List[ChartSeries]: ...


class CancellationToken:
    """Checked between chunks; once cancelled the batch stops early."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def chunk_symbols(symbols: Sequence[str], size: int) -> List[List[str]]:
    return [list(symbols[i:i + size]) for i in range(0, len(symbols), size)]


def progress_percent(done: int, total: int) -> int:
    """Percentage rounded half up, 0-100."""
    if total <= 0:
        return 100
    return int(math.floor(100 * done / total + 0.5))


class HttpChartFetcher:
    """Fetches one chunk through the HTTP API's batched chart endpoint."""

    def __init__(self, client: httpx.AsyncClient | None = None, base_url: str | None = None):
        self.base_url = (base_url if base_url is not None else settings.api_base_url).rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=30)

    async def __call__(self, symbols: List[str], timeframe: Timeframe) -> List[ChartSeries]:
        r = await self._client.post(
            f"{self.base_url}{LATEST_CHARTS_PATH}",
            json={"symbols": list(symbols), "timeframe": timeframe.value},
        )
        if not r.is_success:
            raise UpstreamUnavailableError(LATEST_CHARTS_PATH, status_code=r.status_code, reason=r.text[:160])

        data = r.json()
        charts = data.get("charts") if isinstance(data, dict) else None
        if not isinstance(charts, list):
            raise MalformedPayloadError("charts", data.get("error") if isinstance(data, dict) else None)
        return [ChartSeries.model_validate(c) for c in charts]

    async def aclose(self) -> None:
        await self._client.aclose()


class BatchOrchestrator:
    def __init__(
        self,
        fetcher: ChartBatchFetcher,
        chunk_size: int | None = None,
        chunk_delay: float | None = None,
        reset_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.fetcher = fetcher
        self.chunk_size = chunk_size or settings.chart_batch_limit
        if not 1 <= self.chunk_size <= MAX_CHART_SYMBOLS:
            raise ConfigurationError(
                f"chunk_size must be between 1 and {MAX_CHART_SYMBOLS}, got {self.chunk_size}"
            )
        self.chunk_delay = chunk_delay if chunk_delay is not None else settings.batch_chunk_delay
        self.reset_delay = reset_delay if reset_delay is not None else settings.progress_reset_delay
        self._sleep = sleep
        self._reset_handle: Optional[asyncio.TimerHandle] = None

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _schedule_reset(self, on_progress: ProgressCallback) -> None:
        self._cancel_reset()
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(self.reset_delay, on_progress, 0)

    async def fetch_charts_for_symbols(
        self,
        symbols: Sequence[str],
        timeframe: str | Timeframe | None = Timeframe.ONE_DAY,
        on_progress: ProgressCallback | None = None,
        on_partial: PartialCallback | None = None,
        *,
        existing: Mapping[str, ChartSeries] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> Dict[str, ChartSeries]:
        """
        Fetch charts for any number of symbols, chunk by chunk.

        Args:
            symbols: Symbols to refresh (order is kept within chunks)
            timeframe: Chart timeframe label
            on_progress: Called with 0-100 after each chunk, then 100 and,
                after `reset_delay`, 0
            on_partial: Called with a snapshot of the merged map after each
                successful chunk
            existing: Previous results; entries of failed chunks are kept
            cancel_token: Stops the loop before the next chunk when cancelled

        Returns:
            Symbol -> ChartSeries map

        Raises:
            EmptySymbolListError: no symbols given
            BatchFailedError: every chunk failed
        """
        symbols = [s for s in symbols if s]
        if not symbols:
            raise EmptySymbolListError()

        # a reset left over from the previous run must not land inside this one
        self._cancel_reset()

        tf = parse_timeframe(timeframe)
        chunks = chunk_symbols(symbols, self.chunk_size)
        total = len(chunks)
        charts: Dict[str, ChartSeries] = dict(existing or {})
        errors: List[BaseException] = []
        succeeded = 0

        for i, chunk in enumerate(chunks):
            if cancel_token is not None and cancel_token.cancelled:
                logger.info(f"Chart batch cancelled after {i}/{total} chunks")
                return charts

            try:
                results = await self.fetcher(chunk, tf)
            except Exception as e:
                # one bad chunk must not stop the rest
                errors.append(e)
                logger.error(f"Chunk {i + 1}/{total} failed ({len(chunk)} symbols): {e}")
            else:
                for chart in results:
                    charts[chart.symbol] = chart
                succeeded += 1
                logger.info(f"Chunk {i + 1}/{total} done ({len(chunk)} symbols)")
                if on_partial is not None:
                    on_partial(dict(charts))

            if on_progress is not None:
                on_progress(progress_percent(i + 1, total))

            if i < total - 1:
                await self._sleep(self.chunk_delay)

        if succeeded == 0:
            raise BatchFailedError(total, errors)

        logger.info(f"Chart data refreshed for {len(symbols)} symbols in {total} chunks")
        if on_progress is not None:
            on_progress(100)
            self._schedule_reset(on_progress)
        return charts
