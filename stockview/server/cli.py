# stockview/server/cli.py
from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, List, Optional

import typer

from .. import logging_config  # noqa: F401  (configures logging)
from ..exceptions import StockViewError
from ..services.batch import BatchOrchestrator, HttpChartFetcher
from ..services.catalog import POPULAR_SYMBOLS
from ..services.market_data import MarketData
from ..timeframes import TIMEFRAME_TO_INTERVAL, Timeframe

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _run(fn: Callable[[MarketData], Awaitable[Any]]) -> Any:
    async def runner():
        market = MarketData()
        try:
            return await fn(market)
        finally:
            await market.aclose()

    try:
        return asyncio.run(runner())
    except StockViewError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1) from e


def _dump(items: Any) -> None:
    data = [i.model_dump(mode="json") for i in items]
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


@app.command("quotes")
def quotes_cmd(symbols: List[str] = typer.Argument(..., help="Ticker symbols, e.g. AAPL 005930.KS")):
    """Full quotes for SYMBOLS (mock data when upstream is unavailable)."""
    _dump(_run(lambda m: m.quotes.fetch_quotes(symbols)))


@app.command("prices")
def prices_cmd(symbols: List[str] = typer.Argument(..., help="Ticker symbols")):
    """Latest price/change only."""
    _dump(_run(lambda m: m.quotes.fetch_latest_prices(symbols)))


@app.command("history")
def history_cmd(
    symbol: str = typer.Argument(..., help="Ticker symbol"),
    timeframe: str = typer.Option(Timeframe.ONE_MONTH.value, "--timeframe", "-t", help="1-day ... 5-year"),
):
    """Chart series for SYMBOL."""
    _dump(_run(lambda m: m.history.fetch_historical_series(symbol, timeframe)))


@app.command("charts")
def charts_cmd(
    symbols: Optional[List[str]] = typer.Argument(None, help="Ticker symbols (default: popular list)"),
    timeframe: str = typer.Option(Timeframe.ONE_DAY.value, "--timeframe", "-t"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Fetch chunks through a running API"),
):
    """Refresh charts chunk by chunk, printing progress to stderr."""
    wanted = list(symbols or POPULAR_SYMBOLS)

    def progress(pct: int) -> None:
        typer.echo(f"progress: {pct}%", err=True)

    async def run(market: MarketData):
        if api_url:
            fetcher = HttpChartFetcher(base_url=api_url)
            try:
                return await BatchOrchestrator(fetcher).fetch_charts_for_symbols(wanted, timeframe, progress)
            finally:
                await fetcher.aclose()
        return await market.batch.fetch_charts_for_symbols(wanted, timeframe, progress)

    charts = _run(run)
    summary = {
        s: {"latest_price": c.latest_price, "price_change": c.price_change,
            "percent_change": c.percent_change, "points": len(c.chart_data), "error": c.error}
        for s, c in charts.items()
    }
    typer.echo(json.dumps(summary, ensure_ascii=False, indent=2))


@app.command("search")
def search_cmd(query: str = typer.Argument(..., help="Ticker or company name")):
    """Search symbols (local catalog when upstream search fails)."""
    _dump(_run(lambda m: m.search.search(query)))


@app.command("intervals")
def intervals_cmd():
    """Show the timeframe -> (interval, range) mapping."""
    for tf, ir in TIMEFRAME_TO_INTERVAL.items():
        typer.echo(f"{tf.value:<8} interval={ir.interval:<4} range={ir.range}")


if __name__ == "__main__":
    app()
