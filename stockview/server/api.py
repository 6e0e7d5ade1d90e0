# stockview/server/api.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import List

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

load_dotenv()   # loads .env into os.environ

from .. import logging_config  # noqa: E402,F401  (configures logging)
from ..exceptions import InputValidationError, StockViewError  # noqa: E402
from ..services.market_data import MarketData, close_market_data, get_market_data  # noqa: E402
from ..timeframes import Timeframe  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    await close_market_data()


app = FastAPI(title="stockview", lifespan=lifespan)


class ChartsRequest(BaseModel):
    symbols: List[str] = Field(default_factory=list)
    timeframe: str = Timeframe.ONE_DAY.value


class PricesRequest(BaseModel):
    symbols: List[str] = Field(default_factory=list)


@app.exception_handler(InputValidationError)
async def bad_request(_: Request, exc: InputValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(StockViewError)
async def server_error(request: Request, exc: StockViewError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.get("/")
def root():
    return {"ok": True, "message": "stockview API. See /api/stocks."}


@app.get("/api/stocks")
async def list_stocks(
    query: str = "",
    page: int = 1,
    page_size: int | None = Query(None, alias="pageSize"),
    market: MarketData = Depends(get_market_data),
):
    result = await market.list_stocks(query, page, page_size)
    return {"stocks": result.stocks, "pagination": result.pagination}


@app.get("/api/stock/{symbol}")
async def get_stock(symbol: str, market: MarketData = Depends(get_market_data)):
    quotes = await market.quotes.fetch_quotes([symbol])
    if not quotes:
        return JSONResponse(status_code=404, content={"error": f"Stock not found: {symbol}"})
    return {"stock": quotes[0]}


@app.get("/api/stock/{symbol}/history")
async def get_history(
    symbol: str,
    timeframe: str = Timeframe.ONE_MONTH.value,
    market: MarketData = Depends(get_market_data),
):
    data = await market.history.fetch_historical_series(symbol, timeframe)
    return {"data": data}


@app.post("/api/stocks/latest-charts")
async def latest_charts(body: ChartsRequest, market: MarketData = Depends(get_market_data)):
    charts = await market.charts.fetch_latest_charts(body.symbols, body.timeframe)
    return {"charts": charts}


@app.post("/api/stocks/latest-prices")
async def latest_prices(body: PricesRequest, market: MarketData = Depends(get_market_data)):
    prices = await market.quotes.fetch_latest_prices(body.symbols)
    return {"prices": prices}


@app.get("/api/search")
async def search(q: str = "", market: MarketData = Depends(get_market_data)):
    return {"quotes": await market.search.search(q)}
