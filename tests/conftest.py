# tests/conftest.py
"""
Pytest configuration and fixtures.
"""
import os
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx
import pytest

# Set test environment before importing stockview modules
os.environ["ENV"] = "test"
os.environ["LOG_TO_FILE"] = "0"
os.environ["OFFLINE"] = "0"
os.environ["YAHOO_RETRIES"] = "1"
os.environ["BATCH_CHUNK_DELAY"] = "0"
os.environ["PROGRESS_RESET_DELAY"] = "0"

FIXED_NOW = datetime(2026, 10, 19, 15, 30, tzinfo=ZoneInfo("Asia/Seoul"))


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def engine():
    """Mock engine pinned to a fixed clock."""
    from stockview.services.mock_engine import DeterministicMockEngine
    return DeterministicMockEngine(clock=lambda: FIXED_NOW, timezone="Asia/Seoul")


@pytest.fixture
def make_client():
    """Factory: YahooFinanceClient whose transport is the given handler."""
    from stockview.services.providers.yahoo import YahooFinanceClient
    from stockview.utils.rate_limit import RateLimiter

    def factory(handler, **kwargs):
        kwargs.setdefault("offline", False)
        kwargs.setdefault("retries", 1)
        kwargs.setdefault("limiter", RateLimiter(rpm=60000, burst=1000))
        return YahooFinanceClient(
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            base_url="https://query1.finance.yahoo.com",
            **kwargs,
        )

    return factory


@pytest.fixture
def failing_client(make_client):
    """Upstream answering 500 to everything."""
    return make_client(lambda request: httpx.Response(500, text="blocked"))


@pytest.fixture
def broken_client(make_client):
    """Upstream unreachable (connection error)."""
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)
    return make_client(handler)


@pytest.fixture
def recorded():
    """List collecting requests seen by a recording handler."""
    return []


@pytest.fixture
def sample_chart_payload():
    return {
        "chart": {
            "result": [{
                "meta": {"symbol": "AAPL"},
                "timestamp": [1760832000, 1760918400, 1761004800],
                "indicators": {"quote": [{
                    "open": [170.0, 171.0, None],
                    "close": [171.5, None, None],
                    "volume": [1000, None, 3000],
                }]},
            }],
            "error": None,
        }
    }


@pytest.fixture
def sample_quote_payload():
    return {
        "quoteResponse": {
            "result": [
                {
                    "symbol": "AAPL",
                    "shortName": "Apple Inc.",
                    "longName": "Apple Inc.",
                    "regularMarketPrice": 230.1,
                    "regularMarketPreviousClose": 228.0,
                    "regularMarketChange": 2.1,
                    "regularMarketChangePercent": 0.92,
                    "regularMarketVolume": 51234567,
                    "marketCap": 3450000000000,
                    "fiftyTwoWeekLow": 164.08,
                    "fiftyTwoWeekHigh": 237.23,
                    "regularMarketTime": 1760990400,
                },
                {
                    "symbol": "005930.KS",
                    "shortName": "SamsungElec",
                    "regularMarketPrice": 98000,
                    "regularMarketPreviousClose": 97000,
                    "regularMarketVolume": 12000000,
                    "regularMarketTime": 1760943600,
                },
            ],
            "error": None,
        }
    }
