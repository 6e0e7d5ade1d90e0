# stockview/services/search.py
from __future__ import annotations

import logging
from typing import Any, List

from ..config import settings
from ..exceptions import UpstreamUnavailableError
from ..models import SearchResult
from .catalog import filter_symbols_by_query
from .providers.yahoo import YahooFinanceClient

logger = logging.getLogger(__name__)


def _search_results(payload: Any) -> List[SearchResult]:
    items = payload.get("quotes") if isinstance(payload, dict) else None
    out: List[SearchResult] = []
    for item in items or []:
        if not isinstance(item, dict) or not item.get("symbol"):
            continue
        symbol = str(item["symbol"])
        out.append(SearchResult(
            symbol=symbol,
            short_name=item.get("shortname") or item.get("longname") or symbol,
            exchange=item.get("exchange"),
            quote_type=item.get("quoteType"),
        ))
    return out


class SearchService:
    """Upstream symbol search; falls back to the local catalog filter."""

    def __init__(self, client: YahooFinanceClient):
        self.client = client

    async def search(self, query: str) -> List[SearchResult]:
        query = (query or "").strip()
        if not query:
            return []
        try:
            payload = await self.client.search(query, settings.search_limit)
        except UpstreamUnavailableError as e:
            logger.warning(f"Search failed for {query!r}, filtering local catalog: {e}")
            return filter_symbols_by_query(query)
        return _search_results(payload)
