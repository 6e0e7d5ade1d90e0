# stockview/services/catalog.py
"""
Static universe of tradable symbols and their display names.
Used for the paginated stock listing, local search fallback and naming of
synthetic quotes.
"""
from __future__ import annotations

import math
import re
from typing import Dict, List, Sequence, Tuple

from ..config import settings
from ..constants import (
    HANGUL_PATTERN,
    SCORE_DOMESTIC_BOOST,
    SCORE_NAME_CONTAINS,
    SCORE_NAME_EXACT,
    SCORE_SYMBOL_CONTAINS,
    SCORE_SYMBOL_EXACT,
)
from ..models import Pagination, SearchResult

_HANGUL_RE = re.compile(HANGUL_PATTERN)

# Domestic (KOSPI) listings with their local names
DOMESTIC_COMPANY_NAMES: Dict[str, str] = {
    "005930.KS": "삼성전자",
    "000660.KS": "SK하이닉스",
    "373220.KS": "LG에너지솔루션",
    "207940.KS": "삼성바이오로직스",
    "005380.KS": "현대차",
    "000270.KS": "기아",
    "068270.KS": "셀트리온",
    "005490.KS": "POSCO홀딩스",
    "035420.KS": "NAVER",
    "051910.KS": "LG화학",
    "006400.KS": "삼성SDI",
    "035720.KS": "카카오",
    "105560.KS": "KB금융",
    "055550.KS": "신한지주",
    "012330.KS": "현대모비스",
    "028260.KS": "삼성물산",
    "066570.KS": "LG전자",
    "003550.KS": "LG",
    "017670.KS": "SK텔레콤",
    "030200.KS": "KT",
    "032830.KS": "삼성생명",
    "096770.KS": "SK이노베이션",
    "034730.KS": "SK",
    "015760.KS": "한국전력",
    "086790.KS": "하나금융지주",
    "010130.KS": "고려아연",
    "009150.KS": "삼성전기",
    "018260.KS": "삼성에스디에스",
    "011200.KS": "HMM",
    "003670.KS": "포스코퓨처엠",
}

US_COMPANY_NAMES: Dict[str, str] = {
    "AAPL": "Apple Inc.",
    "MSFT": "Microsoft Corporation",
    "GOOGL": "Alphabet Inc.",
    "AMZN": "Amazon.com, Inc.",
    "META": "Meta Platforms, Inc.",
    "TSLA": "Tesla, Inc.",
    "NVDA": "NVIDIA Corporation",
    "JPM": "JPMorgan Chase & Co.",
    "V": "Visa Inc.",
    "JNJ": "Johnson & Johnson",
    "WMT": "Walmart Inc.",
    "PG": "Procter & Gamble Company",
    "MA": "Mastercard Incorporated",
    "UNH": "UnitedHealth Group Incorporated",
    "HD": "The Home Depot, Inc.",
    "BAC": "Bank of America Corporation",
    "XOM": "Exxon Mobil Corporation",
    "PFE": "Pfizer Inc.",
    "CSCO": "Cisco Systems, Inc.",
    "VZ": "Verizon Communications Inc.",
    "NFLX": "Netflix, Inc.",
    "ADBE": "Adobe Inc.",
    "CRM": "Salesforce, Inc.",
    "INTC": "Intel Corporation",
    "CMCSA": "Comcast Corporation",
}

POPULAR_SYMBOLS: Tuple[str, ...] = tuple(DOMESTIC_COMPANY_NAMES) + tuple(US_COMPANY_NAMES)


def is_domestic(symbol: str, suffixes: Sequence[str] | None = None) -> bool:
    """True when the symbol carries a domestic market suffix (e.g. '.KS')."""
    for suffix in suffixes if suffixes is not None else settings.domestic_suffixes:
        if symbol.endswith(suffix):
            return True
    return False


def company_name(symbol: str) -> str:
    if symbol in DOMESTIC_COMPANY_NAMES:
        return DOMESTIC_COMPANY_NAMES[symbol]
    return US_COMPANY_NAMES.get(symbol, f"{symbol} Corporation")


def has_hangul(text: str) -> bool:
    return bool(_HANGUL_RE.search(text or ""))


def score_symbol(symbol: str, query: str) -> int:
    """
    Local relevance score used when upstream search is unavailable.

    Exact symbol beats symbol substring; name matches add on top. Every
    domestic listing gets a boost for Hangul queries, so such a query lists
    its matches first and then the rest of the domestic market.
    """
    q = query.lower()
    sym = symbol.lower()
    name = company_name(symbol).lower()

    score = 0
    if sym == q:
        score = SCORE_SYMBOL_EXACT
    elif q in sym:
        score = SCORE_SYMBOL_CONTAINS

    if name == q:
        score += SCORE_NAME_EXACT
    elif q in name:
        score += SCORE_NAME_CONTAINS

    if has_hangul(query) and is_domestic(symbol):
        score += SCORE_DOMESTIC_BOOST
    return score


def filter_symbols_by_query(
    query: str,
    symbols: Sequence[str] = POPULAR_SYMBOLS,
    limit: int | None = None,
) -> List[SearchResult]:
    """Scored filter over the catalog, best first, capped at `limit`."""
    if not (query or "").strip():
        return []
    limit = limit if limit is not None else settings.search_limit

    scored = []
    for symbol in symbols:
        score = score_symbol(symbol, query)
        if score > 0:
            scored.append(
                SearchResult(symbol=symbol, short_name=company_name(symbol), score=score)
            )
    scored.sort(key=lambda r: r.score, reverse=True)
    return scored[:limit]


def match_listing(query: str, symbols: Sequence[str] = POPULAR_SYMBOLS) -> List[str]:
    """
    Symbols whose ticker or domestic name contains the query, ordered with
    domestic listings first for Hangul queries, then exact ticker matches.
    """
    q = (query or "").strip().lower()
    if not q:
        return list(symbols)

    matched = [
        s for s in symbols
        if q in s.lower() or q in DOMESTIC_COMPANY_NAMES.get(s, "").lower()
    ]
    hangul = has_hangul(query)

    def sort_key(symbol: str) -> tuple[int, int]:
        domestic_rank = 0 if (hangul and is_domestic(symbol)) else 1
        exact_rank = 0 if symbol.lower() == q else 1
        return domestic_rank, exact_rank

    # sorted() is stable, so catalog order breaks ties
    return sorted(matched, key=sort_key)


def paginate(symbols: Sequence[str], page: int, page_size: int) -> Tuple[List[str], Pagination]:
    page = max(page, 1)
    page_size = max(page_size, 1)
    start = (page - 1) * page_size
    total = len(symbols)
    return list(symbols[start:start + page_size]), Pagination(
        page=page,
        page_size=page_size,
        total_items=total,
        total_pages=math.ceil(total / page_size),
    )
