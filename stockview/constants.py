"""
Centralized constants for stockview.
Eliminates magic numbers and makes configuration explicit.
"""
from __future__ import annotations

# Upstream endpoints (relative to settings.yahoo_base_url)
QUOTE_PATH = "/v7/finance/quote"
CHART_PATH = "/v8/finance/chart/{symbol}"
SEARCH_PATH = "/v1/finance/search"

# Hard upper bound on symbols per batched chart request
MAX_CHART_SYMBOLS = 20

# Mock data shaping
DEFAULT_VOLATILITY = 0.015
MIN_MOCK_PRICE = 0.01
PREV_CLOSE_FACTOR = 0.98     # previous close is derived from base * 0.98
PREV_CLOSE_SUFFIX = "prev"   # hash key suffix for previous close
FIFTY_TWO_WEEK_LOW = 0.7
FIFTY_TWO_WEEK_HIGH = 1.3

# Fallback search scoring
SCORE_SYMBOL_EXACT = 10
SCORE_SYMBOL_CONTAINS = 5
SCORE_NAME_EXACT = 8
SCORE_NAME_CONTAINS = 4
SCORE_DOMESTIC_BOOST = 2

# Hangul syllables, jamo and compatibility jamo
HANGUL_PATTERN = r"[\uAC00-\uD7AF\u1100-\u11FF\u3130-\u318F\uA960-\uA97F\uD7B0-\uD7FF]"

# Label formats for chart points
DATE_LABEL_FORMAT = "%Y-%m-%d"
TIME_LABEL_FORMAT = "%H:%M"
