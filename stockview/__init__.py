"""stockview: market quotes and charts with deterministic fallback data."""

__version__ = "0.1.0"
