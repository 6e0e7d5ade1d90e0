# stockview/exceptions.py
"""
Custom exceptions for stockview.
Provides specific error types for different failure modes.
"""
from __future__ import annotations


class StockViewError(Exception):
    """Base exception for stockview errors."""
    pass


class ProviderError(StockViewError):
    """Raised when the upstream data provider fails."""
    pass


class UpstreamUnavailableError(ProviderError):
    """Raised on a non-success status or a network failure talking to upstream."""
    def __init__(self, endpoint: str, status_code: int | None = None, reason: str | None = None):
        self.endpoint = endpoint
        self.status_code = status_code
        self.reason = reason
        msg = f"Upstream unavailable for {endpoint}"
        if status_code is not None:
            msg += f" (status {status_code})"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class RateLimitError(UpstreamUnavailableError):
    """Raised when upstream rate limit is exceeded or we are cooling down."""
    def __init__(self, endpoint: str, retry_after: float | None = None):
        self.retry_after = retry_after
        reason = "rate limited"
        if retry_after:
            reason += f", retry after {retry_after:g}s"
        super().__init__(endpoint, status_code=429, reason=reason)


class DataError(StockViewError):
    """Raised when there's an issue with data quality or availability."""
    pass


class MalformedPayloadError(DataError):
    """Raised when an upstream payload lacks fields needed to build a result."""
    def __init__(self, what: str, detail: str | None = None):
        self.what = what
        self.detail = detail
        msg = f"Malformed upstream payload: {what}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class InputValidationError(StockViewError):
    """Raised when a request is rejected before any network call."""
    pass


class EmptySymbolListError(InputValidationError):
    """Raised when no symbols were supplied."""
    def __init__(self):
        super().__init__("A non-empty list of symbols is required")


class BatchTooLargeError(InputValidationError):
    """Raised when a batch carries more symbols than allowed."""
    def __init__(self, requested: int, limit: int):
        self.requested = requested
        self.limit = limit
        super().__init__(
            f"At most {limit} symbols may be requested at once, got {requested}"
        )


class BatchError(StockViewError):
    """Raised by the batch orchestrator."""
    pass


class BatchFailedError(BatchError):
    """Raised when every chunk of a batch failed."""
    def __init__(self, chunks: int, errors: list[BaseException] | None = None):
        self.chunks = chunks
        self.errors = errors or []
        super().__init__(f"All {chunks} chart chunks failed")


class ConfigurationError(StockViewError):
    """Raised when configuration is invalid or missing."""
    pass
