# stockview/utils/rate_limit.py
from __future__ import annotations
import asyncio
import time
from typing import Awaitable, Callable


class RateLimiter:
    """
    Async token-bucket limiter with a cool-down window.

    - rpm: tokens added per minute (rate)
    - burst: bucket capacity (max tokens)
    - block_for(): upstream asked us to back off (429 Retry-After)

    Usage:
        limiter = RateLimiter(rpm=120, burst=20)
        await limiter.wait()  # suspends until a token is available
    """
    def __init__(
        self,
        rpm: int,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if rpm <= 0 or burst <= 0:
            raise ValueError("rpm and burst must be positive")
        self._rps = float(rpm) / 60.0
        self._capacity = float(burst)
        self._tokens = float(burst)
        self._clock = clock
        self._sleep = sleep
        self._last = clock()
        self._lock = asyncio.Lock()
        self._blocked_until = 0.0

    def _refill(self):
        now = self._clock()
        elapsed = now - self._last
        self._last = now
        self._tokens = min(self._capacity, self._tokens + elapsed * self._rps)

    async def wait(self):
        """Suspend until a token is available."""
        async with self._lock:
            self._refill()
            if self._tokens < 1.0:
                need = 1.0 - self._tokens
                await self._sleep(max(0.0, need / self._rps))
                self._refill()

            self._tokens -= 1.0

    def block_for(self, seconds: float):
        """Mark the upstream as off-limits for `seconds` (e.g. after a 429)."""
        self._blocked_until = max(self._blocked_until, self._clock() + max(0.0, seconds))

    def blocked_for(self) -> float:
        """Seconds left in the current cool-down, 0 when not blocked."""
        return max(0.0, self._blocked_until - self._clock())
