"""Minimum-interval rate limiting shared by the upstream clients."""

import asyncio
import time


class RateLimiter:
    """
    Spaces out requests so that at least ``min_interval`` seconds separate
    the start of two consecutive calls. Safe to share between tasks.
    """

    def __init__(self, min_interval: float):
        self.min_interval = max(min_interval, 0.0)
        self._last_acquired = 0.0
        self._lock = asyncio.Lock()

    @classmethod
    def per_second(cls, requests_per_second: float) -> "RateLimiter":
        return cls(1.0 / requests_per_second)

    async def acquire(self) -> None:
        async with self._lock:
            wait = self._last_acquired + self.min_interval - time.monotonic()
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_acquired = time.monotonic()
