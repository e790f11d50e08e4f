from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")


class RateLimiter:
    """Admit tasks one at a time with a minimum spacing between their starts.

    Only starts are serialized. A slow task does not hold up the next one once
    the spacing has elapsed, so several requests may be in flight together.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must not be negative")
        self._min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_start: float | None = None

    @classmethod
    def per_minute(cls, requests_per_minute: int, **kwargs) -> RateLimiter:
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")
        return cls(60.0 / requests_per_minute, **kwargs)

    @property
    def min_interval(self) -> float:
        return self._min_interval

    async def schedule(self, task: Callable[[], Awaitable[T]]) -> T:
        async with self._lock:
            if self._last_start is not None:
                wait = self._min_interval - (self._clock() - self._last_start)
                if wait > 0:
                    await self._sleep(wait)
            self._last_start = self._clock()
        return await task()


class NoopRateLimiter:
    """Runs tasks immediately."""

    min_interval = 0.0

    async def schedule(self, task: Callable[[], Awaitable[T]]) -> T:
        return await task()


__all__ = ["NoopRateLimiter", "RateLimiter"]
