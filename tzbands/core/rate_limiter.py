"""Minimum-spacing rate limiter shared by every outbound lookup."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL = 1.2  # seconds between request starts


class RateLimiter:
    """Spaces call starts at least ``min_interval`` seconds apart.

    Waiters are served in arrival order. The clock and sleep functions are
    injectable so tests can run on a fake clock.

    Usage::

        limiter = RateLimiter(1.2)
        await limiter.acquire()
        response = do_request()
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_start: Optional[float] = None
        self._lock: Optional[asyncio.Lock] = None

    def delay(self) -> float:
        """Seconds a call starting now would have to wait."""
        if self._last_start is None:
            return 0.0
        return max(0.0, self.min_interval - (self._clock() - self._last_start))

    async def acquire(self) -> float:
        """Wait for the next free slot and claim it.

        Returns:
            The clock value recorded as this call's start.
        """
        # Created lazily so the lock binds to the running loop
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            wait = self.delay()
            if wait > 0:
                logger.debug("Rate limited, waiting %.2fs", wait)
                await self._sleep(wait)
            self._last_start = self._clock()
            return self._last_start
