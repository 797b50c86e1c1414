# Process-wide spacing between outbound AI-provider calls.
# One instance is built per process (see pipeline.build_pipeline) and shared
# by every request; tests inject their own clock/sleep.

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional

MIN_INTERVAL_SECONDS = 2.0


class RateLimiter:
    """Minimum-interval gate.

    ``acquire()`` returns only once ``min_interval`` seconds have passed since
    the previous ``acquire()`` returned. Waiters are not fair-queued.
    """

    def __init__(
        self,
        min_interval: float = MIN_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_acquired: Optional[float] = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> float:
        """Wait for the next free slot; returns the completion timestamp."""
        async with self._lock:
            if self._last_acquired is not None:
                wait = self._last_acquired + self.min_interval - self._clock()
                if wait > 0:
                    await self._sleep(wait)
            self._last_acquired = self._clock()
            return self._last_acquired
