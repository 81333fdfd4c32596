"""
Per-service pacing of outbound requests.

One limiter exists per external service and is shared by every import that
talks to that service, so concurrent zone imports are throttled together.
"""

import asyncio
import time
import logging

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Enforce a minimum interval between permitted calls.

    Waiting callers queue on an asyncio.Lock, which wakes waiters in arrival
    order, so permits are handed out FIFO and never in bursts.
    Requests are never dropped, only delayed.
    """

    def __init__(self, name: str, min_interval_ms: int):
        self.name = name
        self.min_interval = min_interval_ms / 1000.0
        self._last_request = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait until the next call to the service is permitted."""
        async with self._lock:
            elapsed = time.monotonic() - self._last_request
            if elapsed < self.min_interval:
                delay = self.min_interval - elapsed
                logger.debug(f"[{self.name}] throttling for {delay * 1000:.0f}ms")
                await asyncio.sleep(delay)
            self._last_request = time.monotonic()

    def __repr__(self) -> str:
        return f"RateLimiter(name={self.name!r}, min_interval_ms={int(self.min_interval * 1000)})"
