"""
Unit tests for the per-service rate limiter
"""

import asyncio
import time
import pytest
from core.rate_limiter import RateLimiter


class TestRateLimiter:
    """Test pacing of outbound calls"""

    @pytest.mark.asyncio
    async def test_first_call_is_immediate(self):
        limiter = RateLimiter("test", 500)

        start = time.monotonic()
        await limiter.acquire()

        assert time.monotonic() - start < 0.1

    @pytest.mark.asyncio
    async def test_consecutive_calls_are_spaced(self):
        limiter = RateLimiter("test", 100)

        start = time.monotonic()
        for _ in range(3):
            await limiter.acquire()

        # Two waits of 100ms between three permits
        assert time.monotonic() - start >= 0.19

    @pytest.mark.asyncio
    async def test_concurrent_waiters_are_served_in_order_without_bursts(self):
        limiter = RateLimiter("test", 50)
        granted = []

        async def worker(index: int):
            await limiter.acquire()
            granted.append((index, time.monotonic()))

        tasks = []
        for index in range(4):
            tasks.append(asyncio.create_task(worker(index)))
            # Let each task reach the lock before the next one is created
            await asyncio.sleep(0)
        await asyncio.gather(*tasks)

        assert [index for index, _ in granted] == [0, 1, 2, 3]
        gaps = [later - earlier for (_, earlier), (_, later) in zip(granted, granted[1:])]
        assert all(gap >= 0.045 for gap in gaps)

    @pytest.mark.asyncio
    async def test_zero_interval_never_waits(self):
        limiter = RateLimiter("test", 0)

        start = time.monotonic()
        for _ in range(20):
            await limiter.acquire()

        assert time.monotonic() - start < 0.1

    def test_repr(self):
        assert repr(RateLimiter("overpass", 1000)) == "RateLimiter(name='overpass', min_interval_ms=1000)"
