# SPDX-License-Identifier: Apache-2.0
"""Tests for GlobalLimiter."""

import asyncio
import time

import pytest

from bucket_dispatch.limiter.global_limiter import GlobalLimiter


class TestGlobalLimiterAccounting:
    @pytest.mark.asyncio
    async def test_slots_taken_without_waiting(self):
        limiter = GlobalLimiter(requests_per_second=3)
        for _ in range(3):
            assert await limiter.acquire() == 0.0
        assert limiter.remaining == 0
        assert limiter.limited

    @pytest.mark.asyncio
    async def test_remaining_never_negative(self):
        limiter = GlobalLimiter(requests_per_second=2)
        limiter.on_global_rate_limit(0.05)
        await asyncio.gather(*(limiter.acquire() for _ in range(4)))
        assert limiter.remaining >= 0

    def test_time_to_reset_never_negative(self):
        limiter = GlobalLimiter()
        assert limiter.time_to_reset == 0.0
        assert not limiter.limited


class TestGlobalLimiterWaiting:
    @pytest.mark.asyncio
    async def test_request_over_ceiling_waits_for_window(self):
        """The request after the ceiling waits until the window resets."""
        limiter = GlobalLimiter(requests_per_second=2)
        await limiter.acquire()
        await limiter.acquire()

        start = time.monotonic()
        waited = await limiter.acquire()
        elapsed = time.monotonic() - start

        assert waited > 0
        assert elapsed >= 0.9

    @pytest.mark.asyncio
    async def test_waiters_share_one_delay(self):
        limiter = GlobalLimiter(requests_per_second=10)
        limiter.on_global_rate_limit(0.1)

        tasks = [asyncio.create_task(limiter.acquire()) for _ in range(3)]
        await asyncio.sleep(0.01)

        delay = limiter.delay
        assert delay is not None
        assert all(not task.done() for task in tasks)

        await asyncio.gather(*tasks)
        assert limiter.delay is None

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_shared_delay(self):
        limiter = GlobalLimiter(requests_per_second=10)
        limiter.on_global_rate_limit(0.05)

        first = asyncio.create_task(limiter.acquire())
        second = asyncio.create_task(limiter.acquire())
        await asyncio.sleep(0.01)
        first.cancel()

        assert await second >= 0.0
        assert first.cancelled()

    @pytest.mark.asyncio
    async def test_global_rate_limit_blocks_until_retry_after(self):
        limiter = GlobalLimiter(requests_per_second=50)
        limiter.on_global_rate_limit(0.1)
        assert limiter.limited

        start = time.monotonic()
        await limiter.acquire()
        assert time.monotonic() - start >= 0.09

    @pytest.mark.asyncio
    async def test_offset_added_to_wait(self):
        limiter = GlobalLimiter(requests_per_second=1, offset=0.05)
        limiter.on_global_rate_limit(0.05)

        start = time.monotonic()
        await limiter.acquire()
        assert time.monotonic() - start >= 0.09
