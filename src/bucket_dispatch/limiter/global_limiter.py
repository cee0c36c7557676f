# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Global rate limit coordinator.

Every outbound request, whatever its bucket, spends one slot of an
account-wide per-second quota. When the quota is exhausted all handlers
wait on a single shared delay instead of each scheduling its own timer.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

GLOBAL_WINDOW = 1.0
"""Length of the global quota window in seconds."""


class GlobalLimiter:
    """
    Tracks the shared global quota.

    Attributes:
        limit: Requests allowed per window.
        offset: Extra seconds added to every wait.
        remaining: Slots left in the current window. Never negative.
        reset_at: Monotonic time at which the current window ends.
    """

    def __init__(
        self,
        requests_per_second: int = 50,
        offset: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = requests_per_second
        self.offset = offset
        self.remaining = requests_per_second
        self.reset_at = -1.0
        self._clock = clock
        self._delay: asyncio.Future[None] | None = None

    @property
    def limited(self) -> bool:
        """Whether the quota is exhausted for the current window."""
        return self.remaining <= 0 and self._clock() < self.reset_at

    @property
    def time_to_reset(self) -> float:
        """Seconds until the current window ends (0 when already reset)."""
        return max(0.0, self.reset_at - self._clock())

    @property
    def delay(self) -> asyncio.Future[None] | None:
        """The shared pending wait, if any request is currently waiting."""
        return self._delay

    async def acquire(self) -> float:
        """
        Wait until a global slot is available and take it.

        Returns:
            Total seconds spent waiting (0.0 when a slot was free)
        """
        waited = 0.0
        while True:
            now = self._clock()
            if now >= self.reset_at:
                self.remaining = self.limit
                self.reset_at = now + GLOBAL_WINDOW

            if self.remaining > 0:
                self.remaining -= 1
                return waited

            wait_time = self.reset_at - now + self.offset
            if self._delay is None or self._delay.done():
                self._delay = asyncio.ensure_future(self._wait(wait_time))
                logger.debug(f"Global limit reached, waiting {wait_time:.3f}s")

            start = self._clock()
            # Shield so a cancelled waiter does not cancel the shared delay
            await asyncio.shield(self._delay)
            waited += self._clock() - start

    async def _wait(self, wait_time: float) -> None:
        try:
            await asyncio.sleep(wait_time)
        finally:
            self._delay = None

    def on_global_rate_limit(self, retry_after: float) -> None:
        """
        Apply a global 429 from the server.

        The server's view wins over local accounting: the quota is marked
        exhausted until ``retry_after`` seconds from now. The configured
        offset is added once, by ``acquire``, when waiting out the window.
        """
        self.reset_at = self._clock() + max(0.0, retry_after)
        self.remaining = 0
        logger.warning(f"Globally rate limited for {retry_after:.3f}s")


__all__ = ["GLOBAL_WINDOW", "GlobalLimiter"]
