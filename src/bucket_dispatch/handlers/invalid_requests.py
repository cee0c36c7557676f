# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Tracking of invalid (401/403/429) responses within a rolling window."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

INVALID_REQUEST_WINDOW = 600.0
"""Length of the invalid request window in seconds (10 minutes)."""


@dataclass
class InvalidRequestTracker:
    """
    Counts invalid responses and reports every ``interval``-th one.

    The server bans clients that send too many invalid requests in a
    10 minute window; the count restarts when the window expires.
    """

    interval: int = 0
    window_seconds: float = INVALID_REQUEST_WINDOW
    clock: Callable[[], float] = time.monotonic
    count: int = 0
    window_start: float = field(default=-1.0)

    def record(self) -> dict[str, Any] | None:
        """
        Count one invalid response.

        Returns:
            A warning payload when the count reaches a multiple of
            ``interval``, otherwise None
        """
        now = self.clock()
        if self.window_start < 0 or now - self.window_start > self.window_seconds:
            self.count = 0
            self.window_start = now

        self.count += 1

        if self.interval > 0 and self.count % self.interval == 0:
            return {
                "count": self.count,
                "remaining_time": self.window_start + self.window_seconds - now,
            }
        return None


__all__ = ["INVALID_REQUEST_WINDOW", "InvalidRequestTracker"]
