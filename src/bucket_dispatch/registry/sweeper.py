# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Periodic background sweeping for the registries.

A ``Sweeper`` runs one sweep callable on a fixed interval in its own asyncio
task. Failures inside a sweep are logged and reported, never propagated, so
a bad cycle cannot take the dispatcher down.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any

from ..config import MAX_SWEEP_INTERVAL, sweep_enabled
from ..exceptions import ConfigurationError
from ..observability.notifications import DispatchEvent, notify_safely
from ..protocols.notification import NotificationSinkProtocol

logger = logging.getLogger(__name__)


class Sweeper:
    """
    Runs ``sweep`` every ``interval`` seconds.

    An interval of 0 or ``math.inf`` disables the sweeper: ``start`` is then a
    no-op. Intervals above 4 hours are rejected at construction.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        sweep: Callable[[], Any],
        notifier: NotificationSinkProtocol | None = None,
    ):
        if sweep_enabled(interval) and interval > MAX_SWEEP_INTERVAL:
            raise ConfigurationError("Cannot set an interval greater than 4 hours")
        if interval < 0:
            raise ConfigurationError(f"{name} sweep interval must be non-negative")

        self.name = name
        self.interval = interval
        self._sweep = sweep
        self._notifier = notifier
        self._task: asyncio.Task[None] | None = None

    @property
    def enabled(self) -> bool:
        return sweep_enabled(self.interval)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background task. Requires a running event loop."""
        if not self.enabled or self.running:
            return

        self._task = asyncio.create_task(self._run(), name=f"{self.name}_sweeper")
        logger.debug(f"{self.name} sweeper started (interval={self.interval}s)")

    def cancel(self) -> None:
        """Request the background task to stop. Safe to call at any time."""
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def stop(self) -> None:
        """Stop the background task and wait for it to finish. Idempotent."""
        task = self._task
        self._task = None
        if task is None:
            return
        if not task.done():
            task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug(f"{self.name} sweeper stopped")

    def run_once(self) -> Any:
        """Run one sweep, logging and reporting any exception instead of raising."""
        try:
            return self._sweep()
        except Exception as e:
            logger.error(f"Error during {self.name} sweep: {e}", exc_info=True)
            notify_safely(
                self._notifier,
                DispatchEvent.DEBUG,
                f"{self.name} sweep failed: {e!r}",
            )
            return None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.run_once()


__all__ = ["Sweeper"]
