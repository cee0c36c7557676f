# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Notification events and the built-in sinks.

``LoggingNotificationSink`` writes every event to the standard logging
module. ``MetricsNotificationSink`` turns events into counters on a
``DispatchMetricsCollector`` and can forward to another sink.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from ..protocols.notification import NotificationSinkProtocol
from .collector import DispatchMetricsCollector
from .constants import (
    BUCKETS_SWEPT_TOTAL,
    HANDLERS_SWEPT_TOTAL,
    INVALID_REQUESTS_TOTAL,
    RATE_LIMITS_TOTAL,
    REQUEST_RETRIES_TOTAL,
    REQUESTS_COMPLETED_TOTAL,
    REQUESTS_FAILED_TOTAL,
    REQUESTS_SENT_TOTAL,
)

logger = logging.getLogger(__name__)


class DispatchEvent(str, Enum):
    """Events reported to the notification sink."""

    DEBUG = "debug"
    """Free-form trace message (payload: str)."""

    RATE_LIMITED = "rate_limited"
    """A request is waiting on a bucket or global limit (payload: dict)."""

    BUCKET_SWEEP = "bucket_sweep"
    """Bucket entries removed by a sweep (payload: dict of key -> BucketEntry)."""

    HANDLER_SWEEP = "handler_sweep"
    """Handlers removed by a sweep (payload: dict of key -> SequentialHandler)."""

    INVALID_REQUEST_WARNING = "invalid_request_warning"
    """Invalid request count crossed a warning threshold (payload: dict)."""

    RESPONSE = "response"
    """A transport call finished (payload: dict)."""

    REQUEST_FAILED = "request_failed"
    """A request ended with a terminal error (payload: dict)."""


def notify_safely(
    sink: NotificationSinkProtocol | None, event: DispatchEvent, payload: Any
) -> None:
    """Deliver an event, logging (never raising) if the sink fails."""
    if sink is None:
        return
    try:
        sink.notify(event.value, payload)
    except Exception as e:
        logger.warning(f"Notification sink failed for {event.value} event: {e}")


class LoggingNotificationSink:
    """Sink that writes events to a logger."""

    def __init__(self, logger_name: str = "bucket_dispatch.events") -> None:
        self._logger = logging.getLogger(logger_name)

    def notify(self, event: str, payload: Any) -> None:
        if event == DispatchEvent.DEBUG.value:
            self._logger.debug(payload)
        elif event == DispatchEvent.RATE_LIMITED.value:
            self._logger.warning(
                f"Rate limited on {payload.get('method')} {payload.get('route')} "
                f"(bucket={payload.get('bucket')}, global={payload.get('global')}, "
                f"retry in {payload.get('time_to_reset', 0.0):.3f}s)"
            )
        elif event in (DispatchEvent.BUCKET_SWEEP.value, DispatchEvent.HANDLER_SWEEP.value):
            if payload:
                self._logger.info(f"{event}: removed {len(payload)} entries")
        elif event == DispatchEvent.INVALID_REQUEST_WARNING.value:
            self._logger.warning(
                f"{payload.get('count')} invalid requests in the current window, "
                f"{payload.get('remaining_time', 0.0):.0f}s until it resets"
            )
        elif event == DispatchEvent.REQUEST_FAILED.value:
            self._logger.debug(f"Request failed: {payload}")
        else:
            self._logger.debug(f"{event}: {payload}")


class MetricsNotificationSink:
    """
    Sink that records events as counters.

    Args:
        collector: Collector receiving the counters
        forward_to: Optional sink that also receives every event
    """

    def __init__(
        self,
        collector: DispatchMetricsCollector | None = None,
        forward_to: NotificationSinkProtocol | None = None,
    ) -> None:
        self.collector = collector or DispatchMetricsCollector()
        self._forward_to = forward_to

    def notify(self, event: str, payload: Any) -> None:
        if event == DispatchEvent.RESPONSE.value:
            self._record_response(payload)
        elif event == DispatchEvent.RATE_LIMITED.value:
            self.collector.inc_counter(
                RATE_LIMITS_TOTAL,
                labels={
                    "route": str(payload.get("route")),
                    "global": str(bool(payload.get("global"))).lower(),
                },
            )
        elif event == DispatchEvent.REQUEST_FAILED.value:
            self.collector.inc_counter(
                REQUESTS_FAILED_TOTAL,
                labels={
                    "method": str(payload.get("method")),
                    "route": str(payload.get("route")),
                    "reason": str(payload.get("reason")),
                },
            )
        elif event == DispatchEvent.BUCKET_SWEEP.value and payload:
            self.collector.inc_counter(BUCKETS_SWEPT_TOTAL, len(payload))
        elif event == DispatchEvent.HANDLER_SWEEP.value and payload:
            self.collector.inc_counter(HANDLERS_SWEPT_TOTAL, len(payload))

        if self._forward_to is not None:
            self._forward_to.notify(event, payload)

    def _record_response(self, payload: dict[str, Any]) -> None:
        labels = {
            "method": str(payload.get("method")),
            "route": str(payload.get("route")),
        }
        self.collector.inc_counter(REQUESTS_SENT_TOTAL, labels=labels)

        status = payload.get("status")
        if status is not None and 200 <= status < 400:
            self.collector.inc_counter(REQUESTS_COMPLETED_TOTAL, labels=labels)
        if status in (401, 403, 429):
            self.collector.inc_counter(INVALID_REQUESTS_TOTAL)
        if payload.get("retry") and status != 429:
            self.collector.inc_counter(REQUEST_RETRIES_TOTAL, labels=labels)


__all__ = [
    "DispatchEvent",
    "LoggingNotificationSink",
    "MetricsNotificationSink",
    "notify_safely",
]
