# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability for Bucket Dispatch.

Classes:
    DispatchEvent: Names of the events sent to notification sinks.
    LoggingNotificationSink: Sink writing events to the logging module.
    MetricsNotificationSink: Sink turning events into counters.
    DispatchMetricsCollector: Counter collector with Prometheus export.

Functions:
    notify_safely: Deliver an event without letting a sink failure escape.
"""

from .collector import (
    METRIC_DEFINITIONS,
    DispatchMetricsCollector,
    MetricDefinition,
)
from .constants import (
    BUCKETS_SWEPT_TOTAL,
    HANDLERS_SWEPT_TOTAL,
    INVALID_REQUESTS_TOTAL,
    METRIC_PREFIX,
    RATE_LIMITS_TOTAL,
    REQUEST_RETRIES_TOTAL,
    REQUESTS_COMPLETED_TOTAL,
    REQUESTS_FAILED_TOTAL,
    REQUESTS_SENT_TOTAL,
)
from .notifications import (
    DispatchEvent,
    LoggingNotificationSink,
    MetricsNotificationSink,
    notify_safely,
)

__all__ = [
    "BUCKETS_SWEPT_TOTAL",
    "HANDLERS_SWEPT_TOTAL",
    "INVALID_REQUESTS_TOTAL",
    "METRIC_DEFINITIONS",
    "METRIC_PREFIX",
    "RATE_LIMITS_TOTAL",
    "REQUESTS_COMPLETED_TOTAL",
    "REQUESTS_FAILED_TOTAL",
    "REQUESTS_SENT_TOTAL",
    "REQUEST_RETRIES_TOTAL",
    "DispatchEvent",
    "DispatchMetricsCollector",
    "LoggingNotificationSink",
    "MetricDefinition",
    "MetricsNotificationSink",
    "notify_safely",
]
