# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric name constants following Prometheus naming conventions.

All metric names use the `bucket_dispatch_` prefix.

Naming Conventions:
    - Counter metrics end with `_total`

Label Best Practices:
    To prevent label cardinality explosion, use only:
    - `method` - HTTP method
    - `route` - Bucket route (ids already replaced by `:id`)
    - `reason` - Failure reason (enum: client_error, server_error, transport, rate_limit, decode, cancelled)
    - `global` - Boolean as string (true, false)

    NEVER use:
    - `original_route` - Contains raw ids (unbounded!)
    - `bucket_id` - Server hashes change over time (unbounded!)
"""


# =============================================================================
# Global Prefix
# =============================================================================

METRIC_PREFIX = "bucket_dispatch"
"""Prefix for all Prometheus metrics in this library."""


# =============================================================================
# Request Metrics (handlers/sequential.py)
# =============================================================================

REQUESTS_SENT_TOTAL = f"{METRIC_PREFIX}_requests_sent_total"
"""Total transport calls made, including retries."""

REQUESTS_COMPLETED_TOTAL = f"{METRIC_PREFIX}_requests_completed_total"
"""Total requests that returned a successful response."""

REQUESTS_FAILED_TOTAL = f"{METRIC_PREFIX}_requests_failed_total"
"""Total requests that ended with a terminal error."""

REQUEST_RETRIES_TOTAL = f"{METRIC_PREFIX}_request_retries_total"
"""Total retries after 5xx responses or transport failures."""

RATE_LIMITS_TOTAL = f"{METRIC_PREFIX}_rate_limits_total"
"""Total rate limit waits (pre-emptive or after a 429)."""

INVALID_REQUESTS_TOTAL = f"{METRIC_PREFIX}_invalid_requests_total"
"""Total 401/403/429 responses."""


# =============================================================================
# Registry Metrics (registry/*.py)
# =============================================================================

BUCKETS_SWEPT_TOTAL = f"{METRIC_PREFIX}_buckets_swept_total"
"""Total bucket entries removed by the bucket sweeper."""

HANDLERS_SWEPT_TOTAL = f"{METRIC_PREFIX}_handlers_swept_total"
"""Total handlers removed by the handler sweeper."""


MAX_LABEL_COMBINATIONS = 1000
"""Maximum unique label combinations tracked per metric."""


__all__ = [
    "BUCKETS_SWEPT_TOTAL",
    "HANDLERS_SWEPT_TOTAL",
    "INVALID_REQUESTS_TOTAL",
    "MAX_LABEL_COMBINATIONS",
    "METRIC_PREFIX",
    "RATE_LIMITS_TOTAL",
    "REQUESTS_COMPLETED_TOTAL",
    "REQUESTS_FAILED_TOTAL",
    "REQUESTS_SENT_TOTAL",
    "REQUEST_RETRIES_TOTAL",
]
