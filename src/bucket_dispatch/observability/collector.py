# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metrics collector supporting both dict-based and Prometheus counters.

Features:
    1. Thread-safe counter operations
    2. Prometheus counter registration in a per-collector registry
    3. Dict-based snapshot for JSON export
    4. Label cardinality protection (max 1000 unique combinations per metric)
    5. Optional HTTP server for Prometheus scraping

Usage:
    >>> from bucket_dispatch.observability.collector import DispatchMetricsCollector
    >>> collector = DispatchMetricsCollector()
    >>> collector.inc_counter('bucket_dispatch_requests_sent_total',
    ...                       labels={'method': 'GET', 'route': '/users/@me'})
    >>> metrics = collector.get_metrics()
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, ClassVar

from prometheus_client import CollectorRegistry, Counter, start_http_server

from .constants import (
    BUCKETS_SWEPT_TOTAL,
    HANDLERS_SWEPT_TOTAL,
    INVALID_REQUESTS_TOTAL,
    MAX_LABEL_COMBINATIONS,
    RATE_LIMITS_TOTAL,
    REQUEST_RETRIES_TOTAL,
    REQUESTS_COMPLETED_TOTAL,
    REQUESTS_FAILED_TOTAL,
    REQUESTS_SENT_TOTAL,
)

logger = logging.getLogger(__name__)


@dataclass
class MetricDefinition:
    """Schema for a counter: name, description and label names."""

    name: str
    description: str
    label_names: tuple[str, ...] = ()


METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    REQUESTS_SENT_TOTAL: MetricDefinition(
        REQUESTS_SENT_TOTAL,
        "Total transport calls made",
        ("method", "route"),
    ),
    REQUESTS_COMPLETED_TOTAL: MetricDefinition(
        REQUESTS_COMPLETED_TOTAL,
        "Total requests completed successfully",
        ("method", "route"),
    ),
    REQUESTS_FAILED_TOTAL: MetricDefinition(
        REQUESTS_FAILED_TOTAL,
        "Total requests failed",
        ("method", "route", "reason"),
    ),
    REQUEST_RETRIES_TOTAL: MetricDefinition(
        REQUEST_RETRIES_TOTAL,
        "Total retries after server or transport errors",
        ("method", "route"),
    ),
    RATE_LIMITS_TOTAL: MetricDefinition(
        RATE_LIMITS_TOTAL,
        "Total rate limit waits",
        ("route", "global"),
    ),
    INVALID_REQUESTS_TOTAL: MetricDefinition(
        INVALID_REQUESTS_TOTAL,
        "Total invalid (401/403/429) responses",
        (),
    ),
    BUCKETS_SWEPT_TOTAL: MetricDefinition(
        BUCKETS_SWEPT_TOTAL,
        "Total bucket entries swept",
        (),
    ),
    HANDLERS_SWEPT_TOTAL: MetricDefinition(
        HANDLERS_SWEPT_TOTAL,
        "Total handlers swept",
        (),
    ),
}


class DispatchMetricsCollector:
    """
    Counter collector backed by a dict snapshot and Prometheus.

    Thread Safety:
        All operations use RLock for thread-safe access.

    Cardinality Protection:
        At most MAX_LABEL_COMBINATIONS unique label combinations are tracked
        per metric; further combinations are dropped with a warning.
    """

    MAX_LABEL_COMBINATIONS: ClassVar[int] = MAX_LABEL_COMBINATIONS

    def __init__(
        self,
        enable_prometheus: bool = True,
        registry: CollectorRegistry | None = None,
    ) -> None:
        """
        Initialize the metrics collector.

        Args:
            enable_prometheus: Whether to mirror counters into Prometheus
            registry: Prometheus registry; a private one is created by default
                so several dispatchers can coexist in one process
        """
        self._enable_prometheus = enable_prometheus
        self._registry = registry if registry is not None else CollectorRegistry()

        self._counters: dict[str, dict[str, int]] = defaultdict(
            lambda: defaultdict(int)
        )
        self._lock = threading.RLock()
        self._prom_counters: dict[str, Counter] = {}
        self._label_combinations: dict[str, set[str]] = defaultdict(set)
        self._server_running = False

        logger.debug(
            f"DispatchMetricsCollector initialized "
            f"(prometheus={'enabled' if self._enable_prometheus else 'disabled'})"
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def _labels_to_key(self, labels: dict[str, str] | None) -> str:
        """Convert labels dict to a stable string key."""
        if not labels:
            return ""
        return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))

    def _check_cardinality(self, name: str, label_key: str) -> bool:
        if label_key in self._label_combinations[name]:
            return True
        if len(self._label_combinations[name]) >= self.MAX_LABEL_COMBINATIONS:
            logger.warning(
                f"Cardinality limit ({self.MAX_LABEL_COMBINATIONS}) reached "
                f"for metric {name}. Dropping label combination: {label_key}"
            )
            return False
        self._label_combinations[name].add(label_key)
        return True

    def _get_or_create_prom_counter(
        self, name: str, labels: dict[str, str] | None
    ) -> Counter | None:
        if not self._enable_prometheus:
            return None

        if name not in self._prom_counters:
            defn = METRIC_DEFINITIONS.get(name)
            description = defn.description if defn else f"Dynamic counter: {name}"
            label_names = (
                defn.label_names if defn else tuple(sorted(labels or {}))
            )
            try:
                self._prom_counters[name] = Counter(
                    name,
                    description,
                    list(label_names),
                    registry=self._registry,
                )
            except ValueError as e:
                logger.warning(f"Failed to create Prometheus counter {name}: {e}")
                return None

        return self._prom_counters.get(name)

    def inc_counter(
        self,
        name: str,
        value: int = 1,
        labels: dict[str, str] | None = None,
    ) -> None:
        """
        Increment a counter metric.

        Args:
            name: Metric name
            value: Value to increment by (must be non-negative)
            labels: Optional labels dict

        Raises:
            ValueError: If value is negative
        """
        if value < 0:
            raise ValueError("Counter increment must be non-negative")

        label_key = self._labels_to_key(labels)

        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._counters[name][label_key] += value
            prom_counter = self._get_or_create_prom_counter(name, labels)

        if prom_counter is not None:
            try:
                if labels:
                    prom_counter.labels(**labels).inc(value)
                else:
                    prom_counter.inc(value)
            except ValueError as e:
                logger.debug(f"Prometheus counter update failed for {name}: {e}")

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """Return the current value of one counter (0 if never incremented)."""
        with self._lock:
            return self._counters.get(name, {}).get(self._labels_to_key(labels), 0)

    def get_total(self, name: str) -> int:
        """Return the sum of a counter across all label combinations."""
        with self._lock:
            return sum(self._counters.get(name, {}).values())

    def get_metrics(self) -> dict[str, Any]:
        """Return a JSON-serializable snapshot: ``{"counters": {name: {labels: value}}}``."""
        with self._lock:
            return {
                "counters": {
                    name: dict(values) for name, values in self._counters.items()
                }
            }

    def reset(self) -> None:
        """Reset the dict snapshot. Prometheus counters are monotonic and kept."""
        with self._lock:
            self._counters.clear()
            self._label_combinations.clear()

        logger.debug("Metrics collector reset")

    def start_http_server(self, host: str = "127.0.0.1", port: int = 9090) -> bool:
        """
        Start the Prometheus HTTP server for this collector's registry.

        Returns:
            True if the server is running, False if it failed to start
        """
        if self._server_running:
            logger.warning("Prometheus server already running")
            return True

        try:
            start_http_server(port, addr=host, registry=self._registry)
        except OSError as e:
            logger.error(f"Failed to start Prometheus server: {e}")
            return False

        self._server_running = True
        logger.info(f"Prometheus metrics server started on {host}:{port}")
        return True

    @property
    def prometheus_enabled(self) -> bool:
        return self._enable_prometheus

    @property
    def server_running(self) -> bool:
        return self._server_running


__all__ = [
    "METRIC_DEFINITIONS",
    "DispatchMetricsCollector",
    "MetricDefinition",
]
