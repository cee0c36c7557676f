# SPDX-License-Identifier: Apache-2.0
"""
Unit tests for the observability collector module.

Tests cover:
- DispatchMetricsCollector: Thread-safe counters with Prometheus support
- Label cardinality protection
- Private Prometheus registries
"""

from __future__ import annotations

import threading
from unittest.mock import patch

import pytest

from bucket_dispatch.observability.collector import (
    METRIC_DEFINITIONS,
    DispatchMetricsCollector,
)
from bucket_dispatch.observability.constants import (
    BUCKETS_SWEPT_TOTAL,
    REQUESTS_SENT_TOTAL,
)

LABELS = {"method": "GET", "route": "/users/@me"}


class TestMetricDefinitions:
    def test_all_names_prefixed(self):
        assert all(name.startswith("bucket_dispatch_") for name in METRIC_DEFINITIONS)

    def test_counters_end_with_total(self):
        assert all(name.endswith("_total") for name in METRIC_DEFINITIONS)


class TestCounters:
    def test_inc_and_get(self):
        collector = DispatchMetricsCollector()
        collector.inc_counter(REQUESTS_SENT_TOTAL, labels=LABELS)
        collector.inc_counter(REQUESTS_SENT_TOTAL, 2, labels=LABELS)

        assert collector.get_counter(REQUESTS_SENT_TOTAL, LABELS) == 3
        assert collector.get_counter(REQUESTS_SENT_TOTAL, {"method": "POST", "route": "/x"}) == 0

    def test_get_total_sums_labels(self):
        collector = DispatchMetricsCollector()
        collector.inc_counter(REQUESTS_SENT_TOTAL, labels=LABELS)
        collector.inc_counter(REQUESTS_SENT_TOTAL, labels={"method": "POST", "route": "/x"})
        assert collector.get_total(REQUESTS_SENT_TOTAL) == 2

    def test_negative_increment_rejected(self):
        collector = DispatchMetricsCollector()
        with pytest.raises(ValueError):
            collector.inc_counter(BUCKETS_SWEPT_TOTAL, -1)

    def test_get_metrics_snapshot(self):
        collector = DispatchMetricsCollector()
        collector.inc_counter(BUCKETS_SWEPT_TOTAL, 4)
        assert collector.get_metrics() == {"counters": {BUCKETS_SWEPT_TOTAL: {"": 4}}}

    def test_reset(self):
        collector = DispatchMetricsCollector()
        collector.inc_counter(BUCKETS_SWEPT_TOTAL)
        collector.reset()
        assert collector.get_total(BUCKETS_SWEPT_TOTAL) == 0

    def test_thread_safety(self):
        collector = DispatchMetricsCollector()

        def work():
            for _ in range(500):
                collector.inc_counter(REQUESTS_SENT_TOTAL, labels=LABELS)

        threads = [threading.Thread(target=work) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert collector.get_counter(REQUESTS_SENT_TOTAL, LABELS) == 2000


class TestCardinality:
    def test_new_combinations_dropped_over_limit(self):
        collector = DispatchMetricsCollector(enable_prometheus=False)
        collector.MAX_LABEL_COMBINATIONS = 2

        for route in ("/a", "/b", "/c"):
            collector.inc_counter(REQUESTS_SENT_TOTAL, labels={"method": "GET", "route": route})

        assert collector.get_total(REQUESTS_SENT_TOTAL) == 2
        assert collector.get_counter(REQUESTS_SENT_TOTAL, {"method": "GET", "route": "/c"}) == 0


class TestPrometheus:
    def test_private_registries_do_not_collide(self):
        first = DispatchMetricsCollector()
        second = DispatchMetricsCollector()
        first.inc_counter(REQUESTS_SENT_TOTAL, labels=LABELS)
        second.inc_counter(REQUESTS_SENT_TOTAL, labels=LABELS)

        assert first.registry is not second.registry
        assert (
            first.registry.get_sample_value(REQUESTS_SENT_TOTAL, LABELS) == 1.0
        )

    def test_disabled_prometheus_registers_nothing(self):
        collector = DispatchMetricsCollector(enable_prometheus=False)
        collector.inc_counter(REQUESTS_SENT_TOTAL, labels=LABELS)
        assert not collector.prometheus_enabled
        assert collector.registry.get_sample_value(REQUESTS_SENT_TOTAL, LABELS) is None

    def test_start_http_server(self):
        collector = DispatchMetricsCollector()
        with patch("bucket_dispatch.observability.collector.start_http_server") as start:
            assert collector.start_http_server("127.0.0.1", 9999)
            assert collector.start_http_server("127.0.0.1", 9999)

        start.assert_called_once_with(9999, addr="127.0.0.1", registry=collector.registry)
        assert collector.server_running

    def test_start_http_server_failure(self):
        collector = DispatchMetricsCollector()
        with patch(
            "bucket_dispatch.observability.collector.start_http_server",
            side_effect=OSError("in use"),
        ):
            assert not collector.start_http_server()
        assert not collector.server_running
