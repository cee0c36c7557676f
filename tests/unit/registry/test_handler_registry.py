# SPDX-License-Identifier: Apache-2.0
"""Tests for HandlerRegistry."""

from unittest.mock import Mock

from bucket_dispatch.observability.notifications import DispatchEvent
from bucket_dispatch.registry.handlers import HandlerRegistry


def make_handler(bucket_id: str, partition_key: str, inactive: bool = True) -> Mock:
    handler = Mock()
    handler.id = f"{bucket_id}:{partition_key}"
    handler.inactive = inactive
    return handler


class TestGetOrCreate:
    def test_creates_once_per_key(self):
        registry = HandlerRegistry()
        factory = Mock(side_effect=make_handler)

        first = registry.get_or_create("abc", "123", factory)
        second = registry.get_or_create("abc", "123", factory)

        assert first is second
        factory.assert_called_once_with("abc", "123")
        assert len(registry) == 1

    def test_partitions_get_separate_handlers(self):
        registry = HandlerRegistry()
        first = registry.get_or_create("abc", "1", make_handler)
        second = registry.get_or_create("abc", "2", make_handler)

        assert first is not second
        assert set(registry) == {"abc:1", "abc:2"}
        assert registry.get("abc:2") is second


class TestSweep:
    def test_only_inactive_handlers_removed(self, sink):
        registry = HandlerRegistry(notifier=sink)
        registry.get_or_create("idle", "1", make_handler)
        registry.get_or_create(
            "busy", "1", lambda b, p: make_handler(b, p, inactive=False)
        )

        swept = registry.sweep()

        assert list(swept) == ["idle:1"]
        assert "busy:1" in registry
        assert "idle:1" not in registry
        assert sink.of(DispatchEvent.HANDLER_SWEEP.value) == [swept]
        assert any("idle:1" in message for message in sink.of(DispatchEvent.DEBUG.value))

    def test_swept_key_recreated_on_demand(self):
        registry = HandlerRegistry()
        first = registry.get_or_create("abc", "1", make_handler)
        registry.sweep()
        second = registry.get_or_create("abc", "1", make_handler)
        assert first is not second
