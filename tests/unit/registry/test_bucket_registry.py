# SPDX-License-Identifier: Apache-2.0
"""Tests for BucketRegistry."""

from bucket_dispatch.observability.notifications import DispatchEvent
from bucket_dispatch.registry.buckets import BucketRegistry
from bucket_dispatch.types.request import RequestMethod
from bucket_dispatch.types.route import NEVER_EXPIRES


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestResolve:
    def test_unknown_key_returns_unsaved_placeholder(self):
        registry = BucketRegistry()
        entry = registry.resolve("GET", "/channels/:id/messages")

        assert entry.id == "Local(GET:/channels/:id/messages)"
        assert entry.last_access == NEVER_EXPIRES
        assert entry.is_placeholder
        assert len(registry) == 0

    def test_key_format(self):
        assert BucketRegistry.key(RequestMethod.POST, "/x") == "POST:/x"
        assert BucketRegistry.key("post", "/x") == "POST:/x"


class TestDiscovery:
    def test_record_discovery_inserts(self, sink):
        clock = FakeClock()
        registry = BucketRegistry(notifier=sink, clock=clock)

        registry.record_discovery("GET", "/channels/:id", "abc")

        assert "GET:/channels/:id" in registry
        entry = registry.resolve("GET", "/channels/:id")
        assert entry.id == "abc"
        assert entry.last_access == 1000.0
        assert sink.of(DispatchEvent.DEBUG.value)

    def test_record_discovery_updates_id(self):
        clock = FakeClock()
        registry = BucketRegistry(clock=clock)
        registry.record_discovery("GET", "/channels/:id", "abc")

        clock.now = 1500.0
        registry.record_discovery("GET", "/channels/:id", "def")

        entry = registry.get("GET:/channels/:id")
        assert entry.id == "def"
        assert entry.last_access == 1500.0
        assert len(registry) == 1

    def test_touch_refreshes_last_access(self):
        clock = FakeClock()
        registry = BucketRegistry(clock=clock)
        registry.record_discovery("GET", "/a", "abc")

        clock.now = 2000.0
        registry.touch("GET", "/a")
        assert registry.get("GET:/a").last_access == 2000.0

    def test_touch_unknown_key_is_noop(self):
        registry = BucketRegistry()
        registry.touch("GET", "/a")
        assert len(registry) == 0

    def test_placeholder_never_stored_by_touch(self):
        registry = BucketRegistry()
        registry.resolve("GET", "/a")
        registry.touch("GET", "/a")
        assert "GET:/a" not in registry


class TestSweep:
    def test_idle_entries_removed(self, sink):
        clock = FakeClock()
        registry = BucketRegistry(notifier=sink, clock=clock)
        registry.record_discovery("GET", "/old", "old")
        clock.now += 50
        registry.record_discovery("GET", "/fresh", "fresh")

        clock.now += 60
        swept = registry.sweep(max_idle=100)

        assert list(swept) == ["GET:/old"]
        assert "GET:/old" not in registry
        assert "GET:/fresh" in registry
        assert sink.of(DispatchEvent.BUCKET_SWEEP.value)[-1] == swept

    def test_touched_entry_survives(self):
        clock = FakeClock()
        registry = BucketRegistry(clock=clock)
        registry.record_discovery("GET", "/busy", "abc")

        clock.now += 90
        registry.touch("GET", "/busy")
        clock.now += 90

        assert registry.sweep(max_idle=100) == {}
        assert "GET:/busy" in registry

    def test_sweep_event_sent_when_nothing_removed(self, sink):
        registry = BucketRegistry(notifier=sink)
        registry.sweep(max_idle=100)
        assert sink.of(DispatchEvent.BUCKET_SWEEP.value) == [{}]

    def test_iteration_is_snapshot(self):
        registry = BucketRegistry()
        registry.record_discovery("GET", "/a", "a")
        registry.record_discovery("GET", "/b", "b")
        for key in registry:
            registry.record_discovery("GET", "/c", "c")
            assert key in ("GET:/a", "GET:/b")
