# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures for the bucket_dispatch test suite.

This module contains a scripted in-memory transport and a recording
notification sink used across unit and integration tests.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from bucket_dispatch.config import DispatcherConfig
from bucket_dispatch.types.response import TransportResponse

# ============================================================================
# Fakes
# ============================================================================


@dataclass
class SentRequest:
    """One call recorded by FakeTransport."""

    method: str
    url: str
    headers: dict[str, str]
    body: Any
    started: float
    finished: float = 0.0


def json_response(
    status: int = 200,
    payload: Any = None,
    headers: Mapping[str, str] | None = None,
) -> TransportResponse:
    """Build a JSON TransportResponse."""
    return TransportResponse(
        status=status,
        headers={"content-type": "application/json", **(headers or {})},
        body=json.dumps(payload if payload is not None else {}).encode(),
    )


@dataclass
class FakeTransport:
    """
    Transport returning scripted responses in order.

    Each script entry is a TransportResponse or an Exception to raise. When
    the script runs out, ``default`` is returned.
    """

    script: list[TransportResponse | Exception] = field(default_factory=list)
    default: TransportResponse = field(default_factory=json_response)
    latency: float = 0.0
    calls: list[SentRequest] = field(default_factory=list)
    closed: bool = False

    def queue(self, *entries: TransportResponse | Exception) -> FakeTransport:
        self.script.extend(entries)
        return self

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Any = None,
    ) -> TransportResponse:
        call = SentRequest(method, url, dict(headers), body, time.monotonic())
        self.calls.append(call)
        if self.latency:
            await asyncio.sleep(self.latency)
        call.finished = time.monotonic()

        entry = self.script.pop(0) if self.script else self.default
        if isinstance(entry, Exception):
            raise entry
        return entry

    async def aclose(self) -> None:
        self.closed = True


class RecordingSink:
    """Notification sink that keeps every event."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def notify(self, event: str, payload: Any) -> None:
        self.events.append((event, payload))

    def of(self, event: str) -> list[Any]:
        return [payload for name, payload in self.events if name == event]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def fake_transport() -> FakeTransport:
    """A scripted transport answering 200 {} by default."""
    return FakeTransport()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def fast_config() -> DispatcherConfig:
    """Config with tiny delays and sweepers disabled."""
    return DispatcherConfig(
        api="https://api.test",
        offset=0.0,
        retries=2,
        retry_backoff=0.01,
        max_backoff=0.02,
        max_rate_limit_retries=3,
        bucket_sweep_interval=0,
        handler_sweep_interval=0,
        request_timeout=1.0,
    )


@pytest.fixture
def respond():
    """Factory building JSON TransportResponse objects."""
    return json_response
