# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol for notification sinks.

The dispatcher reports debug traces, rate limits, sweeps and invalid
request warnings through a sink it holds a reference to. Sinks are
fire-and-forget: the dispatcher ignores their return value and logs any
exception they raise.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class NotificationSinkProtocol(Protocol):
    """
    Protocol for notification sinks.

    Example:
        >>> class ListSink:
        ...     def __init__(self):
        ...         self.events = []
        ...     def notify(self, event, payload):
        ...         self.events.append((event, payload))
        >>>
        >>> isinstance(ListSink(), NotificationSinkProtocol)
        True
    """

    def notify(self, event: str, payload: Any) -> None:
        """
        Receive one event.

        Args:
            event: Event name (see ``DispatchEvent``)
            payload: Event payload; a string for ``debug``, a dict or a
                mapping of swept entries otherwise
        """
        ...
