# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Handler registry: one sequential handler per bucket id and partition key."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from ..observability.notifications import DispatchEvent, notify_safely
from ..protocols.notification import NotificationSinkProtocol

if TYPE_CHECKING:
    from ..handlers.sequential import SequentialHandler

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """
    Owns the ``bucket_id:partition_key -> SequentialHandler`` table.

    ``get_or_create`` never awaits between lookup and insert, so at most one
    handler exists per key.
    """

    def __init__(self, notifier: NotificationSinkProtocol | None = None):
        self._handlers: dict[str, SequentialHandler] = {}
        self._notifier = notifier

    @staticmethod
    def key(bucket_id: str, partition_key: str) -> str:
        return f"{bucket_id}:{partition_key}"

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, key: object) -> bool:
        return key in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._handlers))

    def get(self, key: str) -> SequentialHandler | None:
        return self._handlers.get(key)

    def get_or_create(
        self,
        bucket_id: str,
        partition_key: str,
        factory: Callable[[str, str], SequentialHandler],
    ) -> SequentialHandler:
        """
        Return the handler for a key, creating it with ``factory`` if needed.

        Args:
            bucket_id: Bucket id (server hash or placeholder)
            partition_key: Partition key from the classifier
            factory: Called as ``factory(bucket_id, partition_key)``
        """
        key = self.key(bucket_id, partition_key)
        handler = self._handlers.get(key)
        if handler is None:
            handler = factory(bucket_id, partition_key)
            self._handlers[key] = handler
            logger.debug(f"Created handler {key}")
        return handler

    def sweep(self) -> dict[str, SequentialHandler]:
        """
        Remove every inactive handler.

        Returns:
            The removed handlers by key
        """
        swept: dict[str, SequentialHandler] = {}

        for key, handler in list(self._handlers.items()):
            if handler.inactive:
                del self._handlers[key]
                swept[key] = handler
                notify_safely(
                    self._notifier,
                    DispatchEvent.DEBUG,
                    f"Handler {handler.id} for {key} swept due to being inactive",
                )

        if swept:
            logger.debug(f"Swept {len(swept)} inactive handlers")
        notify_safely(self._notifier, DispatchEvent.HANDLER_SWEEP, swept)
        return swept


__all__ = ["HandlerRegistry"]
