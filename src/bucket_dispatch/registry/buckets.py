# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Bucket registry: classified routes to server-assigned bucket ids.

Entries are only stored once the server has told us the real bucket id for
a ``METHOD:bucket_route`` key. Until then lookups return an unsaved
placeholder so one-shot routes never pollute the table.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator

from ..observability.notifications import DispatchEvent, notify_safely
from ..protocols.notification import NotificationSinkProtocol
from ..types.request import RequestMethod, method_name
from ..types.route import NEVER_EXPIRES, BucketEntry

logger = logging.getLogger(__name__)


class BucketRegistry:
    """
    Owns the ``METHOD:bucket_route -> BucketEntry`` table.

    All mutating methods are synchronous, so within one event loop an insert
    and a sweep of the same key can never interleave.
    """

    def __init__(
        self,
        notifier: NotificationSinkProtocol | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._entries: dict[str, BucketEntry] = {}
        self._notifier = notifier
        self._clock = clock

    @staticmethod
    def key(method: RequestMethod | str, bucket_route: str) -> str:
        return f"{method_name(method)}:{bucket_route}"

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def get(self, key: str) -> BucketEntry | None:
        return self._entries.get(key)

    def resolve(self, method: RequestMethod | str, bucket_route: str) -> BucketEntry:
        """
        Return the known entry, or an unsaved ``Local(...)`` placeholder.

        Args:
            method: HTTP method
            bucket_route: Bucket route from the classifier

        Returns:
            The stored BucketEntry, or a placeholder with ``NEVER_EXPIRES``
        """
        key = self.key(method, bucket_route)
        entry = self._entries.get(key)
        if entry is not None:
            return entry
        return BucketEntry(id=f"Local({key})", last_access=NEVER_EXPIRES)

    def record_discovery(
        self, method: RequestMethod | str, bucket_route: str, server_id: str
    ) -> BucketEntry:
        """Insert or update the entry for a key with the server's bucket id."""
        key = self.key(method, bucket_route)
        entry = self._entries.get(key)
        if entry is None:
            entry = BucketEntry(id=server_id, last_access=self._clock())
            self._entries[key] = entry
        else:
            entry.id = server_id
            entry.last_access = self._clock()

        notify_safely(
            self._notifier,
            DispatchEvent.DEBUG,
            f"Bucket {server_id} discovered for {key}",
        )
        return entry

    def touch(self, method: RequestMethod | str, bucket_route: str) -> None:
        """Refresh the last access time of an existing entry."""
        entry = self._entries.get(self.key(method, bucket_route))
        if entry is not None:
            entry.last_access = self._clock()

    def sweep(self, max_idle: float) -> dict[str, BucketEntry]:
        """
        Remove entries idle for longer than ``max_idle`` seconds.

        Returns:
            The removed entries by key
        """
        now = self._clock()
        swept: dict[str, BucketEntry] = {}

        for key, entry in list(self._entries.items()):
            if now - entry.last_access > max_idle:
                del self._entries[key]
                swept[key] = entry
                notify_safely(
                    self._notifier,
                    DispatchEvent.DEBUG,
                    f"Bucket {entry.id} for {key} swept due to lifetime being exceeded",
                )

        if swept:
            logger.debug(f"Swept {len(swept)} bucket entries")
        notify_safely(self._notifier, DispatchEvent.BUCKET_SWEEP, swept)
        return swept


__all__ = ["BucketRegistry"]
