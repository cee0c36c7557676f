# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Route classification for bucket lookup.

Concrete routes are reduced to a quota fingerprint (the bucket route) and a
partition key so that requests sharing a server-side bucket share a queue,
while requests for different major resources never block each other.
"""

import re
import time

from ..types.request import RequestMethod, method_name
from ..types.route import GLOBAL_PARTITION, ClassifiedRoute

SNOWFLAKE_EPOCH_MS = 1_420_070_400_000
"""Epoch of snowflake ids, in milliseconds (2015-01-01T00:00:00Z)."""

OLD_MESSAGE_AGE = 14 * 24 * 60 * 60
"""Age in seconds after which message deletes fall under a separate bucket."""

OLD_MESSAGE_SUFFIX = "/Delete Old Message"

_ID = r"(?<!\d)\d{16,19}(?!\d)"
_ID_PATTERN = re.compile(_ID)
_MAJOR_PATTERN = re.compile(r"^/(?:channels|guilds|webhooks)/(\d{16,19})(?!\d)")
_REACTIONS_PATTERN = re.compile(r"/reactions/(.*)")
_TRAILING_ID_PATTERN = re.compile(_ID + r"$")
_MESSAGE_ROUTE = "/channels/:id/messages/:id"


def snowflake_timestamp(snowflake: str | int) -> float:
    """Return the creation time encoded in a snowflake id, as epoch seconds."""
    return ((int(snowflake) >> 22) + SNOWFLAKE_EPOCH_MS) / 1000.0


class RouteClassifier:
    """
    Maps a concrete route and method to a ``ClassifiedRoute``.

    Example:
        >>> RouteClassifier.classify("/channels/123456789012345678/messages", "GET")
        ClassifiedRoute(partition_key='123456789012345678', bucket_route='/channels/:id/messages', original_route='/channels/123456789012345678/messages')
    """

    @staticmethod
    def classify(
        route: str, method: RequestMethod | str, now: float | None = None
    ) -> ClassifiedRoute:
        """
        Classify a route.

        Args:
            route: Concrete route, e.g. ``/channels/123.../messages/456...``
            method: HTTP method of the request
            now: Current epoch seconds (defaults to ``time.time()``); only
                used by the aged message delete rule

        Returns:
            ClassifiedRoute with partition key and bucket route
        """
        major_match = _MAJOR_PATTERN.match(route)
        partition_key = major_match.group(1) if major_match else GLOBAL_PARTITION

        # Reactions under one message share a bucket regardless of emoji
        base_route = _REACTIONS_PATTERN.sub(
            "/reactions/:reaction", _ID_PATTERN.sub(":id", route), count=1
        )

        exceptions = ""
        if (
            method_name(method) == RequestMethod.DELETE.value
            and base_route == _MESSAGE_ROUTE
        ):
            message_id = _TRAILING_ID_PATTERN.search(route)
            if message_id is not None:
                current = time.time() if now is None else now
                if current - snowflake_timestamp(message_id.group(0)) > OLD_MESSAGE_AGE:
                    exceptions += OLD_MESSAGE_SUFFIX

        return ClassifiedRoute(
            partition_key=partition_key,
            bucket_route=base_route + exceptions,
            original_route=route,
        )


__all__ = [
    "OLD_MESSAGE_AGE",
    "OLD_MESSAGE_SUFFIX",
    "SNOWFLAKE_EPOCH_MS",
    "RouteClassifier",
    "snowflake_timestamp",
]
