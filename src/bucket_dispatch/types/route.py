# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Route types for bucket classification.

This module defines the classified route produced for every request and the
bucket registry entry it is looked up against.
"""

from dataclasses import dataclass

GLOBAL_PARTITION = "global"
"""Partition key used when a route has no major resource id."""

NEVER_EXPIRES = -1.0
"""``BucketEntry.last_access`` sentinel for entries that are never swept."""


@dataclass(frozen=True)
class ClassifiedRoute:
    """
    Quota fingerprint for a concrete route.

    Attributes:
        partition_key: Major resource id isolating queues of the same quota
            shape (e.g. one channel id), or ``"global"``.
        bucket_route: Route with ids replaced by ``:id`` plus any
            route-specific suffix, identifying the quota shape.
        original_route: The route exactly as submitted.
    """

    partition_key: str
    bucket_route: str
    original_route: str


@dataclass
class BucketEntry:
    """
    A bucket id known for a ``METHOD:bucket_route`` key.

    Attributes:
        id: Server-assigned bucket hash, or a ``Local(...)`` placeholder.
        last_access: Epoch seconds of the last response that confirmed the id,
            or ``NEVER_EXPIRES``.
    """

    id: str
    last_access: float

    @property
    def is_placeholder(self) -> bool:
        return self.id.startswith("Local(")


__all__ = [
    "GLOBAL_PARTITION",
    "NEVER_EXPIRES",
    "BucketEntry",
    "ClassifiedRoute",
]
