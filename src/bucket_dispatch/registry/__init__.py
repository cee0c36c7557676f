# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Bucket and handler registries with their background sweepers."""

from .buckets import BucketRegistry
from .handlers import HandlerRegistry
from .sweeper import Sweeper

__all__ = [
    "BucketRegistry",
    "HandlerRegistry",
    "Sweeper",
]
