# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Route classification."""

from .classifier import (
    OLD_MESSAGE_AGE,
    OLD_MESSAGE_SUFFIX,
    SNOWFLAKE_EPOCH_MS,
    RouteClassifier,
    snowflake_timestamp,
)

__all__ = [
    "OLD_MESSAGE_AGE",
    "OLD_MESSAGE_SUFFIX",
    "SNOWFLAKE_EPOCH_MS",
    "RouteClassifier",
    "snowflake_timestamp",
]
