# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Per-bucket sequential handlers and invalid request tracking."""

from .invalid_requests import INVALID_REQUEST_WINDOW, InvalidRequestTracker
from .sequential import SequentialHandler

__all__ = [
    "INVALID_REQUEST_WINDOW",
    "InvalidRequestTracker",
    "SequentialHandler",
]
