# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Global rate limit coordination."""

from .global_limiter import GLOBAL_WINDOW, GlobalLimiter

__all__ = ["GLOBAL_WINDOW", "GlobalLimiter"]
