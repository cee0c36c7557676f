# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Default transport and body encoder implementations."""

from .encoder import MultipartBodyEncoder
from .httpx_transport import HttpxTransport

__all__ = ["HttpxTransport", "MultipartBodyEncoder"]
