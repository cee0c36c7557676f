# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Type definitions and constants."""

from .rate_limit import ErrorBody, RateLimitedBody, RateLimitHeaders
from .request import APIRequest, RawFile, RequestMethod, ResolvedRequest
from .response import TransportResponse
from .route import (
    GLOBAL_PARTITION,
    NEVER_EXPIRES,
    BucketEntry,
    ClassifiedRoute,
)

__all__ = [
    "GLOBAL_PARTITION",
    "NEVER_EXPIRES",
    # Request types
    "APIRequest",
    # Route types
    "BucketEntry",
    "ClassifiedRoute",
    # Rate limit models
    "ErrorBody",
    "RateLimitHeaders",
    "RateLimitedBody",
    "RawFile",
    "RequestMethod",
    "ResolvedRequest",
    # Response
    "TransportResponse",
]
