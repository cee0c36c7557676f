# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Bucket Dispatch - Rate limit aware request dispatching for bucketed REST APIs.

This library sends requests to an API that enforces per-route quota buckets
and an account-wide global limit, so that callers never have to handle 429
responses themselves.

Key Features:
    - Route classification into bucket routes and partition keys
    - Discovery of server-assigned bucket ids from response headers
    - Strictly ordered per-bucket queues with automatic 429 handling
    - A shared global per-second limit with a single shared wait
    - Bounded retries for server errors and transport failures
    - Periodic sweeping of idle buckets and handlers

Quick Start:
    >>> from bucket_dispatch import Dispatcher
    >>>
    >>> async with Dispatcher(token="...") as dispatcher:
    ...     await dispatcher.post(
    ...         f"/channels/{channel_id}/messages", body={"content": "hello"}
    ...     )

Main Exports:
    - Dispatcher: Public entry point
    - DispatcherConfig: Configuration options
    - APIRequest, RawFile: Request descriptions
    - TransportProtocol, BodyEncoderProtocol, NotificationSinkProtocol
    - DispatchError and its subclasses
"""

from ._version import __version__
from .config import DispatcherConfig
from .dispatcher import Dispatcher
from .exceptions import (
    ClientRequestError,
    ConfigurationError,
    DispatchError,
    HTTPStatusError,
    RateLimitExceededError,
    RequestCancelledError,
    ResponseDecodeError,
    TransientServerError,
    TransportError,
)
from .handlers import InvalidRequestTracker, SequentialHandler
from .limiter import GlobalLimiter
from .observability import (
    DispatchEvent,
    DispatchMetricsCollector,
    LoggingNotificationSink,
    MetricsNotificationSink,
)
from .protocols import (
    BodyEncoderProtocol,
    NotificationSinkProtocol,
    TransportProtocol,
)
from .registry import BucketRegistry, HandlerRegistry, Sweeper
from .routing import RouteClassifier
from .transport import HttpxTransport, MultipartBodyEncoder
from .types import (
    APIRequest,
    BucketEntry,
    ClassifiedRoute,
    RateLimitHeaders,
    RawFile,
    RequestMethod,
    ResolvedRequest,
    TransportResponse,
)

__all__ = [
    "APIRequest",
    "BodyEncoderProtocol",
    "BucketEntry",
    "BucketRegistry",
    "ClassifiedRoute",
    "ClientRequestError",
    "ConfigurationError",
    "DispatchError",
    "DispatchEvent",
    "DispatchMetricsCollector",
    "Dispatcher",
    "DispatcherConfig",
    "GlobalLimiter",
    "HTTPStatusError",
    "HandlerRegistry",
    "HttpxTransport",
    "InvalidRequestTracker",
    "LoggingNotificationSink",
    "MetricsNotificationSink",
    "MultipartBodyEncoder",
    "NotificationSinkProtocol",
    "RateLimitExceededError",
    "RateLimitHeaders",
    "RawFile",
    "RequestCancelledError",
    "ResponseDecodeError",
    "RequestMethod",
    "ResolvedRequest",
    "RouteClassifier",
    "SequentialHandler",
    "Sweeper",
    "TransientServerError",
    "TransportError",
    "TransportProtocol",
    "TransportResponse",
    "__version__",
]
