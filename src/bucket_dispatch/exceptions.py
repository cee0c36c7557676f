# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the bucket dispatcher.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from DispatchError, making it easy to catch
all dispatcher-related exceptions with a single except clause.
"""

from typing import Any


class DispatchError(Exception):
    """Base exception for all dispatcher errors.

    Catch this exception to handle any terminal error returned by
    ``Dispatcher.submit``.

    Example:
        try:
            await dispatcher.get("/users/@me")
        except DispatchError as e:
            logger.error(f"Request failed: {e}")
    """

    pass


class ConfigurationError(DispatchError):
    """Raised when configuration is invalid or a required credential is missing.

    This error is always raised synchronously, before any network activity.

    Common causes include:
    - A sweep interval above the 4 hour ceiling
    - Negative or zero limits
    - An authorized request submitted before ``set_token`` was called
    """

    pass


class RateLimitExceededError(DispatchError):
    """Raised when a request stays throttled after the maximum number of retries.

    429 responses are normally handled internally by waiting out the
    indicated delay. This error only surfaces when the configured retry
    ceiling is exceeded.

    Attributes:
        route: The bucket route of the request.
        bucket_id: The bucket the request was queued under.
        retry_after: The last retry delay in seconds sent by the server.
        is_global: Whether the last throttle was global.
        attempts: Number of 429 responses received.
    """

    def __init__(
        self,
        message: str,
        route: str | None = None,
        bucket_id: str | None = None,
        retry_after: float | None = None,
        is_global: bool = False,
        attempts: int = 0,
    ):
        super().__init__(message)
        self.route = route
        self.bucket_id = bucket_id
        self.retry_after = retry_after
        self.is_global = is_global
        self.attempts = attempts


class HTTPStatusError(DispatchError):
    """Base class for errors carrying an HTTP response status.

    Attributes:
        status: HTTP status code of the final response.
        method: HTTP method of the request.
        url: Full URL of the request.
    """

    def __init__(self, message: str, status: int, method: str, url: str):
        super().__init__(message)
        self.status = status
        self.method = method
        self.url = url


class TransientServerError(HTTPStatusError):
    """Raised when the server keeps answering with a 5xx status after all retries."""

    pass


class ClientRequestError(HTTPStatusError):
    """Raised for 4xx responses other than 429. These are never retried.

    Attributes:
        code: API error code from the response body, if any.
        errors: Nested field errors from the response body, if any.
        body: The decoded response body (JSON object, text or bytes).

    Example:
        try:
            await dispatcher.get(f"/channels/{channel_id}")
        except ClientRequestError as e:
            if e.status == 404:
                return None
            raise
    """

    def __init__(
        self,
        message: str,
        status: int,
        method: str,
        url: str,
        code: int | None = None,
        errors: dict[str, Any] | None = None,
        body: Any = None,
    ):
        super().__init__(message, status, method, url)
        self.code = code
        self.errors = errors
        self.body = body


class ResponseDecodeError(HTTPStatusError):
    """Raised when a successful response declares JSON but its body cannot be decoded.

    The request itself was accepted by the server, so it is never retried.

    Attributes:
        body: The raw response body.
    """

    def __init__(self, message: str, status: int, method: str, url: str, body: bytes):
        super().__init__(message, status, method, url)
        self.body = body


class TransportError(DispatchError):
    """Raised when the transport fails (connection error, timeout) after all retries.

    The underlying exception is available as ``__cause__``.

    Attributes:
        method: HTTP method of the request.
        url: Full URL of the request.
    """

    def __init__(self, message: str, method: str, url: str):
        super().__init__(message)
        self.method = method
        self.url = url


class RequestCancelledError(DispatchError):
    """Raised when a request's cancel event is set before an attempt is sent."""

    pass


__all__ = [
    "ClientRequestError",
    "ConfigurationError",
    "DispatchError",
    "HTTPStatusError",
    "RateLimitExceededError",
    "RequestCancelledError",
    "ResponseDecodeError",
    "TransientServerError",
    "TransportError",
]
