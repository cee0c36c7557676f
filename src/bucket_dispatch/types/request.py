# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Request types for the dispatcher.

This module defines the logical request submitted by callers and the
resolved request that is handed to the transport.
"""

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RequestMethod(str, Enum):
    """HTTP methods accepted by the dispatcher."""

    DELETE = "DELETE"
    GET = "GET"
    PATCH = "PATCH"
    POST = "POST"
    PUT = "PUT"


def method_name(method: RequestMethod | str) -> str:
    """Return the upper-case method name for an enum member or a string."""
    return method.value if isinstance(method, RequestMethod) else method.upper()


@dataclass
class RawFile:
    """
    A file attached to a multipart request.

    Attributes:
        name: File name sent in the form part.
        data: File contents. Strings are encoded as UTF-8.
        key: Explicit form field name. Defaults to ``files[{index}]``.
        content_type: Optional MIME type of the part.
    """

    name: str
    data: bytes | str
    key: str | None = None
    content_type: str | None = None


@dataclass
class APIRequest:
    """
    A logical request submitted to ``Dispatcher.submit``.

    Attributes:
        method: HTTP method.
        route: Route starting with ``/``, e.g. ``/channels/123/messages``.
        body: JSON-serializable payload, or raw content when
            ``pass_through_body`` is set.
        files: Files to send as multipart form data.
        query: Query string parameters.
        headers: Extra headers for this request.
        auth: Whether the Authorization header is required.
        auth_prefix: Authorization scheme. Defaults to the configured prefix.
        reason: Audit log reason.
        versioned: Whether to insert ``/v{version}`` in the URL.
        append_to_form_data: Flatten ``body`` into form fields instead of
            sending it as ``payload_json`` when files are present.
        pass_through_body: Send ``body`` as-is when no files are present.
        cancel_event: When set before an attempt, the request is abandoned.
    """

    method: RequestMethod | str
    route: str
    body: Any = None
    files: Sequence[RawFile] | None = None
    query: Mapping[str, Any] | Sequence[tuple[str, Any]] | None = None
    headers: dict[str, str] | None = None
    auth: bool = True
    auth_prefix: str | None = None
    reason: str | None = None
    versioned: bool = True
    append_to_form_data: bool = False
    pass_through_body: bool = False
    cancel_event: asyncio.Event | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.method, RequestMethod):
            self.method = RequestMethod(self.method.upper())
        if not self.route.startswith("/"):
            raise ValueError(f"route must start with '/': {self.route!r}")


@dataclass
class ResolvedRequest:
    """
    A request ready for the transport.

    Attributes:
        method: HTTP method.
        url: Full URL including version and query string.
        headers: Final request headers.
        body: Encoded body, or None.
        cancel_event: Carried over from the ``APIRequest``.
    """

    method: RequestMethod
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    cancel_event: asyncio.Event | None = None


__all__ = [
    "APIRequest",
    "RawFile",
    "RequestMethod",
    "ResolvedRequest",
    "method_name",
]
