# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for the HTTP transport collaborator."""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from ..types.response import TransportResponse


@runtime_checkable
class TransportProtocol(Protocol):
    """
    Minimal protocol for sending HTTP requests.

    The dispatcher does NOT manage connections, TLS or pooling itself. It
    only needs to send one fully resolved request and read back the status,
    raw headers and body.

    Implementations should raise an exception (any subclass of ``Exception``)
    on connection failures; the dispatcher retries those like 5xx responses.
    """

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Any = None,
    ) -> TransportResponse:
        """
        Send a request.

        Args:
            method: HTTP method
            url: Full URL
            headers: Request headers
            body: Encoded body (bytes, str, an async iterable, or None)

        Returns:
            TransportResponse with status, headers and body
        """
        ...

    async def aclose(self) -> None:
        """Release pooled connections."""
        ...
