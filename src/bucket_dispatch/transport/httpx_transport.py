# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Default transport backed by ``httpx.AsyncClient``.

The client is created on first use and owns the connection pool; the
dispatcher closes it through ``aclose``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from ..config import DispatcherConfig
from ..types.response import TransportResponse

logger = logging.getLogger(__name__)


class HttpxTransport:
    """
    Transport sending requests through a pooled ``httpx.AsyncClient``.

    Connection failures and timeouts surface as ``httpx`` exceptions, which
    the sequential handler treats as retryable transport errors.
    """

    def __init__(
        self,
        config: DispatcherConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._config = config or DispatcherConfig()
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                limits=httpx.Limits(
                    max_connections=self._config.max_connections,
                    max_keepalive_connections=self._config.max_keepalive_connections,
                    keepalive_expiry=self._config.keepalive_expiry,
                ),
                timeout=httpx.Timeout(self._config.request_timeout),
            )
            logger.debug("Created httpx client")
        return self._client

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Any = None,
    ) -> TransportResponse:
        response = await self.client.request(
            method, url, headers=dict(headers), content=body
        )
        return TransportResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed httpx client")


__all__ = ["HttpxTransport"]
