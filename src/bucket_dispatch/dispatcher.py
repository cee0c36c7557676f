# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Request dispatcher: the public entry point of Bucket Dispatch.

The dispatcher classifies every submitted request, maps it to the bucket the
server has assigned to its route, and queues it on the sequential handler of
that bucket partition. It owns every piece of shared state: the bucket and
handler registries, the global limiter, the background sweepers and the
transport.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx
from typing_extensions import Self

from ._version import __version__
from .config import DispatcherConfig
from .exceptions import ConfigurationError, DispatchError
from .handlers.invalid_requests import InvalidRequestTracker
from .handlers.sequential import SequentialHandler
from .limiter.global_limiter import GlobalLimiter
from .protocols.encoder import BodyEncoderProtocol
from .protocols.notification import NotificationSinkProtocol
from .protocols.transport import TransportProtocol
from .registry.buckets import BucketRegistry
from .registry.handlers import HandlerRegistry
from .registry.sweeper import Sweeper
from .routing.classifier import RouteClassifier
from .transport.encoder import MultipartBodyEncoder
from .transport.httpx_transport import HttpxTransport
from .types.request import APIRequest, RequestMethod, ResolvedRequest

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"DispatchBot (bucket-dispatch, {__version__})"

AUDIT_LOG_REASON_HEADER = "X-Audit-Log-Reason"

# Characters left unescaped by URI component encoding
_URI_COMPONENT_SAFE = "-_.!~*'()"


class Dispatcher:
    """
    Rate limit aware request dispatcher.

    Example:
        async with Dispatcher(token="...") as dispatcher:
            channel = await dispatcher.get(f"/channels/{channel_id}")
            await dispatcher.post(
                f"/channels/{channel_id}/messages", body={"content": "hi"}
            )

    Args:
        config: Dispatcher configuration (defaults to ``DispatcherConfig()``)
        transport: Transport used to send requests. When omitted, an
            ``HttpxTransport`` is created on first use and closed by ``close``.
        encoder: Multipart body encoder for requests with files
        notifier: Sink receiving dispatch events
        token: Credential used for the Authorization header
    """

    def __init__(
        self,
        config: DispatcherConfig | None = None,
        *,
        transport: TransportProtocol | None = None,
        encoder: BodyEncoderProtocol | None = None,
        notifier: NotificationSinkProtocol | None = None,
        token: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or DispatcherConfig()
        self.notifier = notifier
        self._token = token
        self._transport = transport
        self._owns_transport = transport is None
        self._encoder = encoder or MultipartBodyEncoder()
        self._clock = clock

        self.classifier = RouteClassifier()
        self.buckets = BucketRegistry(notifier=notifier)
        self.handlers = HandlerRegistry(notifier=notifier)
        self.global_limiter = GlobalLimiter(
            requests_per_second=self.config.global_requests_per_second,
            offset=self.config.offset,
            clock=clock,
        )
        self.invalid_requests = InvalidRequestTracker(
            interval=self.config.invalid_request_warning_interval, clock=clock
        )

        self._bucket_sweeper = Sweeper(
            "bucket",
            self.config.bucket_sweep_interval,
            lambda: self.buckets.sweep(self.config.bucket_lifetime),
            notifier=notifier,
        )
        self._handler_sweeper = Sweeper(
            "handler",
            self.config.handler_sweep_interval,
            self.handlers.sweep,
            notifier=notifier,
        )

        self._running = False
        self._closed = False
        self._transport_closed = False
        self._inflight: set[asyncio.Task[Any]] = set()

    # ===== LIFECYCLE =====

    @property
    def transport(self) -> TransportProtocol:
        """
        The transport, created on first access when none was supplied.

        Raises:
            DispatchError: the dispatcher has been closed
        """
        if self._transport is None:
            if self._transport_closed:
                raise DispatchError("Dispatcher is closed")
            self._transport = HttpxTransport(self.config)
        return self._transport

    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """
        Start the background sweepers.

        Called automatically by the first ``submit``, and allowed again after
        ``close`` to reopen the dispatcher.
        """
        if self._running:
            return
        self._running = True
        self._closed = False
        self._transport_closed = False
        self._bucket_sweeper.start()
        self._handler_sweeper.start()
        logger.info("Dispatcher started")

    async def close(self) -> None:
        """
        Stop the sweepers, wait for queued requests and close the transport
        if the dispatcher owns it.

        Requests submitted after ``close`` raise ``DispatchError``.
        """
        self._closed = True
        await self._bucket_sweeper.stop()
        await self._handler_sweeper.stop()

        if self._inflight:
            logger.debug(f"Waiting for {len(self._inflight)} queued requests")
            await asyncio.gather(*self._inflight, return_exceptions=True)

        if self._owns_transport and self._transport is not None:
            await self._transport.aclose()
            self._transport = None
        self._transport_closed = True

        if self._running:
            self._running = False
            logger.info("Dispatcher stopped")

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    def clear_bucket_sweeper(self) -> None:
        """Stop the bucket sweeper. Safe to call more than once."""
        self._bucket_sweeper.cancel()

    def clear_handler_sweeper(self) -> None:
        """Stop the handler sweeper. Safe to call more than once."""
        self._handler_sweeper.cancel()

    def set_token(self, token: str) -> Self:
        """Set the credential used by subsequent requests."""
        self._token = token
        return self

    # ===== REQUESTS =====

    async def submit(self, request: APIRequest) -> Any:
        """
        Queue a request and wait for its decoded response body.

        Requests sharing a bucket partition complete in submission order.
        Cancelling the awaiting task does not remove the request from its
        queue; use ``request.cancel_event`` to abandon it before it is sent.

        Raises:
            ConfigurationError: authorization is required and no token is set
            DispatchError: the dispatcher is closed, or any terminal failure
                of the request
        """
        if self._closed:
            raise DispatchError("Dispatcher is closed")

        # Resolved first so a missing credential fails before any state changes
        resolved = self.resolve_request(request)

        if not self._running:
            await self.start()

        route = self.classifier.classify(request.route, request.method)
        bucket = self.buckets.resolve(request.method, route.bucket_route)
        handler = self.handlers.get_or_create(
            bucket.id, route.partition_key, self._create_handler
        )
        # Claimed before the first await so a handler sweep cannot drop it
        turn = handler.reserve()

        task = asyncio.ensure_future(handler.enqueue(route, resolved, turn))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        # Retrieve errors of requests whose caller stopped waiting
        task.add_done_callback(lambda t: t.exception() if not t.cancelled() else None)
        return await asyncio.shield(task)

    async def get(self, route: str, **options: Any) -> Any:
        return await self.submit(APIRequest(RequestMethod.GET, route, **options))

    async def post(self, route: str, **options: Any) -> Any:
        return await self.submit(APIRequest(RequestMethod.POST, route, **options))

    async def put(self, route: str, **options: Any) -> Any:
        return await self.submit(APIRequest(RequestMethod.PUT, route, **options))

    async def patch(self, route: str, **options: Any) -> Any:
        return await self.submit(APIRequest(RequestMethod.PATCH, route, **options))

    async def delete(self, route: str, **options: Any) -> Any:
        return await self.submit(APIRequest(RequestMethod.DELETE, route, **options))

    def resolve_request(self, request: APIRequest) -> ResolvedRequest:
        """
        Build the URL, headers and body sent for a request.

        Raises:
            ConfigurationError: authorization is required and no token is set
        """
        config = self.config

        url = config.api
        if request.versioned:
            url += f"/v{config.version}"
        url += request.route
        if request.query:
            query = str(httpx.QueryParams(request.query))
            if query:
                url += f"?{query}"

        headers: dict[str, str] = {
            **config.headers,
            "User-Agent": f"{DEFAULT_USER_AGENT} {config.user_agent_suffix}".strip(),
        }

        if request.auth:
            if not self._token:
                raise ConfigurationError(
                    "Expected token to be set for this request, but none was present"
                )
            prefix = request.auth_prefix or config.auth_prefix
            headers["Authorization"] = f"{prefix} {self._token}"

        if request.reason:
            headers[AUDIT_LOG_REASON_HEADER] = quote(
                request.reason, safe=_URI_COMPONENT_SAFE
            )

        body: Any = None
        content_headers: dict[str, str] = {}
        if request.files:
            body, content_headers = self._encoder.encode(
                request.body, request.files, request.append_to_form_data
            )
        elif request.body is not None:
            if request.pass_through_body:
                body = request.body
            else:
                body = json.dumps(request.body).encode("utf-8")
                content_headers = {"Content-Type": "application/json"}

        method = request.method
        if not isinstance(method, RequestMethod):
            method = RequestMethod(method.upper())

        return ResolvedRequest(
            method=method,
            url=url,
            headers={**(request.headers or {}), **content_headers, **headers},
            body=body,
            cancel_event=request.cancel_event,
        )

    def _create_handler(self, bucket_id: str, partition_key: str) -> SequentialHandler:
        return SequentialHandler(
            bucket_id,
            partition_key,
            config=self.config,
            get_transport=lambda: self.transport,
            global_limiter=self.global_limiter,
            buckets=self.buckets,
            notifier=self.notifier,
            invalid_requests=self.invalid_requests,
            clock=self._clock,
        )


__all__ = ["AUDIT_LOG_REASON_HEADER", "DEFAULT_USER_AGENT", "Dispatcher"]
