# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Sequential execution engine for one bucket partition.

Each ``SequentialHandler`` owns the requests of a single
``(bucket_id, partition_key)`` pair and runs them strictly one at a time in
submission order. Server-side quota accounting is per bucket and stateful,
so concurrent or reordered sends would corrupt the view of what remains.

Request lifecycle inside a handler:
    1. Wait for this request's turn in the FIFO
    2. Wait out the bucket's own reset when it is exhausted
    3. Take a global slot from the GlobalLimiter
    4. Send through the transport
    5. Parse rate limit headers, report a newly discovered bucket id
    6. Return the body, or retry (429, 5xx, transport failure), or raise
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from collections import deque
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from ..config import DispatcherConfig
from ..exceptions import (
    ClientRequestError,
    RateLimitExceededError,
    RequestCancelledError,
    ResponseDecodeError,
    TransientServerError,
    TransportError,
)
from ..limiter.global_limiter import GlobalLimiter
from ..observability.notifications import DispatchEvent, notify_safely
from ..protocols.notification import NotificationSinkProtocol
from ..protocols.transport import TransportProtocol
from ..registry.buckets import BucketRegistry
from ..types.rate_limit import ErrorBody, RateLimitedBody, RateLimitHeaders
from ..types.request import ResolvedRequest
from ..types.response import TransportResponse
from ..types.route import ClassifiedRoute
from .invalid_requests import InvalidRequestTracker

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 1.0
"""Retry delay used when a 429 carries no usable retry information."""

BACKOFF_JITTER_FACTOR = 0.1


class SequentialHandler:
    """
    Strictly ordered request queue for one bucket partition.

    Attributes:
        id: ``bucket_id:partition_key``
        bucket_id: Bucket id this handler was created for.
        partition_key: Major parameter isolating this queue.
        limit: Last known bucket limit (``inf`` when unknown).
        remaining: Last known remaining requests in the bucket.
        reset_at: Monotonic time at which the bucket resets.
    """

    def __init__(
        self,
        bucket_id: str,
        partition_key: str,
        *,
        config: DispatcherConfig,
        get_transport: Callable[[], TransportProtocol],
        global_limiter: GlobalLimiter,
        buckets: BucketRegistry,
        notifier: NotificationSinkProtocol | None = None,
        invalid_requests: InvalidRequestTracker | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.bucket_id = bucket_id
        self.partition_key = partition_key
        self.id = f"{bucket_id}:{partition_key}"

        self._config = config
        self._get_transport = get_transport
        self._global_limiter = global_limiter
        self._buckets = buckets
        self._notifier = notifier
        self._invalid_requests = invalid_requests
        self._clock = clock

        self.limit: float = math.inf
        self.remaining: float = 1
        self.reset_at: float = -1.0

        # FIFO of callers waiting for their turn; the running request is not in it
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._executing = False

    # ===== STATE =====

    @property
    def inactive(self) -> bool:
        """True when nothing is queued or executing."""
        return not self._executing and not self._waiters

    @property
    def queued(self) -> int:
        """Number of requests waiting behind the running one."""
        return len(self._waiters)

    @property
    def limited(self) -> bool:
        """Whether the bucket is exhausted until its reset."""
        return self.remaining <= 0 and self._clock() < self.reset_at

    @property
    def time_to_reset(self) -> float:
        return max(0.0, self.reset_at - self._clock())

    # ===== PUBLIC API =====

    async def enqueue(
        self,
        route: ClassifiedRoute,
        request: ResolvedRequest,
        turn: asyncio.Future[None] | None = None,
    ) -> Any:
        """
        Queue a request and wait for its result.

        Args:
            route: Classified route of the request
            request: Fully resolved request
            turn: Place in the queue taken earlier with ``reserve``; a new one
                is taken when omitted

        Returns:
            The decoded response body

        Raises:
            RateLimitExceededError: 429 retries exhausted
            TransientServerError: 5xx retries exhausted
            TransportError: transport failures exhausted the retries
            ClientRequestError: any other 4xx response
            ResponseDecodeError: a JSON success body could not be decoded
            RequestCancelledError: the request's cancel event was set
        """
        if turn is None:
            turn = self.reserve()
        await self._wait_turn(turn)
        try:
            return await self._run_request(route, request)
        finally:
            self._release_turn()

    # ===== QUEUE =====

    def reserve(self) -> asyncio.Future[None]:
        """
        Take a place at the back of the queue without waiting.

        The handler stops being ``inactive`` immediately, so it cannot be
        swept between the caller's lookup and its first await. The returned
        future resolves when the place reaches the head of the queue.
        """
        turn: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        if not self._executing and not self._waiters:
            self._executing = True
            turn.set_result(None)
        else:
            self._waiters.append(turn)
        return turn

    async def _wait_turn(self, turn: asyncio.Future[None]) -> None:
        try:
            await turn
        except asyncio.CancelledError:
            if turn.done() and not turn.cancelled():
                # The turn was handed over just before cancellation; pass it on
                self._release_turn()
            elif turn in self._waiters:
                self._waiters.remove(turn)
            raise

    def _release_turn(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._executing = False

    # ===== EXECUTION =====

    async def _run_request(
        self, route: ClassifiedRoute, request: ResolvedRequest
    ) -> Any:
        method = request.method.value
        rate_limit_hits = 0
        retries = 0
        throttle_reported = False

        while True:
            await self._wait_for_bucket_reset(
                route, method, request.url, notify=not throttle_reported
            )

            waited = await self._global_limiter.acquire()
            if waited > 0 and not throttle_reported:
                self._notify_rate_limited(route, method, request.url, waited, True)
            throttle_reported = False

            if request.cancel_event is not None and request.cancel_event.is_set():
                self._notify_failed(route, method, request.url, "cancelled", None)
                raise RequestCancelledError(f"{method} {request.url} was cancelled")

            logger.debug(f"[{self.id}] {method} {request.url} (attempt {retries + 1})")

            try:
                response = await asyncio.wait_for(
                    self._get_transport().send(
                        method, request.url, request.headers, request.body
                    ),
                    timeout=self._config.request_timeout,
                )
            except asyncio.CancelledError:
                raise
            except Exception as e:
                will_retry = retries < self._config.retries
                self._notify_response(route, method, request.url, None, will_retry)
                if will_retry:
                    delay = self._backoff(retries)
                    retries += 1
                    logger.warning(
                        f"[{self.id}] Transport error on {method} {request.url}: "
                        f"{e!r}; retrying in {delay:.2f}s"
                    )
                    await asyncio.sleep(delay)
                    continue
                self._notify_failed(route, method, request.url, "transport", None)
                raise TransportError(
                    f"{method} {request.url} failed after {retries + 1} attempts: {e!r}",
                    method=method,
                    url=request.url,
                ) from e

            info = RateLimitHeaders.from_headers(response.headers)
            self._apply_headers(info)
            self._record_bucket(method, route, info)

            status = response.status
            if status in (401, 403) or (status == 429 and info.scope != "shared"):
                self._record_invalid_request()

            if status < 400:
                self._notify_response(route, method, request.url, status, False)
                try:
                    return response.parse_body()
                except ValueError as e:
                    self._notify_failed(route, method, request.url, "decode", status)
                    raise ResponseDecodeError(
                        f"{method} {request.url} returned {status} with an "
                        f"undecodable JSON body: {e}",
                        status=status,
                        method=method,
                        url=request.url,
                        body=response.body,
                    ) from e

            if status == 429:
                rate_limit_hits += 1
                retry_after, is_global = self._retry_after(info, response)
                will_retry = rate_limit_hits <= self._config.max_rate_limit_retries
                self._notify_response(route, method, request.url, status, will_retry)

                if is_global:
                    self._global_limiter.on_global_rate_limit(retry_after)
                else:
                    self.remaining = 0
                    self.reset_at = self._clock() + retry_after + self._config.offset
                throttle_reported = True

                self._notify_rate_limited(
                    route, method, request.url, retry_after, is_global
                )

                if not will_retry:
                    self._notify_failed(route, method, request.url, "rate_limit", 429)
                    raise RateLimitExceededError(
                        f"{method} {route.bucket_route} still rate limited after "
                        f"{rate_limit_hits} attempts",
                        route=route.bucket_route,
                        bucket_id=self.bucket_id,
                        retry_after=retry_after,
                        is_global=is_global,
                        attempts=rate_limit_hits,
                    )

                logger.warning(
                    f"[{self.id}] 429 on {method} {route.bucket_route}, "
                    f"retrying in {retry_after:.3f}s (global={is_global})"
                )
                # Retried while still holding the head of the queue
                continue

            if status >= 500:
                will_retry = retries < self._config.retries
                self._notify_response(route, method, request.url, status, will_retry)
                if will_retry:
                    delay = self._backoff(retries)
                    retries += 1
                    logger.warning(
                        f"[{self.id}] {status} on {method} {request.url}, "
                        f"retrying in {delay:.2f}s"
                    )
                    await asyncio.sleep(delay)
                    continue
                self._notify_failed(route, method, request.url, "server_error", status)
                raise TransientServerError(
                    f"{method} {request.url} returned {status} after "
                    f"{retries + 1} attempts",
                    status=status,
                    method=method,
                    url=request.url,
                )

            self._notify_response(route, method, request.url, status, False)
            self._notify_failed(route, method, request.url, "client_error", status)
            raise self._client_error(method, request.url, response)

    async def _wait_for_bucket_reset(
        self, route: ClassifiedRoute, method: str, url: str, notify: bool = True
    ) -> None:
        if self.remaining > 0:
            return
        time_to_reset = self.time_to_reset
        if time_to_reset <= 0:
            return

        if notify:
            self._notify_rate_limited(route, method, url, time_to_reset, False)
        logger.debug(
            f"[{self.id}] Bucket exhausted, waiting {time_to_reset:.3f}s for reset"
        )
        await asyncio.sleep(time_to_reset)

    # ===== RESPONSE PARSING =====

    def _apply_headers(self, info: RateLimitHeaders) -> None:
        now = self._clock()
        self.limit = info.limit if info.limit is not None else math.inf
        self.remaining = info.remaining if info.remaining is not None else 1
        if info.reset_after is not None:
            self.reset_at = now + info.reset_after + self._config.offset
        else:
            self.reset_at = now

    def _record_bucket(
        self, method: str, route: ClassifiedRoute, info: RateLimitHeaders
    ) -> None:
        if not info.bucket:
            return
        current = self._buckets.resolve(method, route.bucket_route)
        if info.bucket != current.id:
            self._buckets.record_discovery(method, route.bucket_route, info.bucket)
        else:
            self._buckets.touch(method, route.bucket_route)

    def _retry_after(
        self, info: RateLimitHeaders, response: TransportResponse
    ) -> tuple[float, bool]:
        body = self._rate_limited_body(response)
        is_global = info.is_global or (body is not None and body.is_global)

        if info.retry_after is not None:
            return info.retry_after, is_global
        if body is not None and body.retry_after is not None:
            return body.retry_after, is_global
        if info.reset_after is not None:
            return info.reset_after, is_global
        return DEFAULT_RETRY_AFTER, is_global

    @staticmethod
    def _rate_limited_body(response: TransportResponse) -> RateLimitedBody | None:
        if not response.is_json or not response.body:
            return None
        try:
            return RateLimitedBody.model_validate_json(response.body)
        except ValidationError:
            return None

    @staticmethod
    def _client_error(
        method: str, url: str, response: TransportResponse
    ) -> ClientRequestError:
        parsed: Any = response.body
        error = ErrorBody()
        if response.is_json and response.body:
            try:
                error = ErrorBody.model_validate_json(response.body)
                parsed = response.parse_body()
            except (ValidationError, ValueError):
                pass

        message = error.message or f"HTTP {response.status}"
        return ClientRequestError(
            f"{message} ({method} {url})",
            status=response.status,
            method=method,
            url=url,
            code=error.code,
            errors=error.errors,
            body=parsed,
        )

    def _backoff(self, attempt: int) -> float:
        delay = min(
            self._config.retry_backoff * (2**attempt), self._config.max_backoff
        )
        jitter = delay * BACKOFF_JITTER_FACTOR * random.random()  # noqa: S311  # nosec B311
        return delay + jitter

    # ===== NOTIFICATIONS =====

    def _record_invalid_request(self) -> None:
        if self._invalid_requests is None:
            return
        warning = self._invalid_requests.record()
        if warning is not None:
            notify_safely(
                self._notifier, DispatchEvent.INVALID_REQUEST_WARNING, warning
            )

    def _notify_rate_limited(
        self,
        route: ClassifiedRoute,
        method: str,
        url: str,
        time_to_reset: float,
        is_global: bool,
    ) -> None:
        notify_safely(
            self._notifier,
            DispatchEvent.RATE_LIMITED,
            {
                "time_to_reset": time_to_reset,
                "limit": self._global_limiter.limit if is_global else self.limit,
                "method": method,
                "bucket": self.bucket_id,
                "url": url,
                "route": route.bucket_route,
                "major_parameter": self.partition_key,
                "global": is_global,
            },
        )

    def _notify_response(
        self,
        route: ClassifiedRoute,
        method: str,
        url: str,
        status: int | None,
        retry: bool,
    ) -> None:
        notify_safely(
            self._notifier,
            DispatchEvent.RESPONSE,
            {
                "method": method,
                "url": url,
                "route": route.bucket_route,
                "bucket": self.bucket_id,
                "status": status,
                "retry": retry,
            },
        )

    def _notify_failed(
        self,
        route: ClassifiedRoute,
        method: str,
        url: str,
        reason: str,
        status: int | None,
    ) -> None:
        notify_safely(
            self._notifier,
            DispatchEvent.REQUEST_FAILED,
            {
                "method": method,
                "url": url,
                "route": route.bucket_route,
                "reason": reason,
                "status": status,
            },
        )


__all__ = ["SequentialHandler"]
