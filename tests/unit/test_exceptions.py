# SPDX-License-Identifier: Apache-2.0
"""Unit tests for the exceptions module.

Tests all exception classes defined in bucket_dispatch.exceptions.
"""

import pytest

from bucket_dispatch.exceptions import (
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


class TestDispatchError:
    """Tests for the base DispatchError exception."""

    def test_can_be_caught_as_exception(self):
        """DispatchError can be caught as a standard Exception."""
        with pytest.raises(Exception):  # noqa: B017
            raise DispatchError("test error")

    def test_message_preserved(self):
        error = DispatchError("test message")
        assert str(error) == "test message"

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad"),
            RateLimitExceededError("throttled"),
            TransientServerError("down", 503, "GET", "https://x"),
            ClientRequestError("missing", 404, "GET", "https://x"),
            TransportError("reset", "GET", "https://x"),
            RequestCancelledError("cancelled"),
            ResponseDecodeError("bad json", 200, "GET", "https://x", b"{"),
        ],
    )
    def test_all_errors_share_the_base(self, error):
        """Every terminal error can be caught as DispatchError."""
        assert isinstance(error, DispatchError)


class TestRateLimitExceededError:
    """Tests for RateLimitExceededError."""

    def test_stores_attributes(self):
        error = RateLimitExceededError(
            "throttled",
            route="/channels/:id/messages",
            bucket_id="abc",
            retry_after=1.5,
            is_global=True,
            attempts=4,
        )
        assert error.route == "/channels/:id/messages"
        assert error.bucket_id == "abc"
        assert error.retry_after == 1.5
        assert error.is_global is True
        assert error.attempts == 4

    def test_defaults(self):
        error = RateLimitExceededError("throttled")
        assert error.route is None
        assert error.bucket_id is None
        assert error.retry_after is None
        assert error.is_global is False
        assert error.attempts == 0


class TestHTTPStatusErrors:
    """Tests for TransientServerError and ClientRequestError."""

    def test_transient_server_error_carries_request(self):
        error = TransientServerError("boom", 502, "POST", "https://api.test/v10/x")
        assert isinstance(error, HTTPStatusError)
        assert error.status == 502
        assert error.method == "POST"
        assert error.url == "https://api.test/v10/x"

    def test_client_request_error_carries_body(self):
        error = ClientRequestError(
            "Unknown Channel",
            404,
            "GET",
            "https://api.test/v10/channels/1",
            code=10003,
            errors={"channel_id": ["invalid"]},
            body={"message": "Unknown Channel", "code": 10003},
        )
        assert error.status == 404
        assert error.code == 10003
        assert error.errors == {"channel_id": ["invalid"]}
        assert error.body["code"] == 10003

    def test_client_error_is_not_transient(self):
        error = ClientRequestError("bad", 400, "GET", "https://x")
        assert not isinstance(error, TransientServerError)


class TestTransportError:
    """Tests for TransportError."""

    def test_preserves_cause(self):
        cause = ConnectionResetError("reset by peer")
        try:
            raise TransportError("failed", "GET", "https://x") from cause
        except TransportError as e:
            assert e.__cause__ is cause
            assert e.method == "GET"
            assert e.url == "https://x"
