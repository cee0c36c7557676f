# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Dispatcher Configuration for Bucket Dispatch

This module provides the configuration class for the dispatcher, covering
the API endpoint, rate limiting, sweeping, retries and the connection pool.
"""

import math
from dataclasses import dataclass, field

from .exceptions import ConfigurationError

MAX_SWEEP_INTERVAL = 14_400.0
"""Upper bound for sweep intervals in seconds (4 hours)."""

DEFAULT_API = "https://discord.com/api"
DEFAULT_VERSION = "10"


@dataclass
class DispatcherConfig:
    """
    Configuration for the dispatcher.

    All durations are expressed in seconds.
    """

    # === Endpoint ===

    api: str = DEFAULT_API
    """Base URL of the API, without a trailing slash."""

    version: str = DEFAULT_VERSION
    """API version inserted as ``/v{version}`` for versioned requests."""

    headers: dict[str, str] = field(default_factory=dict)
    """Extra headers sent with every request."""

    user_agent_suffix: str = ""
    """Text appended to the default User-Agent."""

    # === Authorization ===

    auth_prefix: str = "Bot"
    """Default authorization scheme: 'Bot' or 'Bearer'."""

    # === Rate Limiting ===

    global_requests_per_second: int = 50
    """Account-wide request ceiling shared by every bucket."""

    offset: float = 0.05
    """Extra delay added to every reset wait to absorb clock skew."""

    invalid_request_warning_interval: int = 0
    """Emit a warning every N invalid (401/403/429) requests. 0 disables."""

    # === Sweeping ===

    bucket_lifetime: float = 86_400.0
    """Idle time after which a discovered bucket entry is swept."""

    bucket_sweep_interval: float = 14_400.0
    """Interval between bucket sweeps. 0 or inf disables sweeping."""

    handler_sweep_interval: float = 3_600.0
    """Interval between handler sweeps. 0 or inf disables sweeping."""

    # === Request Processing ===

    request_timeout: float = 15.0
    """Timeout for a single transport call."""

    retries: int = 3
    """Retries for 5xx responses and transport failures."""

    retry_backoff: float = 0.5
    """Base delay for exponential backoff between retries."""

    max_backoff: float = 10.0
    """Maximum backoff delay."""

    max_rate_limit_retries: int = 10
    """Maximum number of 429 responses tolerated for one request."""

    # === Connection Pool ===

    max_connections: int | None = 100
    """Maximum number of concurrent connections in the pool."""

    max_keepalive_connections: int | None = 20
    """Maximum number of idle keep-alive connections."""

    keepalive_expiry: float | None = 5.0
    """Idle time before a keep-alive connection is closed."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.offset = max(0.0, self.offset)
        self.api = self.api.rstrip("/")

        if self.global_requests_per_second < 1:
            raise ConfigurationError("global_requests_per_second must be at least 1")
        if self.auth_prefix not in ("Bot", "Bearer"):
            raise ConfigurationError("auth_prefix must be 'Bot' or 'Bearer'")
        if self.bucket_lifetime <= 0:
            raise ConfigurationError("bucket_lifetime must be positive")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")
        if self.retries < 0:
            raise ConfigurationError("retries must be non-negative")
        if self.max_rate_limit_retries < 0:
            raise ConfigurationError("max_rate_limit_retries must be non-negative")
        if self.invalid_request_warning_interval < 0:
            raise ConfigurationError(
                "invalid_request_warning_interval must be non-negative"
            )
        for name in ("bucket_sweep_interval", "handler_sweep_interval"):
            interval = getattr(self, name)
            if interval < 0:
                raise ConfigurationError(f"{name} must be non-negative")
            if sweep_enabled(interval) and interval > MAX_SWEEP_INTERVAL:
                raise ConfigurationError(
                    f"{name} cannot be greater than 4 hours ({MAX_SWEEP_INTERVAL}s)"
                )


def sweep_enabled(interval: float) -> bool:
    """Return whether a sweep interval turns sweeping on (0 and inf disable it)."""
    return interval != 0 and not math.isinf(interval)


__all__ = [
    "DEFAULT_API",
    "DEFAULT_VERSION",
    "MAX_SWEEP_INTERVAL",
    "DispatcherConfig",
    "sweep_enabled",
]
