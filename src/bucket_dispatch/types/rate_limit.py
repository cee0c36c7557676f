# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Rate limit header and body models.

Responses communicate quota state through ``x-ratelimit-*`` headers and,
for 429 responses, a JSON body. These models are the only place where
those values are parsed.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class RateLimitHeaders(BaseModel):
    """
    Rate limit information parsed from response headers.

    Malformed numeric values are logged and treated as absent.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    bucket: str | None = Field(default=None, alias="x-ratelimit-bucket")
    limit: int | None = Field(default=None, alias="x-ratelimit-limit")
    remaining: int | None = Field(default=None, alias="x-ratelimit-remaining")
    reset_after: float | None = Field(default=None, alias="x-ratelimit-reset-after")
    retry_after: float | None = Field(default=None, alias="retry-after")
    is_global: bool = Field(default=False, alias="x-ratelimit-global")
    scope: str | None = Field(default=None, alias="x-ratelimit-scope")

    @field_validator("limit", "remaining", mode="before")
    @classmethod
    def _parse_int(cls, value: Any) -> int | None:
        number = _parse_number(value)
        return None if number is None else int(number)

    @field_validator("reset_after", "retry_after", mode="before")
    @classmethod
    def _parse_float(cls, value: Any) -> float | None:
        return _parse_number(value)

    @field_validator("is_global", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1")
        return bool(value)

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitHeaders":
        """Build from response headers, matching names case-insensitively."""
        return cls.model_validate({k.lower(): v for k, v in headers.items()})


def _parse_number(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid rate limit header value: {value!r}")
        return None


class RateLimitedBody(BaseModel):
    """JSON body of a 429 response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: str = ""
    retry_after: float | None = None
    is_global: bool = Field(default=False, alias="global")
    code: int | None = None


class ErrorBody(BaseModel):
    """JSON body of a 4xx error response."""

    model_config = ConfigDict(extra="ignore")

    message: str = ""
    code: int | None = None
    errors: dict[str, Any] | None = None


__all__ = [
    "ErrorBody",
    "RateLimitHeaders",
    "RateLimitedBody",
]
