# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Transport response type and body decoding."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class TransportResponse:
    """
    Raw response returned by a transport.

    Header names are normalized to lowercase on construction so lookups are
    case-insensitive.

    Attributes:
        status: HTTP status code.
        headers: Response headers with lowercase names.
        body: Raw response body.
    """

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self) -> None:
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_json(self) -> bool:
        content_type = self.headers.get("content-type", "")
        return content_type.startswith("application/json")

    def parse_body(self) -> Any:
        """
        Decode the body: JSON for JSON content types, raw bytes otherwise.

        Raises:
            ValueError: a JSON content type with a malformed body
        """
        if self.is_json and self.body:
            return json.loads(self.body)
        return self.body


__all__ = ["TransportResponse"]
