# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for request body encoding."""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from ..types.request import RawFile


@runtime_checkable
class BodyEncoderProtocol(Protocol):
    """
    Protocol for encoding multipart bodies.

    Given an optional JSON payload and files, produce the body and the
    content headers (at least ``Content-Type``) that describe it.
    """

    def encode(
        self,
        json_payload: Any,
        files: Sequence[RawFile] | None,
        append_to_form_data: bool = False,
    ) -> tuple[bytes, dict[str, str]]:
        ...
