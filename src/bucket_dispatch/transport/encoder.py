# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Multipart body encoding for requests carrying files."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import httpx

from ..types.request import RawFile


class MultipartBodyEncoder:
    """
    Encodes files and an optional JSON payload as ``multipart/form-data``.

    Files are sent under ``files[{index}]`` unless they name their own key.
    The JSON payload goes in a ``payload_json`` field, or, with
    ``append_to_form_data``, each top-level key becomes its own field.
    """

    def encode(
        self,
        json_payload: Any,
        files: Sequence[RawFile] | None,
        append_to_form_data: bool = False,
    ) -> tuple[bytes, dict[str, str]]:
        form_files: list[tuple[str, tuple[Any, ...]]] = []
        for index, file in enumerate(files or ()):
            key = file.key or f"files[{index}]"
            content = (
                file.data.encode("utf-8") if isinstance(file.data, str) else file.data
            )
            if file.content_type:
                form_files.append((key, (file.name, content, file.content_type)))
            else:
                form_files.append((key, (file.name, content)))

        fields: dict[str, Any] = {}
        if json_payload is not None:
            if append_to_form_data and isinstance(json_payload, dict):
                for key, value in json_payload.items():
                    fields[key] = value if isinstance(value, str) else json.dumps(value)
            else:
                fields["payload_json"] = json.dumps(json_payload)

        # httpx.Request builds the multipart stream and boundary for us
        request = httpx.Request(
            "POST", "http://localhost", data=fields, files=form_files or None
        )
        body = request.read()
        return body, {"Content-Type": request.headers["Content-Type"]}


__all__ = ["MultipartBodyEncoder"]
