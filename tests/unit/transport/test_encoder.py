# SPDX-License-Identifier: Apache-2.0
"""Tests for MultipartBodyEncoder."""

import json

from bucket_dispatch.protocols.encoder import BodyEncoderProtocol
from bucket_dispatch.transport.encoder import MultipartBodyEncoder
from bucket_dispatch.types.request import RawFile


def boundary_of(headers: dict[str, str]) -> str:
    return headers["Content-Type"].split("boundary=")[1]


class TestMultipartBodyEncoder:
    def test_implements_protocol(self):
        assert isinstance(MultipartBodyEncoder(), BodyEncoderProtocol)

    def test_files_use_indexed_keys(self):
        body, headers = MultipartBodyEncoder().encode(
            None,
            [RawFile("a.txt", b"first"), RawFile("b.txt", "second")],
        )

        assert headers["Content-Type"].startswith("multipart/form-data; boundary=")
        assert b'name="files[0]"; filename="a.txt"' in body
        assert b'name="files[1]"; filename="b.txt"' in body
        assert b"first" in body
        assert b"second" in body
        assert boundary_of(headers).encode() in body

    def test_explicit_key_and_content_type(self):
        body, _ = MultipartBodyEncoder().encode(
            None, [RawFile("avatar.png", b"\x89PNG", key="file", content_type="image/png")]
        )
        assert b'name="file"; filename="avatar.png"' in body
        assert b"Content-Type: image/png" in body

    def test_json_payload_as_payload_json(self):
        payload = {"content": "hello", "embeds": [{"title": "x"}]}
        body, _ = MultipartBodyEncoder().encode(payload, [RawFile("a.txt", b"a")])

        assert b'name="payload_json"' in body
        assert json.dumps(payload).encode() in body

    def test_append_to_form_data_flattens_fields(self):
        body, _ = MultipartBodyEncoder().encode(
            {"name": "sticker", "tags": "smile", "count": 2},
            [RawFile("s.png", b"img", key="file")],
            append_to_form_data=True,
        )

        assert b'name="payload_json"' not in body
        assert b'name="name"\r\n\r\nsticker' in body
        assert b'name="tags"\r\n\r\nsmile' in body
        assert b'name="count"\r\n\r\n2' in body
