"""Tests for canonical hashing."""

from __future__ import annotations

from certforge.core.hasher import canonical_json_bytes, sha256_hex


class TestCanonicalJson:
    def test_key_order_does_not_matter(self):
        assert canonical_json_bytes({"b": 1, "a": 2}) == canonical_json_bytes({"a": 2, "b": 1})

    def test_compact_and_ascii(self):
        assert canonical_json_bytes({"name": "Zoë", "n": [1, 2]}) == b'{"n":[1,2],"name":"Zo\\u00eb"}'


class TestSha256:
    def test_hex_digest(self):
        assert sha256_hex(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
