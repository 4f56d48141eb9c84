# tests/test_codec.py
"""
Tests for qrtransfer.protocol.codec.
"""

import base64
import gzip
import json

import pytest

from qrtransfer.protocol.codec import decode_payload, encode_payload, serialize
from qrtransfer.protocol.errors import DecodeFailure


class TestSerialize:
    """Tests for serialize."""

    def test_key_order_irrelevant(self):
        assert serialize({"b": 1, "a": 2}) == serialize({"a": 2, "b": 1})

    def test_compact_utf8(self):
        assert serialize({"title": "café"}) == '{"title":"café"}'.encode("utf-8")

    def test_unserializable_fails_loudly(self):
        with pytest.raises(TypeError):
            serialize({"tags": {"a", "b"}})

    def test_nan_fails_loudly(self):
        with pytest.raises(ValueError):
            serialize({"x": float("nan")})


class TestEncodePayload:
    """Tests for encode_payload / decode_payload."""

    def test_round_trip(self):
        value = {"notes": {"2025-01-01": [{"id": "1", "title": "Test"}]}, "n": [1, 2.5, None, True]}
        assert decode_payload(encode_payload(value)) == value

    def test_output_is_base64_gzip(self):
        encoded = encode_payload({"a": 1})
        raw = gzip.decompress(base64.b64decode(encoded))
        assert json.loads(raw) == {"a": 1}

    def test_deterministic(self):
        value = {"calendar": [{"day": i} for i in range(50)]}
        assert encode_payload(value) == encode_payload(value)

    def test_scalar_values(self):
        for value in ["text", 42, None, [], {}]:
            assert decode_payload(encode_payload(value)) == value

    def test_invalid_base64(self):
        with pytest.raises(DecodeFailure):
            decode_payload("not base64!!")

    def test_invalid_gzip(self):
        with pytest.raises(DecodeFailure):
            decode_payload(base64.b64encode(b"plain bytes").decode("ascii"))

    def test_truncated_gzip(self):
        encoded = base64.b64encode(gzip.compress(b'{"a": 1}')[:-6]).decode("ascii")
        with pytest.raises(DecodeFailure):
            decode_payload(encoded)

    def test_invalid_json(self):
        encoded = base64.b64encode(gzip.compress(b"{not json")).decode("ascii")
        with pytest.raises(DecodeFailure):
            decode_payload(encoded)


class TestSerializeKeys:
    """Tests for non-string mapping keys."""

    def test_mixed_int_and_str_keys(self):
        assert serialize({1: "a", "b": 2}) == b'{"1":"a","b":2}'

    def test_mixed_keys_round_trip_as_strings(self):
        assert decode_payload(encode_payload({1: "a", "b": {2: True}})) == {"1": "a", "b": {"2": True}}

    def test_unsupported_key_type(self):
        with pytest.raises(TypeError):
            serialize({(1, 2): "tuple key"})


class TestDeeplyNestedPayload:
    """JSON nested past the parser's recursion limit is a decode failure."""

    def test_deep_nesting_raises_decode_failure(self):
        nested = ("[" * 100000 + "]" * 100000).encode("ascii")
        encoded = base64.b64encode(gzip.compress(nested)).decode("ascii")

        with pytest.raises(DecodeFailure):
            decode_payload(encoded)
