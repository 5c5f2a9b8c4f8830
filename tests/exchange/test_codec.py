"""Tests for the MessagePack codec."""

from __future__ import annotations

import msgpack
import pytest

from ctdata.domain.errors import DecodeError, EncodeError
from ctdata.exchange.codec import decode, encode


class TestRoundTrip:
    def test_nested_document(self) -> None:
        doc = {
            "name": "Ghoul ✦",
            "n": -(2**63),
            "big": 2**64 - 1,
            "ratio": 0.1,
            "flags": [True, False, None],
            "blob": b"\x00\xff",
            "nested": {"list": [1, [2, 3]], "empty": {}},
        }
        assert decode(encode(doc)) == doc

    def test_tuples_decode_as_lists(self) -> None:
        assert decode(encode({"seq": (1, 2)})) == {"seq": [1, 2]}

    def test_float_is_exact(self) -> None:
        assert decode(encode(1 / 3)) == 1 / 3


class TestDecodeErrors:
    def test_empty(self) -> None:
        with pytest.raises(DecodeError, match="empty"):
            decode(b"")

    def test_truncated(self) -> None:
        data = encode({"source": "library", "data": [1, 2, 3]})
        with pytest.raises(DecodeError):
            decode(data[:-2])

    def test_trailing_garbage(self) -> None:
        with pytest.raises(DecodeError):
            decode(encode({"a": 1}) + b"\x01")

    def test_reserved_marker(self) -> None:
        with pytest.raises(DecodeError):
            decode(b"\xc1")

    def test_extension_type(self) -> None:
        data = msgpack.packb(msgpack.ExtType(5, b"xyz"))
        with pytest.raises(DecodeError, match="extension"):
            decode(data)

    def test_non_string_map_key(self) -> None:
        with pytest.raises(DecodeError):
            decode(msgpack.packb({1: "one"}))


class TestEncodeErrors:
    def test_int_beyond_64_bits(self) -> None:
        with pytest.raises(EncodeError):
            encode({"n": 2**64})

    def test_arbitrary_object(self) -> None:
        with pytest.raises(EncodeError):
            encode({"obj": object()})
