"""MessagePack binary codec for exchange documents.

Maps, sequences, 64-bit ints, float64, bools, None, bytes and unicode
strings round-trip exactly. Sequences always decode as lists. Extension
types are refused: the exchange format never emits them.
"""

from __future__ import annotations

from typing import Any, NoReturn

import msgpack

from ctdata.domain.errors import DecodeError, EncodeError


def _reject_ext(code: int, _data: bytes) -> NoReturn:
    msg = f"Unsupported extension type {code} in exchange payload"
    raise DecodeError(msg)


def encode(document: Any) -> bytes:
    """Serialize *document* to MessagePack bytes.

    Raises:
        EncodeError: If the document holds a value MessagePack cannot carry.
    """
    try:
        return msgpack.packb(document, use_bin_type=True)
    except (TypeError, ValueError, OverflowError) as exc:
        msg = f"Cannot encode exchange payload: {exc}"
        raise EncodeError(msg) from exc


def decode(data: bytes) -> Any:
    """Deserialize MessagePack *data*.

    Raises:
        DecodeError: On empty, truncated, malformed, or trailing-garbage input.
    """
    if not data:
        msg = "Exchange payload is empty"
        raise DecodeError(msg)
    try:
        return msgpack.unpackb(
            data,
            raw=False,
            use_list=True,
            strict_map_key=True,
            ext_hook=_reject_ext,
        )
    except DecodeError:
        raise
    except (msgpack.UnpackException, ValueError, TypeError) as exc:
        msg = f"Exchange payload is malformed: {exc}"
        raise DecodeError(msg) from exc
