"""Artifact transports: the text and file framings of a signed envelope.

Text artifact (clipboard-safe ASCII)::

    <64 hex chars of HMAC-SHA256>.<base64 of envelope bytes>

File artifact (``.ctdata``)::

    b"CTDX" | layout version (1 byte) | 32-byte MAC | envelope bytes

Framing problems raise :class:`DecodeError`. The MAC segment itself is
never judged here: a bad tag is an integrity failure, reported by the
verifier.
"""

from __future__ import annotations

import base64
import binascii

from ctdata.domain.errors import DecodeError
from ctdata.exchange.signing import MAC_SIZE

FILE_MAGIC = b"CTDX"
FILE_LAYOUT_VERSION = 1
FILE_HEADER_SIZE = len(FILE_MAGIC) + 1 + MAC_SIZE
TEXT_SEPARATOR = "."


def encode_text(mac: bytes, body: bytes) -> str:
    """Frame a signed body as ``<hex-mac>.<base64>``."""
    return f"{mac.hex()}{TEXT_SEPARATOR}{base64.b64encode(body).decode('ascii')}"


def decode_text(text: str) -> tuple[str, bytes]:
    """Split a text artifact into ``(mac_hex, body)``.

    Raises:
        DecodeError: Missing separator, empty segment, or invalid base64.
    """
    parts = text.strip().split(TEXT_SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        msg = (
            "Invalid format: missing MAC or data. "
            "Please ensure you pasted the complete export string."
        )
        raise DecodeError(msg)
    mac_hex, encoded = parts
    try:
        body = base64.b64decode(encoded.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        msg = "Invalid format: export data is not valid base64."
        raise DecodeError(msg) from exc
    return mac_hex, body


def encode_file(mac: bytes, body: bytes) -> bytes:
    """Frame a signed body as file-artifact bytes."""
    return FILE_MAGIC + bytes([FILE_LAYOUT_VERSION]) + mac + body


def decode_file(data: bytes) -> tuple[bytes, bytes]:
    """Split file-artifact bytes into ``(mac, body)``.

    Raises:
        DecodeError: Short input, wrong magic, or unknown layout version.
    """
    if len(data) <= FILE_HEADER_SIZE:
        msg = "File is too short to be an export."
        raise DecodeError(msg)
    if data[: len(FILE_MAGIC)] != FILE_MAGIC:
        msg = "File is not an export (unrecognised header)."
        raise DecodeError(msg)
    layout = data[len(FILE_MAGIC)]
    if layout != FILE_LAYOUT_VERSION:
        msg = f"Unsupported export file layout {layout}."
        raise DecodeError(msg)
    mac_start = len(FILE_MAGIC) + 1
    return data[mac_start:FILE_HEADER_SIZE], data[FILE_HEADER_SIZE:]
