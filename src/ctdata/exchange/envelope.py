"""Exchange envelope — source tag plus format version around a payload.

Wire shape (one MessagePack map)::

    {"source": "library", "version": 1, "data": {...}}

The tag is fixed when the envelope is built. :func:`unwrap` refuses an
envelope whose tag differs from the caller's expected source before any
schema validation runs, so a combat export can never be mistaken for a
malformed library export.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from ctdata.domain.errors import DecodeError, SourceMismatchError
from ctdata.exchange import codec

FORMAT_VERSION = 1
ENVELOPE_KEYS = frozenset({"source", "version", "data"})


def _payload(document: Mapping[str, Any] | BaseModel) -> Any:
    if isinstance(document, BaseModel):
        return document.model_dump(by_alias=True, mode="json")
    return dict(document)


def wrap(source: str, document: Mapping[str, Any] | BaseModel) -> bytes:
    """Tag *document* with *source* and encode the envelope."""
    return codec.encode(
        {
            "source": str(source),
            "version": FORMAT_VERSION,
            "data": _payload(document),
        }
    )


def unwrap(data: bytes, expected_source: str) -> Any:
    """Decode an envelope and return its payload if the tag matches.

    Raises:
        DecodeError: Bytes are not a well-formed envelope of a supported version.
        SourceMismatchError: The envelope's tag differs from *expected_source*.
    """
    envelope = codec.decode(data)
    if not isinstance(envelope, dict) or set(envelope) != ENVELOPE_KEYS:
        msg = "Payload is not an exchange envelope."
        raise DecodeError(msg)

    version = envelope["version"]
    if isinstance(version, bool) or not isinstance(version, int):
        msg = f"Envelope version must be an integer, got {type(version).__name__}."
        raise DecodeError(msg)
    if not 1 <= version <= FORMAT_VERSION:
        msg = f"Unsupported export format version {version} (this build reads 1-{FORMAT_VERSION})."
        raise DecodeError(msg)

    source = envelope["source"]
    if source != str(expected_source):
        actual = source if isinstance(source, str) else repr(source)
        raise SourceMismatchError(expected=str(expected_source), actual=actual)

    return envelope["data"]
