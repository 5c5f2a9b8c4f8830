"""Signing key providers.

The default secret is embedded in the application, so anyone holding a
copy can compute a valid MAC. Signatures detect accidental corruption
and casual edits in transit; they are not a security boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ctdata.config.settings import CtSettings

DEFAULT_SIGNING_SECRET = "combat-tracker-secret-key-v1"


class KeyProvider(Protocol):
    """Supplies the shared secret for message authentication."""

    def signing_key(self) -> bytes: ...


def _to_key(secret: str | bytes) -> bytes:
    key = secret.encode("utf-8") if isinstance(secret, str) else bytes(secret)
    if not key:
        msg = "Signing secret must not be empty"
        raise ValueError(msg)
    return key


class StaticKeyProvider:
    """Fixed secret, for embedding and test fixtures."""

    def __init__(self, secret: str | bytes = DEFAULT_SIGNING_SECRET) -> None:
        self._key = _to_key(secret)

    def signing_key(self) -> bytes:
        return self._key


class SettingsKeyProvider:
    """Secret taken from ``[exchange] signing_key``, derived once at construction."""

    def __init__(self, settings: CtSettings) -> None:
        self._key = _to_key(settings.exchange.signing_key)

    def signing_key(self) -> bytes:
        return self._key
