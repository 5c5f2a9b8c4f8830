"""HMAC-SHA256 signing and constant-time verification.

``verify`` is fail-closed: a tag of the wrong type, wrong length, or
wrong content is invalid, and comparison always uses
:func:`hmac.compare_digest`.
"""

from __future__ import annotations

import hashlib
import hmac
import re
from typing import TYPE_CHECKING, NoReturn

from ctdata.domain.errors import IntegrityError

if TYPE_CHECKING:
    from ctdata.exchange.keys import KeyProvider

MAC_SIZE = hashlib.sha256().digest_size

# Text form of a tag: lowercase, exact length, no whitespace.
_HEX_MAC = re.compile(rf"[0-9a-f]{{{2 * MAC_SIZE}}}")


def _raise_integrity() -> NoReturn:
    msg = "Data integrity check failed. The data may have been modified."
    raise IntegrityError(msg)


def sign(body: bytes, key: bytes) -> bytes:
    """Return the 32-byte HMAC-SHA256 tag of *body* under *key*."""
    return hmac.new(key, body, hashlib.sha256).digest()


def verify(body: bytes, mac: object, key: bytes) -> bool:
    """Check *mac* against *body* in constant time."""
    if not isinstance(mac, (bytes, bytearray, memoryview)):
        return False
    return hmac.compare_digest(sign(body, key), bytes(mac))


class IntegritySigner:
    """Signer/verifier bound to a :class:`KeyProvider`."""

    def __init__(self, keys: KeyProvider) -> None:
        self._keys = keys

    def sign(self, body: bytes) -> bytes:
        return sign(body, self._keys.signing_key())

    def verify(self, body: bytes, mac: object) -> bool:
        return verify(body, mac, self._keys.signing_key())

    def sign_hex(self, body: bytes) -> str:
        """Tag as lowercase hex, the text-artifact form."""
        return self.sign(body).hex()

    def verify_hex(self, body: bytes, mac_hex: str) -> bool:
        """Verify a hex tag; anything but canonical lowercase hex is invalid."""
        if not isinstance(mac_hex, str) or _HEX_MAC.fullmatch(mac_hex) is None:
            return False
        return self.verify(body, bytes.fromhex(mac_hex))

    def require_valid(self, body: bytes, mac: object) -> None:
        """Raise :class:`IntegrityError` unless *mac* authenticates *body*."""
        if not self.verify(body, mac):
            _raise_integrity()

    def require_valid_hex(self, body: bytes, mac_hex: str) -> None:
        """Hex-tag variant of :meth:`require_valid`."""
        if not self.verify_hex(body, mac_hex):
            _raise_integrity()
