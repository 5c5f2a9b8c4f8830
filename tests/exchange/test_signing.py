"""Tests for HMAC signing and the IntegritySigner."""

from __future__ import annotations

import pytest

from ctdata.domain.errors import IntegrityError
from ctdata.exchange.keys import StaticKeyProvider
from ctdata.exchange.signing import MAC_SIZE, IntegritySigner, sign, verify

KEY = b"k" * 16


class TestSignVerify:
    def test_mac_is_32_bytes(self) -> None:
        assert len(sign(b"body", KEY)) == MAC_SIZE == 32

    def test_valid_mac_verifies(self) -> None:
        assert verify(b"body", sign(b"body", KEY), KEY)

    def test_flipped_body_byte_fails(self) -> None:
        mac = sign(b"body", KEY)
        assert not verify(b"bodz", mac, KEY)

    def test_flipped_mac_byte_fails(self) -> None:
        mac = bytearray(sign(b"body", KEY))
        mac[0] ^= 0x01
        assert not verify(b"body", bytes(mac), KEY)

    def test_wrong_length_fails(self) -> None:
        assert not verify(b"body", sign(b"body", KEY)[:-1], KEY)

    def test_wrong_type_fails(self) -> None:
        assert not verify(b"body", sign(b"body", KEY).hex(), KEY)

    def test_other_key_fails(self) -> None:
        assert not verify(b"body", sign(b"body", KEY), b"other-key")


class TestIntegritySigner:
    @pytest.fixture
    def signer(self) -> IntegritySigner:
        return IntegritySigner(StaticKeyProvider(KEY))

    def test_hex_round_trip(self, signer: IntegritySigner) -> None:
        mac_hex = signer.sign_hex(b"payload")
        assert len(mac_hex) == 64
        assert mac_hex == mac_hex.lower()
        assert signer.verify_hex(b"payload", mac_hex)

    def test_malformed_hex_is_invalid(self, signer: IntegritySigner) -> None:
        assert not signer.verify_hex(b"payload", "zz" * 32)

    def test_appended_hex_char_is_invalid(self, signer: IntegritySigner) -> None:
        assert not signer.verify_hex(b"payload", signer.sign_hex(b"payload") + "0")

    def test_whitespace_and_uppercase_are_invalid(self, signer: IntegritySigner) -> None:
        mac_hex = signer.sign_hex(b"payload")
        assert not signer.verify_hex(b"payload", mac_hex + " ")
        assert not signer.verify_hex(b"payload", " ".join([mac_hex[:2], mac_hex[2:]]))
        assert not signer.verify_hex(b"payload", mac_hex.upper())

    def test_require_valid_raises(self, signer: IntegritySigner) -> None:
        with pytest.raises(IntegrityError) as exc_info:
            signer.require_valid(b"payload", b"\x00" * 32)
        assert exc_info.value.code == "INTEGRITY_FAILED"
        assert exc_info.value.retryable is False

    def test_require_valid_hex_raises(self, signer: IntegritySigner) -> None:
        with pytest.raises(IntegrityError):
            signer.require_valid_hex(b"payload", "not-hex")
