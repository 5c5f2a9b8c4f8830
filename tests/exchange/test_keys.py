"""Tests for signing key providers."""

from __future__ import annotations

from pathlib import Path

import pytest

from ctdata.config.settings import CtSettings
from ctdata.exchange.keys import DEFAULT_SIGNING_SECRET, SettingsKeyProvider, StaticKeyProvider


class TestStaticKeyProvider:
    def test_default_secret(self) -> None:
        assert StaticKeyProvider().signing_key() == DEFAULT_SIGNING_SECRET.encode()

    def test_bytes_secret(self) -> None:
        assert StaticKeyProvider(b"\x01\x02").signing_key() == b"\x01\x02"

    def test_empty_secret_rejected(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            StaticKeyProvider("")


class TestSettingsKeyProvider:
    def test_reads_exchange_section(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CTDATA_CONFIG", raising=False)
        monkeypatch.setenv("CTDATA_EXCHANGE__SIGNING_KEY", "from-env")
        settings = CtSettings.from_cli(root=tmp_path)
        assert SettingsKeyProvider(settings).signing_key() == b"from-env"

    def test_key_fixed_at_construction(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CTDATA_CONFIG", raising=False)
        monkeypatch.delenv("CTDATA_EXCHANGE__SIGNING_KEY", raising=False)
        provider = SettingsKeyProvider(CtSettings.from_cli(root=tmp_path))
        monkeypatch.setenv("CTDATA_EXCHANGE__SIGNING_KEY", "changed")
        assert provider.signing_key() == DEFAULT_SIGNING_SECRET.encode()
