"""Tests for CtSettings: flags, env vars, and ctdata.toml in one object."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from ctdata.config.settings import CtSettings, find_config
from ctdata.exchange.keys import DEFAULT_SIGNING_SECRET


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "CTDATA_CONFIG",
        "CTDATA_QUIET",
        "CTDATA_ROOT",
        "CTDATA_STORE__DIRECTORY",
        "CTDATA_EXCHANGE__SIGNING_KEY",
    ):
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = CtSettings.from_cli(root=tmp_path)
        assert settings.root == tmp_path
        assert settings.json_output is False
        assert settings.quiet is False
        assert settings.store.directory == ".ctdata"
        assert settings.exchange.signing_key == DEFAULT_SIGNING_SECRET
        assert settings.exchange.file_extension == ".ctdata"
        assert settings.db_path == tmp_path / ".ctdata" / "ctdata.db"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = CtSettings.from_cli(root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_sparse_override(self, tmp_path: Path) -> None:
        (tmp_path / "ctdata.toml").write_text('[store]\nfilename = "table.db"\n')
        settings = CtSettings.from_cli(root=tmp_path)
        assert settings.store.filename == "table.db"
        assert settings.store.directory == ".ctdata"

    def test_exchange_section(self, tmp_path: Path) -> None:
        (tmp_path / "ctdata.toml").write_text('[exchange]\nsigning_key = "group-secret"\n')
        assert CtSettings.from_cli(root=tmp_path).exchange.signing_key == "group-secret"

    def test_empty_signing_key_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "ctdata.toml").write_text('[exchange]\nsigning_key = ""\n')
        with pytest.raises(Exception, match="signing_key"):
            CtSettings.from_cli(root=tmp_path)

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "conf" / "my.toml"
        custom.parent.mkdir()
        custom.write_text('[store]\ndirectory = "state"\n')
        settings = CtSettings.from_cli(config_path=str(custom), root=tmp_path)
        assert settings.store.directory == "state"
        assert settings.config_path == custom

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "ctdata.toml").write_text("[store\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            CtSettings.from_cli(root=tmp_path)


class TestRootResolution:
    def test_root_from_discovered_config(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "ctdata.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        settings = CtSettings.from_cli()
        assert settings.root == tmp_path.resolve()

    def test_root_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CTDATA_CONFIG", str(tmp_path / "missing.toml"))
        assert CtSettings.from_cli().root == Path.cwd()


class TestFindConfig:
    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        target = tmp_path / "elsewhere.toml"
        target.write_text("")
        (tmp_path / "ctdata.toml").write_text("")
        monkeypatch.setenv("CTDATA_CONFIG", str(target))
        assert find_config(tmp_path) == target

    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "ctdata.toml").write_text("")
        nested = tmp_path / "x" / "y"
        nested.mkdir(parents=True)
        assert find_config(nested) == (tmp_path / "ctdata.toml").resolve()


class TestEnvVars:
    def test_flag_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CTDATA_QUIET", "true")
        assert CtSettings.from_cli(root=tmp_path).quiet is True

    def test_nested_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "ctdata.toml").write_text('[store]\ndirectory = "from-toml"\n')
        monkeypatch.setenv("CTDATA_STORE__DIRECTORY", "from-env")
        assert CtSettings.from_cli(root=tmp_path).store.directory == "from-env"

    def test_cli_flag_beats_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CTDATA_QUIET", "true")
        assert CtSettings.from_cli(root=tmp_path, quiet=False).quiet is False
