"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs:   CLI flags passed by Click
  2. Env vars:      ``CTDATA_*`` prefix, ``__`` for nested sections
  3. TOML file:     ``ctdata.toml`` found by walking up from the root
  4. Code defaults: baked into :mod:`ctdata.config.models`
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from ctdata.config.models import ExchangeConfig, StoreConfig

CONFIG_FILENAME = "ctdata.toml"
CONFIG_ENV_VAR = "CTDATA_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Locate ``ctdata.toml``.

    ``CTDATA_CONFIG`` wins when set (and is ignored if it points nowhere);
    otherwise each directory from *start* (default: cwd) up to the
    filesystem root is checked.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a discovered ``ctdata.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                self._data = tomllib.loads(toml_path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during construction.
_tls = threading.local()


class CtSettings(BaseSettings):
    """Settings for the ctdata CLI and services.

    Attributes:
        root: Directory holding the store (parent of ``ctdata.toml``, or CWD).
        config_path: The TOML file in effect, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CTDATA_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    store: StoreConfig = Field(default_factory=StoreConfig)
    exchange: ExchangeConfig = Field(default_factory=ExchangeConfig)

    @property
    def db_path(self) -> Path:
        """Location of the SQLite store."""
        return self.root / self.store.directory / self.store.filename

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, getattr(_tls, "toml_path", None)),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> CtSettings:
        """Build settings for one CLI invocation.

        An explicit *config_path* must exist to be used; otherwise the
        config is discovered from *root* (or CWD). Without an explicit
        *root*, the store lives next to the config file.
        """
        toml_path: Path | None
        if config_path:
            candidate = Path(config_path)
            toml_path = candidate if candidate.is_file() else None
        else:
            toml_path = find_config(root)

        if root is None:
            root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(root=root, config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None
