"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``ctdata.toml`` only holds
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ctdata.exchange.keys import DEFAULT_SIGNING_SECRET


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    directory: str = ".ctdata"
    filename: str = "ctdata.db"


class ExchangeConfig(BaseModel):
    """[exchange] section.

    ``signing_key`` defaults to the embedded application secret. It
    detects corruption and casual edits; it does not make artifacts
    confidential or unforgeable.
    """

    model_config = {"frozen": True}

    signing_key: str = Field(default=DEFAULT_SIGNING_SECRET, min_length=1)
    file_extension: str = ".ctdata"

