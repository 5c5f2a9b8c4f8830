"""Shared pytest fixtures and test helpers for ctdata tests."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from ctdata.config.models import StoreConfig
from ctdata.exchange import ExchangePipeline, IntegritySigner, StaticKeyProvider
from ctdata.infrastructure.database.engine import init_database
from ctdata.infrastructure.store import SqlRecordStore, StoreError

FIXTURE_KEY = "fixture-key-not-for-production"


# ---------------------------------------------------------------------------
# In-memory record store
# ---------------------------------------------------------------------------


class _MemoryTransaction:
    def __init__(self, store: MemoryRecordStore, collections: set[str]) -> None:
        self._store = store
        self._collections = collections

    def bulk_upsert(
        self, collection: str, records: Iterable[Mapping[str, Any]]
    ) -> tuple[int, int]:
        if collection not in self._collections:
            msg = f"Collection {collection!r} is not part of this transaction"
            raise StoreError(msg)
        if self._store.fail_on == collection and self._store.failures_remaining > 0:
            self._store.failures_remaining -= 1
            msg = f"injected failure writing {collection}"
            raise StoreError(msg)

        table = self._store.collections.setdefault(collection, {})
        inserted = updated = 0
        for record in records:
            if record["id"] in table:
                updated += 1
            else:
                inserted += 1
            # Re-assigning an existing key keeps its position: first-insertion order.
            table[record["id"]] = dict(record)
        return inserted, updated


class MemoryRecordStore:
    """Dict-backed RecordStore with snapshot rollback and failure injection.

    Set ``fail_on`` to a collection name to make the next
    ``failures_remaining`` writes to it raise :class:`StoreError`, and
    ``read_error`` to make every read raise that exception.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.fail_on: str | None = None
        self.failures_remaining = 0
        self.transactions = 0
        self.read_error: Exception | None = None

    def fail_next(self, collection: str, times: int = 1) -> None:
        self.fail_on = collection
        self.failures_remaining = times

    @contextmanager
    def transaction(self, collections: Iterable[str]) -> Iterator[_MemoryTransaction]:
        snapshot = copy.deepcopy(self.collections)
        self.transactions += 1
        try:
            yield _MemoryTransaction(self, set(collections))
        except BaseException:
            self.collections = snapshot
            raise

    def read_all(self, collection: str) -> list[dict[str, Any]]:
        if self.read_error is not None:
            raise self.read_error
        return [dict(r) for r in self.collections.get(collection, {}).values()]

    def read_ids(self, collection: str) -> set[str]:
        if self.read_error is not None:
            raise self.read_error
        return set(self.collections.get(collection, {}))


# ---------------------------------------------------------------------------
# Sample documents (wire form)
# ---------------------------------------------------------------------------


def library_doc(**overrides: Any) -> dict[str, Any]:
    """A small valid library payload."""
    doc: dict[str, Any] = {
        "categories": [
            {"id": "c1", "name": "Undead"},
            {"id": "c2", "name": "Beasts"},
        ],
        "creatures": [
            {
                "id": "k1",
                "name": "Skeleton",
                "initiativeType": "fixed",
                "initiative": 12,
                "hp": 13,
                "categoryIds": ["c1"],
            },
            {
                "id": "k2",
                "name": "Wolf",
                "initiativeType": "roll",
                "initiative": 2,
                "hp": 11,
                "categoryIds": ["c2"],
            },
        ],
    }
    doc.update(overrides)
    return doc


def combat_doc(**overrides: Any) -> dict[str, Any]:
    """A small valid combat payload."""
    doc: dict[str, Any] = {
        "inCombat": True,
        "round": 2,
        "step": 1,
        "combatants": [
            {
                "id": "a1",
                "name": "Aria",
                "initiativeType": "fixed",
                "initiative": 17,
                "hp": 24,
                "maxHp": 30,
            },
            {
                "id": "g1",
                "name": "Goblin",
                "initiativeType": "roll",
                "initiative": -1,
                "hp": 7,
                "maxHp": 7,
            },
        ],
    }
    doc.update(overrides)
    return doc


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def keys() -> StaticKeyProvider:
    return StaticKeyProvider(FIXTURE_KEY)


@pytest.fixture
def signer(keys: StaticKeyProvider) -> IntegritySigner:
    return IntegritySigner(keys)


@pytest.fixture
def pipeline(signer: IntegritySigner) -> ExchangePipeline:
    return ExchangePipeline(signer)


@pytest.fixture
def memory_store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture
def sql_store(tmp_path: Path) -> Iterator[SqlRecordStore]:
    """SQLite store in a temp directory with all tables created."""
    store = SqlRecordStore(init_database(tmp_path, StoreConfig()))
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the CLI from an empty temp directory with no config overrides.

    Use via ``@pytest.mark.usefixtures("_isolated_root")``.
    """
    for var in ("CTDATA_CONFIG", "CTDATA_EXCHANGE__SIGNING_KEY", "CTDATA_ROOT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
