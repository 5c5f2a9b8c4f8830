"""Record store: the capability interface the merge engine writes through.

A store is a set of named collections of records keyed by ``id``. The
merge engine only needs :meth:`RecordStore.transaction` and the
handle's :meth:`StoreTransaction.bulk_upsert`; exports additionally use
:meth:`RecordStore.read_all`. Anything satisfying the protocols
(the SQLite store here, an in-memory fake in tests) is substitutable.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy import bindparam, func, select, update
from sqlalchemy import insert as sa_insert

from ctdata.infrastructure.database.schema import COLLECTION_TABLES

if TYPE_CHECKING:
    from sqlalchemy import Connection, Table
    from sqlalchemy.engine import Engine

# Stay well under SQLite's bound-parameter limit for IN (...) lookups.
_ID_CHUNK = 500


class StoreError(Exception):
    """Misuse of the store: unknown collection, record without id, closed store."""


class StoreTransaction(Protocol):
    """Write handle valid inside one :meth:`RecordStore.transaction` block."""

    def bulk_upsert(
        self, collection: str, records: Iterable[Mapping[str, Any]]
    ) -> tuple[int, int]:
        """Insert new ids and overwrite existing ones. Returns ``(inserted, updated)``."""
        ...


class RecordStore(Protocol):
    """Persistent keyed collections with all-or-nothing write scopes."""

    def transaction(self, collections: Iterable[str]) -> AbstractContextManager[StoreTransaction]:
        """Open a write scope over *collections*; any exception rolls it all back."""
        ...

    def read_all(self, collection: str) -> list[dict[str, Any]]:
        """Every record in *collection*, in first-insertion order."""
        ...

    def read_ids(self, collection: str) -> set[str]:
        """Ids present in *collection*."""
        ...


def _record_id(record: Mapping[str, Any], collection: str) -> str:
    record_id = record.get("id")
    if not isinstance(record_id, str) or not record_id:
        msg = f"Record in {collection!r} has no string id"
        raise StoreError(msg)
    return record_id


class _SqlTransaction:
    """:class:`StoreTransaction` bound to one SQLAlchemy connection."""

    def __init__(self, conn: Connection, tables: dict[str, Table]) -> None:
        self._conn = conn
        self._tables = tables

    def bulk_upsert(
        self, collection: str, records: Iterable[Mapping[str, Any]]
    ) -> tuple[int, int]:
        table = self._tables.get(collection)
        if table is None:
            msg = f"Collection {collection!r} is not part of this transaction"
            raise StoreError(msg)

        rows = [(_record_id(r, collection), json.dumps(dict(r))) for r in records]
        if not rows:
            return 0, 0

        existing = self._existing_ids(table, [record_id for record_id, _ in rows])
        next_seq = int(
            self._conn.execute(select(func.coalesce(func.max(table.c.seq), 0))).scalar_one()
        )
        now = datetime.now(UTC).isoformat()

        inserts: list[dict[str, Any]] = []
        updates: list[dict[str, Any]] = []
        for record_id, body in rows:
            if record_id in existing:
                updates.append({"b_id": record_id, "b_body": body, "b_updated": now})
            else:
                next_seq += 1
                inserts.append({"id": record_id, "seq": next_seq, "body": body, "updated": now})
                existing.add(record_id)

        if inserts:
            self._conn.execute(sa_insert(table), inserts)
        if updates:
            # seq is left alone: an overwrite keeps the record's position.
            stmt = (
                update(table)
                .where(table.c.id == bindparam("b_id"))
                .values(body=bindparam("b_body"), updated=bindparam("b_updated"))
            )
            self._conn.execute(stmt, updates)
        return len(inserts), len(updates)

    def _existing_ids(self, table: Table, ids: list[str]) -> set[str]:
        unique = list(dict.fromkeys(ids))
        found: set[str] = set()
        for start in range(0, len(unique), _ID_CHUNK):
            chunk = unique[start : start + _ID_CHUNK]
            result = self._conn.execute(select(table.c.id).where(table.c.id.in_(chunk)))
            found.update(str(row.id) for row in result)
        return found


class SqlRecordStore:
    """SQLite-backed :class:`RecordStore` over the ``COLLECTION_TABLES``."""

    def __init__(self, engine: Engine) -> None:
        self._engine: Engine | None = engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            msg = "Store is closed"
            raise StoreError(msg)
        return self._engine

    def _table(self, collection: str) -> Table:
        try:
            return COLLECTION_TABLES[collection]
        except KeyError:
            msg = f"Unknown collection {collection!r}"
            raise StoreError(msg) from None

    @contextmanager
    def transaction(self, collections: Iterable[str]) -> Iterator[StoreTransaction]:
        """One ``engine.begin()`` scope: commit on success, rollback on any exception.

        Usage::

            with store.transaction(["categories", "creatures"]) as txn:
                txn.bulk_upsert("categories", [...])
                txn.bulk_upsert("creatures", [...])
        """
        tables = {name: self._table(name) for name in collections}
        with self.engine.begin() as conn:
            yield _SqlTransaction(conn, tables)

    def read_all(self, collection: str) -> list[dict[str, Any]]:
        table = self._table(collection)
        with self.engine.connect() as conn:
            rows = conn.execute(select(table.c.body).order_by(table.c.seq)).all()
        return [json.loads(row.body) for row in rows]

    def read_ids(self, collection: str) -> set[str]:
        table = self._table(collection)
        with self.engine.connect() as conn:
            return {str(row.id) for row in conn.execute(select(table.c.id))}

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
