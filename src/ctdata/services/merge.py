"""Merge-upsert engine: additive, overwrite-wins writes of a validated state.

Every record in the incoming state is written: an existing id is
overwritten, a new id is inserted, and records absent from the state are
never touched. All collections the state spans are written in one store
transaction, so a failure anywhere leaves the store exactly as it was.
Applying the same state twice yields the same store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from ctdata.domain.errors import MergeError
from ctdata.infrastructure.store import StoreError

if TYPE_CHECKING:
    from ctdata.domain.schemas import ExchangeState
    from ctdata.infrastructure.store import RecordStore

logger = logging.getLogger(__name__)

# What a store read or write may raise when the database itself is at fault.
STORE_ERRORS: tuple[type[Exception], ...] = (SQLAlchemyError, StoreError, OSError)


@dataclass
class MergeReport:
    """Per-collection insert/overwrite counts for one merge."""

    inserted: dict[str, int] = field(default_factory=dict)
    updated: dict[str, int] = field(default_factory=dict)

    @property
    def total_inserted(self) -> int:
        return sum(self.inserted.values())

    @property
    def total_updated(self) -> int:
        return sum(self.updated.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "inserted": dict(self.inserted),
            "updated": dict(self.updated),
            "total_inserted": self.total_inserted,
            "total_updated": self.total_updated,
        }


class MergeEngine:
    """Applies validated states to a :class:`RecordStore`."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def apply(self, state: ExchangeState) -> MergeReport:
        """Upsert every record of *state* inside one transaction.

        Raises:
            MergeError: The store failed; nothing was written.
        """
        collections = state.to_collections()
        report = MergeReport()
        try:
            with self._store.transaction(state.COLLECTIONS) as txn:
                for name in state.COLLECTIONS:
                    inserted, updated = txn.bulk_upsert(name, collections.get(name, []))
                    report.inserted[name] = inserted
                    report.updated[name] = updated
        except STORE_ERRORS as exc:
            logger.info(
                "merge_rolled_back",
                extra={"collections": list(state.COLLECTIONS), "error": str(exc)},
            )
            msg = f"Could not save imported data: {exc}"
            raise MergeError(msg) from exc

        logger.debug(
            "merge_committed",
            extra={"inserted": report.inserted, "updated": report.updated},
        )
        return report
