"""SQLAlchemy Core table definitions for the ctdata store.

Every collection is a keyed record table with the same shape: the wire
record is stored whole as JSON in ``body`` so new optional fields need
no migration. ``seq`` fixes first-insertion order and is never
rewritten by an overwrite.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, Table, Text

metadata = MetaData()


def _record_table(name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", Text, primary_key=True),
        Column("seq", Integer, nullable=False),
        Column("body", Text, nullable=False),  # JSON wire record
        Column("updated", Text, nullable=False),
    )


categories = _record_table("categories")
creatures = _record_table("creatures")
combatants = _record_table("combatants")
encounter = _record_table("encounter")  # singleton row "current"

COLLECTION_TABLES: dict[str, Table] = {
    "categories": categories,
    "creatures": creatures,
    "combatants": combatants,
    "encounter": encounter,
}
