"""SQLite engine and schema via SQLAlchemy Core."""

from ctdata.infrastructure.database.engine import create_db_engine, init_database
from ctdata.infrastructure.database.schema import (
    COLLECTION_TABLES,
    categories,
    combatants,
    creatures,
    encounter,
    metadata,
)

__all__ = [
    "COLLECTION_TABLES",
    "categories",
    "combatants",
    "create_db_engine",
    "creatures",
    "encounter",
    "init_database",
    "metadata",
]
