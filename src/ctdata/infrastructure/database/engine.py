"""Database engine setup for SQLite with WAL mode.

SQLAlchemy Core (not ORM): each CLI invocation runs one short
operation, so sessions and identity maps buy nothing.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from ctdata.infrastructure.database.schema import metadata

if TYPE_CHECKING:
    from ctdata.config.models import StoreConfig


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL journaling."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def init_database(root: Path, store: StoreConfig) -> Engine:
    """Open (creating if needed) the store at ``{root}/{directory}/{filename}``.

    Idempotent: safe to call on an existing store.
    """
    store_dir = root / store.directory
    store_dir.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(store_dir / store.filename)
    metadata.create_all(engine)
    return engine
