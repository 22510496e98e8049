"""
Local SQLite store behind the directory cache: one table of entries keyed by
external id plus a single cache-state row. Both change only through
``replace_all``, inside one transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text, create_engine, delete, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from directory.models import CacheState, DirectoryEntry
from directory.serialization import entry_to_row, row_to_entry
from storage.store import from_naive_utc, to_naive_utc
from utils.errors import CacheWriteFailure

logger = logging.getLogger(__name__)

CACHE_VERSION = "1.0"
STATE_ROW_ID = "legislators_cache"

metadata = MetaData()

entries_table = Table(
    "directory_entries",
    metadata,
    Column("external_id", String, primary_key=True),
    Column("first_name", String, nullable=False),
    Column("last_name", String, nullable=False),
    Column("chamber", String, nullable=False),
    Column("state", String, nullable=False),
    Column("district", String, nullable=True),
    Column("party", String, nullable=False),
    Column("years_in_office", Integer, nullable=False, default=0),
    Column("phone_number", String, nullable=True),
    Column("website_url", String, nullable=True),
    Column("office_address", String, nullable=True),
    Column("photo_url", String, nullable=True),
    Column("bio", Text, nullable=True),
    Column("linked_user_id", String, nullable=True),
)

state_table = Table(
    "cache_state",
    metadata,
    Column("id", String, primary_key=True),
    Column("last_sync_at", DateTime, nullable=True),
    Column("version", String, nullable=False),
)


class DirectoryStore:
    def __init__(self, db_path: str = "data/directory_cache.db") -> None:
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self.engine: Engine = create_engine(f"sqlite:///{db_path}", future=True)
        metadata.create_all(self.engine)

    def load_state(self) -> CacheState:
        with self.engine.connect() as conn:
            row = conn.execute(select(state_table).where(state_table.c.id == STATE_ROW_ID)).mappings().first()
        if row is None:
            return CacheState(last_sync_at=None, version=CACHE_VERSION)
        return CacheState(last_sync_at=from_naive_utc(row["last_sync_at"]), version=row["version"])

    def load_entries(self) -> List[DirectoryEntry]:
        stmt = select(entries_table).order_by(entries_table.c.last_name, entries_table.c.first_name)
        with self.engine.connect() as conn:
            return [row_to_entry(row) for row in conn.execute(stmt).mappings()]

    def load_entry(self, external_id: str) -> Optional[DirectoryEntry]:
        stmt = select(entries_table).where(entries_table.c.external_id == external_id)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return row_to_entry(row) if row is not None else None

    def count(self) -> int:
        with self.engine.connect() as conn:
            return int(conn.execute(select(func.count()).select_from(entries_table)).scalar_one())

    def replace_all(self, entries: Sequence[DirectoryEntry], synced_at: datetime) -> None:
        """
        Swap the whole entry set and stamp ``last_sync_at`` in one transaction.
        On any failure nothing is committed and CacheWriteFailure is raised.
        """
        rows = [entry_to_row(entry) for entry in entries]
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(entries_table))
                if rows:
                    conn.execute(insert(entries_table), rows)
                self._write_state(conn, CacheState(last_sync_at=synced_at, version=CACHE_VERSION))
        except SQLAlchemyError as exc:
            logger.error("Directory cache replace failed; previous contents kept: %s", exc)
            raise CacheWriteFailure(f"directory cache replace failed: {exc}") from exc
        logger.info("Directory cache replaced with %s entries", len(rows))

    def clear(self) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(entries_table))
                conn.execute(delete(state_table))
        except SQLAlchemyError as exc:
            raise CacheWriteFailure(f"directory cache clear failed: {exc}") from exc

    @staticmethod
    def _write_state(conn, state: CacheState) -> None:
        conn.execute(delete(state_table).where(state_table.c.id == STATE_ROW_ID))
        conn.execute(
            insert(state_table).values(
                id=STATE_ROW_ID,
                last_sync_at=to_naive_utc(state.last_sync_at),
                version=state.version,
            )
        )

    def dispose(self) -> None:
        self.engine.dispose()
