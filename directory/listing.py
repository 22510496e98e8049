"""
Server-side legislator queries backing the ``/api/legislators`` endpoints.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import Integer, case, cast, func, or_, select

from directory.models import Chamber, DirectoryEntry, DirectoryFilter
from directory.serialization import row_to_entry
from storage.store import ContentStore, casefold_contains, legislators_table

logger = logging.getLogger(__name__)


def _row_to_entry(row) -> DirectoryEntry:
    return row_to_entry(row, id_column="bioguide_id", user_column="user_id")


@dataclass
class DirectoryListingPage:
    legislators: List[DirectoryEntry]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.legislators) < self.total


class DirectoryListing:
    def __init__(self, store: ContentStore) -> None:
        self.store = store

    def list(self, criteria: DirectoryFilter, limit: int, offset: int) -> DirectoryListingPage:
        conditions = self._conditions(criteria)
        table = legislators_table
        stmt = (
            select(table)
            .where(*conditions)
            .order_by(table.c.last_name, table.c.first_name, table.c.bioguide_id)
            .limit(limit)
            .offset(offset)
        )
        count_stmt = select(func.count()).select_from(table).where(*conditions)
        with self.store.engine.connect() as conn:
            total = int(conn.execute(count_stmt).scalar_one())
            rows = conn.execute(stmt).mappings().all()
        return DirectoryListingPage([_row_to_entry(row) for row in rows], total=total, limit=limit, offset=offset)

    def find_one(self, external_id: str) -> Optional[DirectoryEntry]:
        stmt = select(legislators_table).where(legislators_table.c.bioguide_id == external_id)
        with self.store.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return _row_to_entry(row) if row is not None else None

    def find_by_state(self, state: str) -> List[DirectoryEntry]:
        """Senators first, then representatives by district."""
        table = legislators_table
        senate_first = case((table.c.chamber == Chamber.SENATE.value, 0), else_=1)
        stmt = (
            select(table)
            .where(table.c.state == state.upper())
            .order_by(senate_first, cast(table.c.district, Integer), table.c.last_name, table.c.first_name)
        )
        with self.store.engine.connect() as conn:
            return [_row_to_entry(row) for row in conn.execute(stmt).mappings()]

    def stats(self) -> Dict[str, object]:
        table = legislators_table
        with self.store.engine.connect() as conn:
            total = int(conn.execute(select(func.count()).select_from(table)).scalar_one())
            by_chamber = conn.execute(select(table.c.chamber, func.count()).group_by(table.c.chamber)).all()
            by_party = conn.execute(select(table.c.party, func.count()).group_by(table.c.party)).all()
            states = int(conn.execute(select(func.count(func.distinct(table.c.state)))).scalar_one())
        return {
            "total": total,
            "byChamber": {chamber: count for chamber, count in by_chamber},
            "byParty": {party: count for party, count in by_party},
            "states": states,
        }

    @staticmethod
    def _conditions(criteria: DirectoryFilter) -> list:
        table = legislators_table
        conditions = []
        if criteria.state:
            conditions.append(table.c.state == criteria.state.upper())
        if criteria.chamber:
            conditions.append(table.c.chamber == criteria.chamber.value)
        if criteria.party:
            conditions.append(table.c.party == criteria.party.value)
        if criteria.search:
            term = criteria.search.strip()
            full_name = table.c.first_name + " " + table.c.last_name
            conditions.append(
                or_(
                    casefold_contains(table.c.first_name, term),
                    casefold_contains(table.c.last_name, term),
                    casefold_contains(full_name, term),
                )
            )
        return conditions
