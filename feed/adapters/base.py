"""
Adapter protocol, shared SQL plumbing and registry for the per-kind content sources.
"""
from __future__ import annotations

import abc
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Protocol, Sequence

from sqlalchemy import ColumnElement, Select, Table, func, or_, select
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError

from feed.models import ContentItem, ContentKind
from storage.store import ContentStore, casefold_contains, users_table
from utils.errors import AdapterFailure

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "Unknown User"


class SourceAdapter(Protocol):
    kind: ContentKind
    name: str

    def fetch(self, search_term: Optional[str] = None) -> List[ContentItem]:
        ...

    def count(self, search_term: Optional[str] = None) -> int:
        ...

    def stream(self, search_term: Optional[str] = None) -> Iterator[ContentItem]:
        ...


class SqlSourceAdapter(abc.ABC):
    """
    Reads one content table joined to its author, filters by an optional
    case-insensitive substring and maps rows to ContentItem.

    Rows come back newest first with ids ascending on ties, which is the feed
    order restricted to a single kind.
    """

    kind: ContentKind
    table: Table
    author_column: str
    search_columns: Sequence[str] = ()
    stream_batch_size = 200

    def __init__(self, store: ContentStore) -> None:
        self.store = store

    @property
    def name(self) -> str:
        return f"{self.kind.value}s"

    def fetch(self, search_term: Optional[str] = None) -> List[ContentItem]:
        return list(self._run(lambda: self._materialize(search_term)))

    def count(self, search_term: Optional[str] = None) -> int:
        def _count() -> int:
            stmt = select(func.count()).select_from(self.table)
            condition = self._search_condition(search_term)
            if condition is not None:
                stmt = stmt.where(condition)
            with self.store.engine.connect() as conn:
                return int(conn.execute(stmt).scalar_one())

        return self._run(_count)

    def stream(self, search_term: Optional[str] = None) -> Iterator[ContentItem]:
        """Yield matching items lazily, fetching rows in batches."""
        try:
            with self.store.engine.connect() as conn:
                result = conn.execution_options(yield_per=self.stream_batch_size).execute(
                    self._select(search_term)
                )
                for row in result:
                    yield self._row_to_item(row)
        except (SQLAlchemyError, ValueError) as exc:
            logger.error("%s adapter stream failed: %s", self.kind.value, exc)
            raise AdapterFailure(self.kind.value, str(exc), cause=exc) from exc

    def _materialize(self, search_term: Optional[str]) -> List[ContentItem]:
        with self.store.engine.connect() as conn:
            rows = conn.execute(self._select(search_term)).all()
        return [self._row_to_item(row) for row in rows]

    def _run(self, operation: Callable[[], Any]) -> Any:
        try:
            return operation()
        except (SQLAlchemyError, ValueError) as exc:
            logger.error("%s adapter query failed: %s", self.kind.value, exc)
            raise AdapterFailure(self.kind.value, str(exc), cause=exc) from exc

    def _select(self, search_term: Optional[str]) -> Select:
        author_fk = self.table.c[self.author_column]
        stmt = (
            select(
                self.table,
                users_table.c.display_name.label("author_display_name"),
                users_table.c.profile_image_url.label("author_avatar_url"),
            )
            .select_from(self.table.outerjoin(users_table, users_table.c.id == author_fk))
            .order_by(self.table.c.created_at.desc(), self.table.c.id.asc())
        )
        condition = self._search_condition(search_term)
        if condition is not None:
            stmt = stmt.where(condition)
        return stmt

    def _search_condition(self, search_term: Optional[str]) -> Optional[ColumnElement[bool]]:
        if not search_term:
            return None
        clauses = [
            casefold_contains(self.table.c[column], search_term)
            for column in self.search_columns
        ]
        return or_(*clauses)

    @staticmethod
    def _author_fields(row: Row) -> Dict[str, Any]:
        return {
            "author_display_name": row.author_display_name or UNKNOWN_AUTHOR,
            "author_avatar_url": row.author_avatar_url,
        }

    @abc.abstractmethod
    def _row_to_item(self, row: Row) -> ContentItem:
        ...


@dataclass
class AdapterFactory:
    adapter_cls: Callable[..., SourceAdapter]
    config: Dict[str, object] = field(default_factory=dict)

    def build(self, store: ContentStore) -> SourceAdapter:
        return self.adapter_cls(store, **self.config)


class AdapterRegistry:
    """
    Keeps track of the adapter per content kind; each kind is registered once.
    """

    def __init__(self) -> None:
        self._factories: Dict[ContentKind, AdapterFactory] = {}

    def register(self, kind: ContentKind, factory: AdapterFactory) -> None:
        if kind in self._factories:
            raise ValueError(f"Adapter for '{kind.value}' already registered")
        self._factories[kind] = factory

    def build_all(self, store: ContentStore) -> List[SourceAdapter]:
        return [factory.build(store) for factory in self._factories.values()]

    def kinds(self) -> Iterable[ContentKind]:
        return self._factories.keys()
