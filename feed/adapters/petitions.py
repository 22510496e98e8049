"""
Petitions adapter: searches petition titles and descriptions.
"""
from __future__ import annotations

from sqlalchemy.engine import Row

from feed.adapters.base import SqlSourceAdapter
from feed.models import ContentItem, ContentKind, PetitionPayload
from storage.store import from_naive_utc, petitions_table


class PetitionSourceAdapter(SqlSourceAdapter):
    kind = ContentKind.PETITION
    table = petitions_table
    author_column = "creator_id"
    search_columns = ("title", "description")

    def _row_to_item(self, row: Row) -> ContentItem:
        return ContentItem(
            id=row.id,
            kind=self.kind,
            created_at=from_naive_utc(row.created_at),
            author_id=row.creator_id,
            title=row.title,
            body=row.description,
            payload=PetitionPayload(
                signatures=row.current_signatures or 0,
                target_signatures=row.target_signatures,
                deadline=from_naive_utc(row.deadline),
                category=row.category,
            ),
            **self._author_fields(row),
        )
