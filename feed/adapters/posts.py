"""
Posts adapter: searches post bodies.
"""
from __future__ import annotations

import json
from typing import List, Optional

from sqlalchemy.engine import Row

from feed.adapters.base import SqlSourceAdapter
from feed.models import ContentItem, ContentKind, PostPayload
from storage.store import from_naive_utc, posts_table


def _json_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    value = json.loads(raw)
    return [str(entry) for entry in value] if isinstance(value, list) else []


class PostSourceAdapter(SqlSourceAdapter):
    kind = ContentKind.POST
    table = posts_table
    author_column = "author_id"
    search_columns = ("content",)

    def _row_to_item(self, row: Row) -> ContentItem:
        return ContentItem(
            id=row.id,
            kind=self.kind,
            created_at=from_naive_utc(row.created_at),
            author_id=row.author_id,
            body=row.content,
            payload=PostPayload(
                post_type=row.post_type or "text",
                tags=_json_list(row.tags),
                attachment_urls=_json_list(row.attachment_urls),
                like_count=row.like_count or 0,
                comment_count=row.comment_count or 0,
                share_count=row.share_count or 0,
            ),
            **self._author_fields(row),
        )
