"""
Events adapter: searches event titles and descriptions.
"""
from __future__ import annotations

from sqlalchemy.engine import Row

from feed.adapters.base import SqlSourceAdapter
from feed.models import ContentItem, ContentKind, EventPayload
from storage.store import events_table, from_naive_utc


class EventSourceAdapter(SqlSourceAdapter):
    kind = ContentKind.EVENT
    table = events_table
    author_column = "creator_user_id"
    search_columns = ("title", "event_description")

    def _row_to_item(self, row: Row) -> ContentItem:
        return ContentItem(
            id=row.id,
            kind=self.kind,
            created_at=from_naive_utc(row.created_at),
            author_id=row.creator_user_id,
            title=row.title,
            body=row.event_description,
            payload=EventPayload(
                event_date=from_naive_utc(row.date),
                event_end_date=from_naive_utc(row.event_end_date),
                location=row.location,
                address=row.event_address,
                event_type=row.event_type,
                event_format=row.event_format,
                duration=row.event_duration,
                note=row.event_note,
                detailed_description=row.event_detailed_description,
                hero_image_url=row.hero_image_url,
                organizer_followers=row.organizer_followers,
                organizer_events_count=row.organizer_events_count,
                organizer_years_active=row.organizer_years_active,
            ),
            **self._author_fields(row),
        )
