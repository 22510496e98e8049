"""
Core data structures shared by the feed adapters, aggregator and client.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


class ContentKind(str, Enum):
    POST = "post"
    EVENT = "event"
    PETITION = "petition"


@dataclass
class PostPayload:
    post_type: str = "text"
    tags: List[str] = field(default_factory=list)
    attachment_urls: List[str] = field(default_factory=list)
    like_count: int = 0
    comment_count: int = 0
    share_count: int = 0


@dataclass
class EventPayload:
    event_date: Optional[datetime] = None
    event_end_date: Optional[datetime] = None
    location: Optional[str] = None
    address: Optional[str] = None
    event_type: Optional[str] = None
    event_format: Optional[str] = None
    duration: Optional[str] = None
    note: Optional[str] = None
    detailed_description: Optional[str] = None
    hero_image_url: Optional[str] = None
    organizer_followers: Optional[int] = None
    organizer_events_count: Optional[int] = None
    organizer_years_active: Optional[int] = None


@dataclass
class PetitionPayload:
    signatures: int = 0
    target_signatures: Optional[int] = None
    deadline: Optional[datetime] = None
    category: Optional[str] = None


ContentPayload = Union[PostPayload, EventPayload, PetitionPayload]

PAYLOAD_TYPES: Dict[ContentKind, type] = {
    ContentKind.POST: PostPayload,
    ContentKind.EVENT: EventPayload,
    ContentKind.PETITION: PetitionPayload,
}


@dataclass
class ContentItem:
    """
    Normalized feed entry. ``kind`` tags which payload type ``payload`` holds;
    sorting, paging and serialization only touch the envelope fields.
    """

    id: str
    kind: ContentKind
    created_at: datetime
    author_id: str
    author_display_name: str
    body: str
    payload: ContentPayload
    author_avatar_url: Optional[str] = None
    title: Optional[str] = None

    def __post_init__(self) -> None:
        expected = PAYLOAD_TYPES[self.kind]
        if not isinstance(self.payload, expected):
            raise TypeError(f"{self.kind.value} item requires {expected.__name__}, got {type(self.payload).__name__}")
        if self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=timezone.utc)

    @property
    def key(self) -> str:
        """Composite identifier, unique across kinds."""
        return f"{self.kind.value}:{self.id}"


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def feed_sort_key(item: ContentItem) -> Tuple[int, str, str]:
    """
    Ascending key for the feed order: newest first, ties by kind then id.

    Timestamps become integer microseconds so the key is exact.
    """
    micros = (item.created_at - _EPOCH) // timedelta(microseconds=1)
    return (-micros, item.kind.value, item.id)


def feed_order(items: List[ContentItem]) -> List[ContentItem]:
    return sorted(items, key=feed_sort_key)


@dataclass
class FeedPage:
    items: List[ContentItem]
    total: int
    page: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total


@dataclass
class HealthStatus:
    name: str
    healthy: bool
    last_error: Optional[str] = None
    last_success: Optional[datetime] = None
    items_last_fetch: int = 0
    latency_ms: Optional[float] = None
