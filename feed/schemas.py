"""
Pydantic models for the feed wire format: query validation on the server and
payload decoding on the client.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from feed.models import ContentItem, ContentKind, EventPayload, FeedPage, PetitionPayload, PostPayload
from utils.errors import DecodeFailure


class FeedQueryParams(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)
    search: Optional[str] = None

    @field_validator("search", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class FeedItemSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    kind: ContentKind
    title: Optional[str] = None
    body: str
    author_id: str = Field(alias="authorId")
    author_display_name: str = Field(alias="authorDisplayName")
    author_avatar_url: Optional[str] = Field(default=None, alias="authorAvatarUrl")
    created_at: datetime = Field(alias="createdAt")

    post_type: Optional[str] = Field(default=None, alias="postType")
    tags: List[str] = Field(default_factory=list)
    attachment_urls: List[str] = Field(default_factory=list, alias="attachmentUrls")
    like_count: int = Field(default=0, alias="likeCount")
    comment_count: int = Field(default=0, alias="commentCount")
    share_count: int = Field(default=0, alias="shareCount")

    event_date: Optional[datetime] = Field(default=None, alias="eventDate")
    event_end_date: Optional[datetime] = Field(default=None, alias="eventEndDate")
    event_location: Optional[str] = Field(default=None, alias="eventLocation")
    event_address: Optional[str] = Field(default=None, alias="eventAddress")
    event_type: Optional[str] = Field(default=None, alias="eventType")
    event_format: Optional[str] = Field(default=None, alias="eventFormat")
    event_duration: Optional[str] = Field(default=None, alias="eventDuration")
    event_note: Optional[str] = Field(default=None, alias="eventNote")
    event_detailed_description: Optional[str] = Field(default=None, alias="eventDetailedDescription")
    hero_image_url: Optional[str] = Field(default=None, alias="heroImageUrl")
    organizer_followers: Optional[int] = Field(default=None, alias="organizerFollowers")
    organizer_events_count: Optional[int] = Field(default=None, alias="organizerEventsCount")
    organizer_years_active: Optional[int] = Field(default=None, alias="organizerYearsActive")

    petition_signatures: int = Field(default=0, alias="petitionSignatures")
    petition_target_signatures: Optional[int] = Field(default=None, alias="petitionTargetSignatures")
    petition_deadline: Optional[datetime] = Field(default=None, alias="petitionDeadline")
    petition_category: Optional[str] = Field(default=None, alias="petitionCategory")

    def to_item(self) -> ContentItem:
        if self.kind is ContentKind.POST:
            payload = PostPayload(
                post_type=self.post_type or "text",
                tags=self.tags,
                attachment_urls=self.attachment_urls,
                like_count=self.like_count,
                comment_count=self.comment_count,
                share_count=self.share_count,
            )
        elif self.kind is ContentKind.EVENT:
            payload = EventPayload(
                event_date=self.event_date,
                event_end_date=self.event_end_date,
                location=self.event_location,
                address=self.event_address,
                event_type=self.event_type,
                event_format=self.event_format,
                duration=self.event_duration,
                note=self.event_note,
                detailed_description=self.event_detailed_description,
                hero_image_url=self.hero_image_url,
                organizer_followers=self.organizer_followers,
                organizer_events_count=self.organizer_events_count,
                organizer_years_active=self.organizer_years_active,
            )
        else:
            payload = PetitionPayload(
                signatures=self.petition_signatures,
                target_signatures=self.petition_target_signatures,
                deadline=self.petition_deadline,
                category=self.petition_category,
            )
        return ContentItem(
            id=self.id,
            kind=self.kind,
            created_at=self.created_at,
            author_id=self.author_id,
            author_display_name=self.author_display_name,
            author_avatar_url=self.author_avatar_url,
            title=self.title,
            body=self.body,
            payload=payload,
        )


class FeedPageSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    items: List[FeedItemSchema]
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    has_more: bool = Field(alias="hasMore")

    @model_validator(mode="after")
    def _consistent_paging(self) -> "FeedPageSchema":
        if len(self.items) > self.limit:
            raise ValueError("page holds more items than its limit")
        if self.has_more != (self.page * self.limit < self.total):
            raise ValueError("hasMore disagrees with page, limit and total")
        return self


def decode_feed_page(payload: Dict[str, Any]) -> FeedPage:
    """Decode a ``/api/feed`` response body; any shape mismatch raises DecodeFailure."""
    if not isinstance(payload, dict):
        raise DecodeFailure(f"feed payload must be an object, got {type(payload).__name__}")
    try:
        schema = FeedPageSchema.model_validate(payload)
    except ValidationError as exc:
        raise DecodeFailure(f"feed payload did not match the expected shape: {exc.error_count()} error(s)") from exc
    return FeedPage(
        items=[item.to_item() for item in schema.items],
        total=schema.total,
        page=schema.page,
        limit=schema.limit,
    )
