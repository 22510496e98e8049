"""
Wire encoding for feed pages (camelCase JSON, kind-specific fields flattened).
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from feed.models import ContentItem, EventPayload, FeedPage, PetitionPayload, PostPayload


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def item_to_dict(item: ContentItem) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": item.id,
        "kind": item.kind.value,
        "key": item.key,
        "title": item.title,
        "body": item.body,
        "authorId": item.author_id,
        "authorDisplayName": item.author_display_name,
        "authorAvatarUrl": item.author_avatar_url,
        "createdAt": _iso(item.created_at),
    }
    payload = item.payload
    if isinstance(payload, PostPayload):
        data.update(
            {
                "postType": payload.post_type,
                "tags": list(payload.tags),
                "attachmentUrls": list(payload.attachment_urls),
                "likeCount": payload.like_count,
                "commentCount": payload.comment_count,
                "shareCount": payload.share_count,
            }
        )
    elif isinstance(payload, EventPayload):
        data.update(
            {
                "eventDate": _iso(payload.event_date),
                "eventEndDate": _iso(payload.event_end_date),
                "eventLocation": payload.location,
                "eventAddress": payload.address,
                "eventType": payload.event_type,
                "eventFormat": payload.event_format,
                "eventDuration": payload.duration,
                "eventNote": payload.note,
                "eventDetailedDescription": payload.detailed_description,
                "heroImageUrl": payload.hero_image_url,
                "organizerFollowers": payload.organizer_followers,
                "organizerEventsCount": payload.organizer_events_count,
                "organizerYearsActive": payload.organizer_years_active,
            }
        )
    elif isinstance(payload, PetitionPayload):
        data.update(
            {
                "petitionSignatures": payload.signatures,
                "petitionTargetSignatures": payload.target_signatures,
                "petitionDeadline": _iso(payload.deadline),
                "petitionCategory": payload.category,
            }
        )
    return data


def page_to_dict(page: FeedPage) -> Dict[str, Any]:
    return {
        "items": [item_to_dict(item) for item in page.items],
        "total": page.total,
        "page": page.page,
        "limit": page.limit,
        "hasMore": page.has_more,
    }
