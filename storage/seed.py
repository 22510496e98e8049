"""
Demo content for local development: a few users, posts, events, petitions
and the fixture legislators.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Optional

from directory.serialization import entry_to_row
from directory.settings import DEFAULT_FIXTURE_PATH
from directory.sources.fixture import FixtureSource
from storage.store import ContentStore

logger = logging.getLogger(__name__)

DEMO_USERS = [
    ("user-ada", "ada", "Ada Park", "https://example.org/avatars/ada.png"),
    ("user-ben", "ben", "Ben Ortiz", None),
    ("user-civ", "civicleague", "Civic League", "https://example.org/avatars/league.png"),
]


def seed_demo_content(
    store: ContentStore,
    now: Optional[datetime] = None,
    fixture_path: Path = DEFAULT_FIXTURE_PATH,
) -> Dict[str, int]:
    """Insert the demo rows; returns how many of each kind were written."""
    now = now or datetime.now(timezone.utc)
    for user_id, username, display_name, avatar in DEMO_USERS:
        store.add_user(username, display_name, profile_image_url=avatar, user_id=user_id)

    store.add_post("user-ada", "Town hall on the transit levy is Thursday. Bring questions!",
                   now - timedelta(hours=5), post_id="post-1", tags=["transit", "townhall"], like_count=12)
    store.add_post("user-ben", "Climate resilience plan draft is out for public comment.",
                   now - timedelta(hours=2), post_id="post-2", tags=["climate"], comment_count=4)
    store.add_post("user-civ", "Thanks to everyone who volunteered at the voter registration drive.",
                   now - timedelta(days=1), post_id="post-3", post_type="photo",
                   attachment_urls=["https://example.org/media/drive.jpg"], share_count=7)

    store.add_event("user-civ", "Voter Registration Drive", "Help neighbours register before the deadline.",
                    now - timedelta(hours=3), event_id="event-1",
                    date=now + timedelta(days=6), location="Main Library", event_address="100 Main St",
                    event_type="volunteer", event_format="in_person", event_duration="3 hours",
                    organizer_followers=1800, organizer_events_count=42, organizer_years_active=6)
    store.add_event("user-ada", "Budget Q&A with the council", "Online session on next year's budget.",
                    now - timedelta(days=2), event_id="event-2",
                    date=now + timedelta(days=3), event_format="virtual", event_type="town_hall")

    store.add_petition("user-ben", "Fund the Climate Action Office", "Restore full funding for climate staff.",
                       now - timedelta(hours=1), petition_id="petition-1", category="environment",
                       current_signatures=1320, target_signatures=5000, deadline=now + timedelta(days=30))
    store.add_petition("user-civ", "Extend early voting hours", "Polls should open at 7am during early voting.",
                       now - timedelta(days=3), petition_id="petition-2", category="elections",
                       current_signatures=880, target_signatures=1000)

    legislators = FixtureSource(fixture_path).fetch_all()
    store.upsert_legislators(
        entry_to_row(entry, id_column="bioguide_id", user_column="user_id") for entry in legislators
    )
    counts = {"users": len(DEMO_USERS), "posts": 3, "events": 2, "petitions": 2, "legislators": len(legislators)}
    logger.info("Seeded demo content: %s", counts)
    return counts
