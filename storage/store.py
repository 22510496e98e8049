"""
SQLite/SQLAlchemy storage for users, posts, events, petitions and legislators.
"""
from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import (
    Column,
    ColumnElement,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    func,
    insert,
)
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine, make_url

metadata = MetaData()

users_table = Table(
    "users",
    metadata,
    Column("id", String, primary_key=True),
    Column("username", String, nullable=False, unique=True),
    Column("display_name", String, nullable=False),
    Column("profile_image_url", String, nullable=True),
)

posts_table = Table(
    "posts",
    metadata,
    Column("id", String, primary_key=True),
    Column("author_id", String, ForeignKey("users.id"), nullable=False, index=True),
    Column("content", Text, nullable=False),
    Column("post_type", String, nullable=False, default="text"),
    Column("tags", Text, nullable=True),
    Column("attachment_urls", Text, nullable=True),
    Column("like_count", Integer, nullable=False, default=0),
    Column("comment_count", Integer, nullable=False, default=0),
    Column("share_count", Integer, nullable=False, default=0),
    Column("created_at", DateTime, nullable=False, index=True),
)

events_table = Table(
    "events",
    metadata,
    Column("id", String, primary_key=True),
    Column("creator_user_id", String, ForeignKey("users.id"), nullable=False, index=True),
    Column("title", String, nullable=False),
    Column("event_description", Text, nullable=False),
    Column("event_type", String, nullable=True),
    Column("date", DateTime, nullable=True),
    Column("event_end_date", DateTime, nullable=True),
    Column("location", String, nullable=True),
    Column("event_address", String, nullable=True),
    Column("event_duration", String, nullable=True),
    Column("event_format", String, nullable=True),
    Column("event_note", Text, nullable=True),
    Column("event_detailed_description", Text, nullable=True),
    Column("hero_image_url", String, nullable=True),
    Column("organizer_followers", Integer, nullable=True),
    Column("organizer_events_count", Integer, nullable=True),
    Column("organizer_years_active", Integer, nullable=True),
    Column("created_at", DateTime, nullable=False, index=True),
)

petitions_table = Table(
    "petitions",
    metadata,
    Column("id", String, primary_key=True),
    Column("creator_id", String, ForeignKey("users.id"), nullable=False, index=True),
    Column("title", String, nullable=False),
    Column("description", Text, nullable=False),
    Column("category", String, nullable=True),
    Column("current_signatures", Integer, nullable=False, default=0),
    Column("target_signatures", Integer, nullable=True),
    Column("deadline", DateTime, nullable=True),
    Column("created_at", DateTime, nullable=False, index=True),
)

legislators_table = Table(
    "legislators",
    metadata,
    Column("bioguide_id", String, primary_key=True),
    Column("first_name", String, nullable=False),
    Column("last_name", String, nullable=False),
    Column("chamber", String, nullable=False, index=True),
    Column("state", String(2), nullable=False, index=True),
    Column("district", String, nullable=True),
    Column("party", String, nullable=False, index=True),
    Column("years_in_office", Integer, nullable=False, default=0),
    Column("phone_number", String, nullable=True),
    Column("website_url", String, nullable=True),
    Column("office_address", String, nullable=True),
    Column("photo_url", String, nullable=True),
    Column("bio", Text, nullable=True),
    Column("user_id", String, nullable=True),
)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite DateTime columns hold naive UTC values."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def register_casefold(engine: Engine) -> None:
    """
    SQLite's lower() only folds ASCII; expose Python's casefold() to SQL so
    searches match "Élection" with "élection".
    """
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _record) -> None:
        dbapi_conn.create_function("casefold", 1, _casefold, deterministic=True)


def casefold_contains(column: ColumnElement, term: str) -> ColumnElement[bool]:
    return func.casefold(column, type_=String).contains(term.casefold(), autoescape=True)


def _new_id() -> str:
    return str(uuid.uuid4())


class ContentStore:
    def __init__(self, database_url: str = "sqlite:///civicfeed.db") -> None:
        url = make_url(database_url)
        if url.drivername.startswith("sqlite") and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        self.engine: Engine = create_engine(database_url, future=True)
        register_casefold(self.engine)
        metadata.create_all(self.engine)

    def add_user(
        self,
        username: str,
        display_name: str,
        profile_image_url: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> str:
        user_id = user_id or _new_id()
        with self.engine.begin() as conn:
            conn.execute(
                insert(users_table).values(
                    id=user_id,
                    username=username,
                    display_name=display_name,
                    profile_image_url=profile_image_url,
                )
            )
        return user_id

    def add_post(
        self,
        author_id: str,
        content: str,
        created_at: datetime,
        post_id: Optional[str] = None,
        post_type: str = "text",
        tags: Iterable[str] = (),
        attachment_urls: Iterable[str] = (),
        like_count: int = 0,
        comment_count: int = 0,
        share_count: int = 0,
    ) -> str:
        post_id = post_id or _new_id()
        with self.engine.begin() as conn:
            conn.execute(
                insert(posts_table).values(
                    id=post_id,
                    author_id=author_id,
                    content=content,
                    post_type=post_type,
                    tags=json.dumps(list(tags)),
                    attachment_urls=json.dumps(list(attachment_urls)),
                    like_count=like_count,
                    comment_count=comment_count,
                    share_count=share_count,
                    created_at=to_naive_utc(created_at),
                )
            )
        return post_id

    def add_event(
        self,
        creator_user_id: str,
        title: str,
        description: str,
        created_at: datetime,
        event_id: Optional[str] = None,
        **details: Any,
    ) -> str:
        event_id = event_id or _new_id()
        values: Dict[str, Any] = {
            "id": event_id,
            "creator_user_id": creator_user_id,
            "title": title,
            "event_description": description,
            "created_at": to_naive_utc(created_at),
        }
        for key, value in details.items():
            if key not in events_table.c:
                raise ValueError(f"Unknown event column '{key}'")
            values[key] = to_naive_utc(value) if isinstance(value, datetime) else value
        with self.engine.begin() as conn:
            conn.execute(insert(events_table).values(**values))
        return event_id

    def add_petition(
        self,
        creator_id: str,
        title: str,
        description: str,
        created_at: datetime,
        petition_id: Optional[str] = None,
        category: Optional[str] = None,
        current_signatures: int = 0,
        target_signatures: Optional[int] = None,
        deadline: Optional[datetime] = None,
    ) -> str:
        petition_id = petition_id or _new_id()
        with self.engine.begin() as conn:
            conn.execute(
                insert(petitions_table).values(
                    id=petition_id,
                    creator_id=creator_id,
                    title=title,
                    description=description,
                    category=category,
                    current_signatures=current_signatures,
                    target_signatures=target_signatures,
                    deadline=to_naive_utc(deadline),
                    created_at=to_naive_utc(created_at),
                )
            )
        return petition_id

    def upsert_legislators(self, rows: Iterable[Dict[str, Any]]) -> int:
        count = 0
        with self.engine.begin() as conn:
            for row in rows:
                stmt = sqlite_insert(legislators_table).values(**row)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["bioguide_id"],
                    set_={key: stmt.excluded[key] for key in row if key != "bioguide_id"},
                )
                conn.execute(stmt)
                count += 1
        return count

    def dispose(self) -> None:
        self.engine.dispose()
