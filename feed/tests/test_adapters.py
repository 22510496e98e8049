import shutil
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from feed.adapters import AdapterFactory, AdapterRegistry, EventSourceAdapter, PetitionSourceAdapter, PostSourceAdapter
from feed.adapters.base import UNKNOWN_AUTHOR
from feed.models import ContentKind, EventPayload, PetitionPayload, PostPayload
from storage.store import ContentStore
from utils.errors import AdapterFailure

T0 = datetime(2024, 5, 10, 9, 30, tzinfo=timezone.utc)


class AdapterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.mkdtemp(prefix="civicfeed-adapters-")
        self.store = ContentStore(f"sqlite:///{Path(self.tmpdir) / 'content.db'}")
        self.store.add_user("ada", "Ada Park", profile_image_url="https://example.org/ada.png", user_id="u1")

    def tearDown(self) -> None:
        self.store.dispose()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_post_mapping_resolves_author_and_payload(self):
        self.store.add_post("u1", "Vote on Tuesday", T0, post_id="p1", tags=["vote"],
                            attachment_urls=["https://example.org/a.jpg"], like_count=3, share_count=1)
        (item,) = PostSourceAdapter(self.store).fetch()
        self.assertEqual(item.kind, ContentKind.POST)
        self.assertEqual(item.key, "post:p1")
        self.assertEqual(item.body, "Vote on Tuesday")
        self.assertEqual(item.author_display_name, "Ada Park")
        self.assertEqual(item.author_avatar_url, "https://example.org/ada.png")
        self.assertEqual(item.created_at, T0)
        self.assertIsInstance(item.payload, PostPayload)
        self.assertEqual(item.payload.tags, ["vote"])
        self.assertEqual(item.payload.attachment_urls, ["https://example.org/a.jpg"])
        self.assertEqual(item.payload.like_count, 3)

    def test_missing_author_gets_placeholder_name(self):
        self.store.add_post("ghost", "Orphaned post", T0, post_id="p1")
        (item,) = PostSourceAdapter(self.store).fetch()
        self.assertEqual(item.author_id, "ghost")
        self.assertEqual(item.author_display_name, UNKNOWN_AUTHOR)
        self.assertIsNone(item.author_avatar_url)

    def test_event_search_covers_title_and_description(self):
        self.store.add_event("u1", "Library Night", "Reading with the mayor", T0, event_id="e1",
                             date=T0 + timedelta(days=2), location="Main Library", organizer_followers=120)
        self.store.add_event("u1", "Bike ride", "Meet at the park", T0, event_id="e2")
        adapter = EventSourceAdapter(self.store)

        self.assertEqual([i.id for i in adapter.fetch("MAYOR")], ["e1"])
        self.assertEqual([i.id for i in adapter.fetch("bike")], ["e2"])
        self.assertEqual(adapter.count("library"), 1)
        (item,) = adapter.fetch("library")
        self.assertIsInstance(item.payload, EventPayload)
        self.assertEqual(item.title, "Library Night")
        self.assertEqual(item.payload.event_date, T0 + timedelta(days=2))
        self.assertEqual(item.payload.location, "Main Library")
        self.assertEqual(item.payload.organizer_followers, 120)

    def test_petition_rows_stream_newest_first(self):
        self.store.add_petition("u1", "Older", "text", T0, petition_id="t1", current_signatures=10,
                                target_signatures=100, category="parks")
        self.store.add_petition("u1", "Newer", "text", T0 + timedelta(hours=1), petition_id="t2")
        adapter = PetitionSourceAdapter(self.store)
        streamed = list(adapter.stream())
        self.assertEqual([i.id for i in streamed], ["t2", "t1"])
        self.assertIsInstance(streamed[1].payload, PetitionPayload)
        self.assertEqual(streamed[1].payload.signatures, 10)
        self.assertEqual(streamed[1].payload.target_signatures, 100)
        self.assertEqual(streamed[1].payload.category, "parks")

    def test_storage_errors_become_adapter_failure(self):
        adapter = PostSourceAdapter(self.store)
        with patch.object(adapter, "_materialize", side_effect=OperationalError("SELECT", {}, Exception("locked"))):
            with self.assertRaises(AdapterFailure) as ctx:
                adapter.fetch()
        self.assertEqual(ctx.exception.kind, "post")

    def test_registry_rejects_duplicate_kind(self):
        registry = AdapterRegistry()
        registry.register(ContentKind.POST, AdapterFactory(PostSourceAdapter))
        with self.assertRaises(ValueError):
            registry.register(ContentKind.POST, AdapterFactory(PostSourceAdapter))
        (adapter,) = registry.build_all(self.store)
        self.assertEqual(adapter.name, "posts")


if __name__ == "__main__":
    unittest.main()
