import shutil
import tempfile
import threading
import time
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

from sqlalchemy import update

from directory.cache_store import DirectoryStore, state_table
from directory.models import Chamber, DirectoryEntry, Party
from directory.sync_cache import DirectorySyncCache
from utils.errors import CacheWriteFailure, DecodeFailure, RemoteSourceFailure

START = datetime(2024, 4, 1, 8, 0, tzinfo=timezone.utc)


def _entry(index: int, **overrides) -> DirectoryEntry:
    values = dict(
        external_id=f"M{index:06d}",
        first_name=f"First{index}",
        last_name=f"Last{index:02d}",
        chamber=Chamber.HOUSE,
        state="OH",
        district=str(index + 1),
        party=Party.DEMOCRAT if index % 2 else Party.REPUBLICAN,
    )
    values.update(overrides)
    return DirectoryEntry(**values)


class _FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class _FakeSource:
    name = "fake"

    def __init__(self, entries):
        self.entries = list(entries)
        self.fetch_all_calls = 0
        self.error = None
        self.gate = None

    def fetch_all(self):
        self.fetch_all_calls += 1
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return list(self.entries)

    def fetch_one(self, external_id):
        return next((e for e in self.entries if e.external_id == external_id), None)

    def fetch_by_filter(self, predicate):
        return [e for e in self.entries if predicate(e)]


class DirectorySyncCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.mkdtemp(prefix="civicfeed-directory-")
        self.store = DirectoryStore(str(Path(self.tmpdir) / "cache.db"))
        self.clock = _FakeClock(START)
        self.source = _FakeSource([_entry(i) for i in range(3)])
        self.cache = DirectorySyncCache(self.source, self.store, timedelta(hours=24), clock=self.clock)

    def tearDown(self) -> None:
        self.store.dispose()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_staleness_lifecycle(self):
        self.assertTrue(self.cache.is_stale())
        self.assertEqual(self.cache.get_all(), [])

        self.cache.sync()
        self.assertFalse(self.cache.is_stale())
        self.assertEqual(len(self.cache.get_all()), 3)

        self.clock.advance(timedelta(hours=24))
        self.assertFalse(self.cache.is_stale())
        self.clock.advance(timedelta(seconds=1))
        self.assertTrue(self.cache.is_stale())
        self.assertEqual(len(self.cache.get_all()), 3)

    def test_get_all_fresh_resyncs_a_day_old_cache_once(self):
        self.source.entries = [_entry(i) for i in range(10)]
        self.cache.sync()
        self.assertEqual(len(self.cache.get_all()), 10)

        self.clock.advance(timedelta(hours=25))
        self.source.entries = [_entry(i) for i in range(7)]
        calls_before = self.source.fetch_all_calls

        fresh = self.cache.get_all_fresh()

        self.assertEqual(self.source.fetch_all_calls - calls_before, 1)
        self.assertEqual(len(fresh), 7)
        self.assertEqual(self.cache.snapshot()["last_sync_at"], self.clock.now.isoformat())

    def test_get_all_fresh_serves_fresh_cache_without_network(self):
        self.cache.sync()
        self.clock.advance(timedelta(hours=1))
        self.cache.get_all_fresh()
        self.assertEqual(self.source.fetch_all_calls, 1)

    def test_entries_without_sync_stamp_count_as_empty(self):
        self.cache.sync()
        with self.store.engine.begin() as conn:
            conn.execute(update(state_table).values(last_sync_at=None))
        self.assertTrue(self.cache.is_stale())
        self.assertEqual(self.cache.get_all(), [])
        self.assertIsNone(self.cache.get("M000000"))

    def test_version_mismatch_counts_as_unsynced(self):
        self.cache.sync()
        with self.store.engine.begin() as conn:
            conn.execute(update(state_table).values(version="0.9"))
        self.assertTrue(self.cache.is_stale())
        self.assertEqual(self.cache.get_all(), [])

    def test_remote_failure_keeps_previous_cache(self):
        self.cache.sync()
        stamped = self.cache.snapshot()["last_sync_at"]
        self.clock.advance(timedelta(hours=30))
        for error in (RemoteSourceFailure("HTTP 503", status_code=503), DecodeFailure("bad payload")):
            with self.subTest(error=type(error).__name__):
                self.source.error = error
                with self.assertRaises(type(error)):
                    self.cache.get_all_fresh()
                self.assertEqual(len(self.cache.get_all()), 3)
                self.assertEqual(self.cache.snapshot()["last_sync_at"], stamped)

    def test_failed_replace_is_all_or_nothing(self):
        self.cache.sync()
        self.source.entries = [_entry(10), _entry(11), _entry(10, first_name="Dup")]
        self.clock.advance(timedelta(hours=2))

        with self.assertRaises(CacheWriteFailure):
            self.cache.sync()

        ids = [entry.external_id for entry in self.cache.get_all()]
        self.assertEqual(ids, ["M000000", "M000001", "M000002"])
        self.assertEqual(self.store.load_state().last_sync_at, START)

    def test_full_replace_drops_removed_entries(self):
        self.cache.sync()
        self.source.entries = [_entry(1, party=Party.INDEPENDENT), _entry(5)]
        self.cache.sync()
        self.assertIsNone(self.cache.get("M000000"))
        self.assertIs(self.cache.get("M000001").party, Party.INDEPENDENT)
        self.assertEqual(self.store.count(), 2)

    def test_concurrent_syncs_share_one_fetch(self):
        self.source.gate = threading.Event()
        results = []
        threads = [threading.Thread(target=lambda: results.append(self.cache.sync())) for _ in range(4)]
        for thread in threads:
            thread.start()
        time.sleep(0.2)
        self.source.gate.set()
        for thread in threads:
            thread.join(5)

        self.assertEqual(self.source.fetch_all_calls, 1)
        self.assertEqual(len(results), 4)
        self.assertTrue(all(len(result) == 3 for result in results))

    def test_get_or_fetch_does_not_write(self):
        self.assertIsNone(self.cache.get("M000001"))
        fetched = self.cache.get_or_fetch("M000001")
        self.assertEqual(fetched.external_id, "M000001")
        self.assertEqual(self.store.count(), 0)
        self.assertTrue(self.cache.is_stale())

    def test_search_and_clear(self):
        self.source.entries = [
            _entry(0, first_name="Sarah", last_name="Chen", state="CA"),
            _entry(1, first_name="Robert", last_name="Garcia", state="TX", chamber=Chamber.SENATE, district=None),
        ]
        self.cache.sync()
        self.assertEqual([e.last_name for e in self.cache.search("chen")], ["Chen"])
        self.assertEqual([e.last_name for e in self.cache.search("tx")], ["Garcia"])
        self.assertEqual([e.last_name for e in self.cache.search("senate")], ["Garcia"])
        self.assertEqual(len(self.cache.search("")), 2)

        self.cache.clear()
        self.assertEqual(self.cache.get_all(), [])
        self.assertTrue(self.cache.is_stale())

    def test_external_id_is_immutable(self):
        entry = _entry(0)
        entry.first_name = "Changed"
        with self.assertRaises(AttributeError):
            entry.external_id = "OTHER"

    def test_clock_is_only_read_after_a_successful_fetch(self):
        self.source.error = RemoteSourceFailure("down")
        with patch.object(self.cache, "clock", side_effect=AssertionError("clock read")):
            with self.assertRaises(RemoteSourceFailure):
                self.cache.sync()


    def test_staleness_read_racing_a_finished_sync_does_not_refetch(self):
        self.cache.sync()
        self.clock.advance(timedelta(hours=25))
        real_read = self.cache._read
        calls = []

        def read_then_let_other_caller_sync():
            result = real_read()
            if not calls:
                calls.append("stale")
                # the other caller refreshes between our read and our sync
                self.cache.get_all_fresh()
            return result

        with patch.object(self.cache, "_read", side_effect=read_then_let_other_caller_sync):
            entries = self.cache.get_all_fresh()

        self.assertEqual(self.source.fetch_all_calls, 2)
        self.assertEqual(len(entries), 3)
        self.assertFalse(self.cache.is_stale())

    def test_naive_clock_values_are_treated_as_utc(self):
        self.cache.clock = lambda: START.replace(tzinfo=None)
        self.cache.sync()
        self.assertEqual(self.store.load_state().last_sync_at, START)
        self.assertFalse(self.cache.is_stale())
        self.cache.clock = lambda: (START + timedelta(hours=25)).replace(tzinfo=None)
        self.assertTrue(self.cache.is_stale())

if __name__ == "__main__":
    unittest.main()
