import shutil
import tempfile
import unittest
from pathlib import Path

from directory.listing import DirectoryListing
from directory.models import Chamber, DirectoryEntry, DirectoryFilter, Party
from directory.serialization import entry_to_row
from storage.store import ContentStore


def _row(external_id, first, last, chamber, state, district=None, party=Party.DEMOCRAT):
    entry = DirectoryEntry(external_id, first, last, chamber, state, party, district=district)
    return entry_to_row(entry, id_column="bioguide_id", user_column="user_id")


class DirectoryListingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.mkdtemp(prefix="civicfeed-listing-")
        self.store = ContentStore(f"sqlite:///{Path(self.tmpdir) / 'server.db'}")
        self.store.upsert_legislators([
            _row("H2", "Ann", "Baker", Chamber.HOUSE, "OH", "2"),
            _row("H11", "Carl", "Adams", Chamber.HOUSE, "OH", "11", Party.REPUBLICAN),
            _row("S1", "Dana", "Young", Chamber.SENATE, "OH", party=Party.REPUBLICAN),
            _row("S2", "Eli", "Adams", Chamber.SENATE, "PA"),
        ])
        self.listing = DirectoryListing(self.store)

    def tearDown(self) -> None:
        self.store.dispose()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_listing_orders_by_last_then_first_name(self):
        page = self.listing.list(DirectoryFilter(), limit=3, offset=0)
        self.assertEqual([e.external_id for e in page.legislators], ["H11", "S2", "H2"])
        self.assertEqual(page.total, 4)
        self.assertTrue(page.has_more)

        last = self.listing.list(DirectoryFilter(), limit=3, offset=3)
        self.assertEqual([e.external_id for e in last.legislators], ["S1"])
        self.assertFalse(last.has_more)

    def test_filters_combine(self):
        page = self.listing.list(DirectoryFilter(state="oh", party=Party.REPUBLICAN), limit=10, offset=0)
        self.assertEqual(sorted(e.external_id for e in page.legislators), ["H11", "S1"])
        page = self.listing.list(DirectoryFilter(search="eli ad"), limit=10, offset=0)
        self.assertEqual([e.external_id for e in page.legislators], ["S2"])

    def test_name_search_folds_accented_letters(self):
        self.store.upsert_legislators([_row("H3", "Zoë", "Ólafsson", Chamber.HOUSE, "MN", "3")])
        page = self.listing.list(DirectoryFilter(search="ÓLAF"), limit=10, offset=0)
        self.assertEqual([e.external_id for e in page.legislators], ["H3"])
        page = self.listing.list(DirectoryFilter(search="zoë ólafsson"), limit=10, offset=0)
        self.assertEqual([e.external_id for e in page.legislators], ["H3"])

    def test_state_listing_puts_senators_first_then_numeric_district(self):
        entries = self.listing.find_by_state("oh")
        self.assertEqual([e.external_id for e in entries], ["S1", "H2", "H11"])

    def test_upsert_updates_existing_rows(self):
        self.store.upsert_legislators([_row("H2", "Ann", "Baker-Lee", Chamber.HOUSE, "OH", "2")])
        self.assertEqual(self.listing.find_one("H2").last_name, "Baker-Lee")
        self.assertIsNone(self.listing.find_one("nope"))
        self.assertEqual(self.listing.stats()["total"], 4)


if __name__ == "__main__":
    unittest.main()
