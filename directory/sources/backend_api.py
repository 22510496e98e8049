"""
Directory source backed by this service's own ``/api/legislators`` endpoints.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from directory.models import DirectoryEntry, DirectoryFilter
from directory.schemas import decode_entries, decode_entry, decode_listing
from directory.sources.base import DirectoryPredicate
from utils.errors import RemoteSourceFailure
from utils.http_client import HttpClient

logger = logging.getLogger(__name__)


class BackendApiSource:
    name = "backend"

    def __init__(self, base_url: str, page_size: int = 100, http: Optional[HttpClient] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.http = http or HttpClient(user_agent="CivicFeed-Directory/1.0")

    def fetch_all(self) -> List[DirectoryEntry]:
        entries: List[DirectoryEntry] = []
        offset = 0
        while True:
            payload = self.http.get_json(
                f"{self.base_url}/api/legislators",
                params={"limit": self.page_size, "offset": offset},
            )
            listing = decode_listing(payload)
            entries.extend(item.to_entry() for item in listing.legislators)
            if not listing.has_more or not listing.legislators:
                break
            offset += len(listing.legislators)
        logger.info("Backend directory returned %s entries", len(entries))
        return entries

    def fetch_one(self, external_id: str) -> Optional[DirectoryEntry]:
        try:
            payload = self.http.get_json(f"{self.base_url}/api/legislators/{external_id}")
        except RemoteSourceFailure as exc:
            if exc.status_code == 404:
                return None
            raise
        return decode_entry(payload)

    def fetch_by_filter(self, predicate: DirectoryPredicate) -> List[DirectoryEntry]:
        if isinstance(predicate, DirectoryFilter) and predicate.state_only:
            payload = self.http.get_json(f"{self.base_url}/api/legislators/states/{predicate.state.upper()}")
            return decode_entries(payload)
        return [entry for entry in self.fetch_all() if predicate(entry)]
