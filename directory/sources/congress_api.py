"""
Primary directory source backed by the Congress.gov v3 API.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from directory.mapper import map_member
from directory.models import DirectoryEntry, DirectoryFilter
from directory.sources.base import DirectoryPredicate
from utils.errors import DecodeFailure, RemoteSourceFailure
from utils.http_client import HttpClient
from utils.security import is_configured_key
from utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class CongressApiSource:
    """
    Pages through current members of one Congress. Requests are spaced by
    ``request_delay`` seconds through a shared RateLimiter.
    """

    name = "congress_api"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.congress.gov/v3",
        congress: int = 118,
        page_size: int = 250,
        request_delay: float = 0.1,
        http: Optional[HttpClient] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        if not is_configured_key(api_key):
            raise ValueError("CongressApiSource requires an API key (CONGRESS_API_KEY)")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.congress = congress
        self.page_size = page_size
        self.http = http or HttpClient(user_agent="CivicFeed-Directory/1.0")
        self.rate_limiter = RateLimiter()
        self.rate_limiter.configure(self.name, request_delay)
        self.today = today

    def fetch_all(self) -> List[DirectoryEntry]:
        return self._fetch_members(f"/member/congress/{self.congress}")

    def fetch_one(self, external_id: str) -> Optional[DirectoryEntry]:
        try:
            payload = self._get(f"/member/{external_id}", {})
        except RemoteSourceFailure as exc:
            if exc.status_code == 404:
                return None
            raise
        member = payload.get("member")
        if not isinstance(member, dict):
            raise DecodeFailure(f"member detail for {external_id} is missing the 'member' object")
        return map_member(member, today=self.today())

    def fetch_by_filter(self, predicate: DirectoryPredicate) -> List[DirectoryEntry]:
        if isinstance(predicate, DirectoryFilter) and predicate.state_only:
            entries = self._fetch_members(f"/member/congress/{self.congress}/{predicate.state.upper()}")
        else:
            entries = self.fetch_all()
        return [entry for entry in entries if predicate(entry)]

    def _fetch_members(self, endpoint: str) -> List[DirectoryEntry]:
        entries: List[DirectoryEntry] = []
        offset = 0
        today = self.today()
        while True:
            payload = self._get(endpoint, {"currentMember": "true", "limit": self.page_size, "offset": offset})
            members = payload.get("members")
            if not isinstance(members, list):
                raise DecodeFailure(f"{endpoint} response is missing the 'members' list")
            for member in members:
                if not isinstance(member, dict):
                    raise DecodeFailure(f"{endpoint} returned a non-object member")
                entry = map_member(member, today=today)
                if entry is not None:
                    entries.append(entry)
            pagination = payload.get("pagination") or {}
            if not members or not pagination.get("next") or len(members) < self.page_size:
                break
            offset += len(members)
        logger.info("Congress API returned %s usable members from %s", len(entries), endpoint)
        return entries

    def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        self.rate_limiter.wait(self.name)
        query = {"api_key": self.api_key, "format": "json", **params}
        payload = self.http.get_json(f"{self.base_url}{endpoint}", params=query)
        if not isinstance(payload, dict):
            raise DecodeFailure(f"{endpoint} returned {type(payload).__name__}, expected an object")
        return payload
