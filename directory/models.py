"""
Legislator directory records and the cache bookkeeping record.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Chamber(str, Enum):
    HOUSE = "house"
    SENATE = "senate"


class Party(str, Enum):
    DEMOCRAT = "Democrat"
    REPUBLICAN = "Republican"
    INDEPENDENT = "Independent"
    GREEN = "Green"
    LIBERTARIAN = "Libertarian"


@dataclass
class DirectoryEntry:
    """
    A legislator as held by the directory cache. ``external_id`` (the bioguide id)
    is the identity; everything else may change between syncs.
    """

    external_id: str
    first_name: str
    last_name: str
    chamber: Chamber
    state: str
    party: Party
    district: Optional[str] = None
    years_in_office: int = 0
    phone_number: Optional[str] = None
    website_url: Optional[str] = None
    office_address: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = None
    linked_user_id: Optional[str] = None

    def __setattr__(self, name: str, value: object) -> None:
        if name == "external_id" and "external_id" in self.__dict__:
            raise AttributeError("external_id is immutable")
        super().__setattr__(name, value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self) -> str:
        title = "Sen." if self.chamber is Chamber.SENATE else "Rep."
        return f"{title} {self.full_name}"

    @property
    def seat_label(self) -> str:
        """``CA`` for senators, ``CA-11`` or ``CA At-Large`` for representatives."""
        if self.chamber is Chamber.SENATE:
            return self.state
        if self.district and self.district != "0":
            return f"{self.state}-{self.district}"
        return f"{self.state} At-Large"


@dataclass
class CacheState:
    last_sync_at: Optional[datetime] = None
    version: str = "1.0"


@dataclass
class DirectoryFilter:
    """Callable predicate over directory entries; unset fields match everything."""

    state: Optional[str] = None
    chamber: Optional[Chamber] = None
    party: Optional[Party] = None
    search: Optional[str] = None

    def __call__(self, entry: DirectoryEntry) -> bool:
        if self.state and entry.state.upper() != self.state.upper():
            return False
        if self.chamber and entry.chamber is not self.chamber:
            return False
        if self.party and entry.party is not self.party:
            return False
        if self.search:
            needle = self.search.lower()
            haystacks = (entry.first_name, entry.last_name, entry.full_name)
            if not any(needle in value.lower() for value in haystacks):
                return False
        return True

    @property
    def state_only(self) -> bool:
        return bool(self.state) and self.chamber is None and self.party is None and not self.search
