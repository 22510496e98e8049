"""
Offline directory source reading a YAML fixture file.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import yaml

from directory.models import DirectoryEntry
from directory.schemas import decode_entries
from directory.sources.base import DirectoryPredicate
from utils.errors import DecodeFailure, RemoteSourceFailure

logger = logging.getLogger(__name__)


class FixtureSource:
    name = "fixture"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def fetch_all(self) -> List[DirectoryEntry]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise RemoteSourceFailure(f"fixture {self.path} unreadable: {exc}") from exc
        try:
            data = yaml.safe_load(raw) or {}
        except yaml.YAMLError as exc:
            raise DecodeFailure(f"fixture {self.path} is not valid YAML") from exc
        if not isinstance(data, dict):
            raise DecodeFailure(f"fixture {self.path} must be a mapping with a 'legislators' list")
        entries = decode_entries(data.get("legislators", []))
        logger.debug("Loaded %s fixture legislators from %s", len(entries), self.path)
        return entries

    def fetch_one(self, external_id: str) -> Optional[DirectoryEntry]:
        for entry in self.fetch_all():
            if entry.external_id == external_id:
                return entry
        return None

    def fetch_by_filter(self, predicate: DirectoryPredicate) -> List[DirectoryEntry]:
        return [entry for entry in self.fetch_all() if predicate(entry)]
