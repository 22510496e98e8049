"""
Remote directory source protocol.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Protocol

from directory.models import DirectoryEntry

DirectoryPredicate = Callable[[DirectoryEntry], bool]


class DirectorySource(Protocol):
    name: str

    def fetch_all(self) -> List[DirectoryEntry]:
        ...

    def fetch_one(self, external_id: str) -> Optional[DirectoryEntry]:
        ...

    def fetch_by_filter(self, predicate: DirectoryPredicate) -> List[DirectoryEntry]:
        ...
