"""
Legislator directory: remote sources, the local sync cache and the
server-side listing queries.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Optional

from directory.cache_store import DirectoryStore
from directory.models import CacheState, Chamber, DirectoryEntry, DirectoryFilter, Party
from directory.settings import DirectorySettings, load_settings
from directory.sources import select_source
from directory.sync_cache import Clock, DirectorySyncCache


def build_directory_cache(settings: Optional[DirectorySettings] = None, clock: Optional[Clock] = None) -> DirectorySyncCache:
    resolved = settings or load_settings()
    return DirectorySyncCache(
        source=select_source(resolved),
        store=DirectoryStore(resolved.cache_path),
        refresh_interval=timedelta(seconds=resolved.refresh_interval_seconds),
        clock=clock,
    )


__all__ = [
    "CacheState",
    "Chamber",
    "DirectoryEntry",
    "DirectoryFilter",
    "DirectorySettings",
    "DirectoryStore",
    "DirectorySyncCache",
    "Party",
    "build_directory_cache",
    "load_settings",
]
