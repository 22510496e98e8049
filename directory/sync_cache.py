"""
Local legislator directory kept in step with one remote source.

Reads never touch the network. ``sync()`` fetches the complete remote
directory and swaps it into the local store in one transaction; concurrent
callers share a single in-flight sync.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from directory.cache_store import CACHE_VERSION, DirectoryStore
from directory.models import CacheState, DirectoryEntry
from directory.sources.base import DirectorySource
from storage.store import from_naive_utc

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = timedelta(hours=24)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DirectorySyncCache:
    def __init__(
        self,
        source: DirectorySource,
        store: DirectoryStore,
        refresh_interval: timedelta = DEFAULT_REFRESH_INTERVAL,
        clock: Optional[Clock] = None,
    ) -> None:
        if refresh_interval <= timedelta(0):
            raise ValueError("refresh_interval must be positive")
        self.source = source
        self.store = store
        self.refresh_interval = refresh_interval
        self.clock = clock or _utc_now
        self._store_lock = threading.Lock()
        self._sync_lock = threading.Lock()
        self._inflight: Optional[Future] = None

    def get_all(self) -> List[DirectoryEntry]:
        _, entries = self._read()
        return entries

    def get(self, external_id: str) -> Optional[DirectoryEntry]:
        with self._store_lock:
            if not self._populated(self.store.load_state()):
                return None
            return self.store.load_entry(external_id)

    def is_stale(self) -> bool:
        with self._store_lock:
            state = self.store.load_state()
        return self._is_stale(state)

    def get_all_fresh(self) -> List[DirectoryEntry]:
        state, entries = self._read()
        if not self._is_stale(state) and entries:
            return entries
        logger.info("Directory cache stale or empty (last sync %s); syncing", state.last_sync_at)
        return self._sync(recheck=True)

    def sync(self) -> List[DirectoryEntry]:
        """
        Fetch everything from the source and replace the local entry set.

        A failure (RemoteSourceFailure, DecodeFailure, CacheWriteFailure) leaves
        the previous entries and ``last_sync_at`` untouched and is raised to
        every caller sharing this sync.
        """
        return self._sync(recheck=False)

    def _sync(self, recheck: bool) -> List[DirectoryEntry]:
        with self._sync_lock:
            inflight = self._inflight
            if inflight is None:
                if recheck:
                    # another caller may have finished a sync since our staleness read
                    state, entries = self._read()
                    if not self._is_stale(state) and entries:
                        return entries
                future: Future = Future()
                self._inflight = future
        if inflight is not None:
            logger.debug("Joining in-flight directory sync")
            return inflight.result()

        try:
            entries = self.source.fetch_all()
            synced_at = self._now()
            with self._store_lock:
                self.store.replace_all(entries, synced_at)
                result = self.store.load_entries()
        except Exception as exc:
            logger.warning("Directory sync from %s failed; keeping previous cache: %s", self.source.name, exc)
            with self._sync_lock:
                self._inflight = None
            future.set_exception(exc)
            raise
        logger.info("Directory synced from %s: %s entries at %s", self.source.name, len(result), synced_at.isoformat())
        with self._sync_lock:
            self._inflight = None
        future.set_result(result)
        return result

    def search(self, query: Optional[str]) -> List[DirectoryEntry]:
        entries = self.get_all()
        needle = (query or "").strip().casefold()
        if not needle:
            return entries
        return [
            entry
            for entry in entries
            if needle in entry.full_name.casefold()
            or needle == entry.state.casefold()
            or needle in entry.party.value.casefold()
            or needle == entry.chamber.value
        ]

    def get_or_fetch(self, external_id: str) -> Optional[DirectoryEntry]:
        """Cache hit, else a direct source lookup. The result is not written back."""
        cached = self.get(external_id)
        if cached is not None:
            return cached
        return self.source.fetch_one(external_id)

    def clear(self) -> None:
        with self._store_lock:
            self.store.clear()
        logger.info("Directory cache cleared")

    def snapshot(self) -> Dict[str, Any]:
        state, entries = self._read()
        return {
            "source": self.source.name,
            "entries": len(entries),
            "last_sync_at": state.last_sync_at.isoformat() if state.last_sync_at else None,
            "version": state.version,
            "stale": self._is_stale(state),
            "refresh_interval_seconds": int(self.refresh_interval.total_seconds()),
        }

    def _read(self) -> Tuple[CacheState, List[DirectoryEntry]]:
        with self._store_lock:
            state = self.store.load_state()
            if not self._populated(state):
                return state, []
            return state, self.store.load_entries()

    @staticmethod
    def _populated(state: CacheState) -> bool:
        return state.last_sync_at is not None and state.version == CACHE_VERSION

    def _is_stale(self, state: CacheState) -> bool:
        if not self._populated(state):
            return True
        return self._now() - state.last_sync_at > self.refresh_interval

    def _now(self) -> datetime:
        return from_naive_utc(self.clock())
