"""Utility functions and classes for the civic-feed service."""
from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, Tuple


class SmartCache:
    """Simple thread-safe TTL cache for aggregate queries (legislator stats)."""

    def __init__(self, ttl_seconds: int = 60):
        self.ttl = ttl_seconds
        self._store: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Any:
        with self._lock:
            item = self._store.get(key)
            if not item:
                return None
            ts, value = item
            if time.monotonic() - ts > self.ttl:
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._store[key] = (time.monotonic(), value)


def get_current_timestamp() -> str:
    """Get current UTC timestamp in ISO format.

    Returns:
        ISO formatted timestamp string.
    """
    return datetime.now(timezone.utc).isoformat()
