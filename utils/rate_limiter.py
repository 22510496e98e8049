"""
Spaces outbound requests per key (one key per remote directory source).
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Dict


class RateLimiter:
    """
    Each ``wait(key)`` reserves the next slot at least ``min_interval`` seconds
    after the previous one, then sleeps until that slot outside the lock.
    """

    def __init__(
        self,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._intervals: Dict[str, float] = {}
        self._next_slot: Dict[str, float] = {}
        self._lock = threading.Lock()
        self._monotonic = monotonic
        self._sleep = sleep

    def configure(self, key: str, min_interval: float) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        with self._lock:
            self._intervals[key] = min_interval

    def wait(self, key: str) -> float:
        """Block until ``key`` may be used again; returns the seconds slept."""
        with self._lock:
            interval = self._intervals.get(key, 0.0)
            now = self._monotonic()
            slot = max(now, self._next_slot.get(key, now))
            self._next_slot[key] = slot + interval
        delay = slot - now
        if delay > 0:
            self._sleep(delay)
        return delay
