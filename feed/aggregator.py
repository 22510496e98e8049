"""
Fan-out/merge orchestration turning the per-kind adapters into one paginated feed.
"""
from __future__ import annotations

import heapq
import logging
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from itertools import islice
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from feed.adapters.base import SourceAdapter
from feed.models import ContentItem, FeedPage, HealthStatus, feed_order, feed_sort_key
from feed.settings import MERGE_STRATEGIES, FeedSettings
from utils.errors import AdapterFailure, InvalidQuery

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FeedAggregator:
    """
    Stateless apart from the per-adapter health map; safe to call from many threads.
    """

    def __init__(self, adapters: Sequence[SourceAdapter], settings: Optional[FeedSettings] = None) -> None:
        if not adapters:
            raise ValueError("FeedAggregator requires at least one adapter")
        self.adapters = list(adapters)
        self.settings = settings or FeedSettings()
        if self.settings.merge_strategy not in MERGE_STRATEGIES:
            raise ValueError(f"Unknown merge strategy '{self.settings.merge_strategy}'")
        self._health: Dict[str, HealthStatus] = {}
        self._health_lock = threading.Lock()

    def aggregate(self, page: int, limit: int, search_term: Optional[str] = None) -> FeedPage:
        search = self._validate(page, limit, search_term)
        logger.info("Aggregating feed: page=%s limit=%s search=%r strategy=%s",
                    page, limit, search, self.settings.merge_strategy)
        if self.settings.merge_strategy == "merge":
            return self._aggregate_merged(page, limit, search)
        return self._aggregate_materialized(page, limit, search)

    def get_health(self) -> List[HealthStatus]:
        with self._health_lock:
            return list(self._health.values())

    def _validate(self, page: object, limit: object, search_term: object) -> Optional[str]:
        if not isinstance(page, int) or isinstance(page, bool) or page < 1:
            raise InvalidQuery(f"page must be an integer >= 1, got {page!r}")
        if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
            raise InvalidQuery(f"limit must be a positive integer, got {limit!r}")
        if limit > self.settings.max_limit:
            raise InvalidQuery(f"limit must be <= {self.settings.max_limit}, got {limit}")
        if search_term is None:
            return None
        if not isinstance(search_term, str):
            raise InvalidQuery(f"search must be a string, got {type(search_term).__name__}")
        if len(search_term) > self.settings.max_search_length:
            raise InvalidQuery(f"search must be at most {self.settings.max_search_length} characters")
        return search_term.strip() or None

    def _aggregate_materialized(self, page: int, limit: int, search: Optional[str]) -> FeedPage:
        results = self._fan_out(lambda adapter: adapter.fetch(search))
        combined: List[ContentItem] = []
        for items in results:
            combined.extend(items)
        ordered = feed_order(combined)
        offset = (page - 1) * limit
        return FeedPage(items=ordered[offset:offset + limit], total=len(ordered), page=page, limit=limit)

    def _aggregate_merged(self, page: int, limit: int, search: Optional[str]) -> FeedPage:
        """
        Bounded k-way merge: per-adapter counts give ``total``; only the rows up to
        the end of the requested page are pulled from each adapter's sorted stream.
        """
        counts = self._fan_out(lambda adapter: adapter.count(search))
        total = sum(counts)
        offset = (page - 1) * limit
        if offset >= total:
            return FeedPage(items=[], total=total, page=page, limit=limit)

        streams = [self._guarded_stream(adapter, search) for adapter in self.adapters]
        try:
            merged = heapq.merge(*streams, key=feed_sort_key)
            items = list(islice(merged, offset, offset + limit))
        finally:
            for stream in streams:
                stream.close()
        return FeedPage(items=items, total=total, page=page, limit=limit)

    def _guarded_stream(self, adapter: SourceAdapter, search: Optional[str]):
        try:
            yield from adapter.stream(search)
        except AdapterFailure:
            raise
        except Exception as exc:
            raise AdapterFailure(adapter.kind.value, str(exc), cause=exc) from exc

    def _fan_out(self, call: Callable[[SourceAdapter], T]) -> List[T]:
        """
        Run ``call`` for every adapter concurrently and join. The first failure
        cancels whatever has not started and is raised as AdapterFailure.
        """
        max_workers = max(1, min(self.settings.max_workers, len(self.adapters)))
        now = datetime.now(timezone.utc)
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="feed-adapter") as executor:
            future_map: Dict[Future, SourceAdapter] = {
                executor.submit(self._timed, adapter, call): adapter for adapter in self.adapters
            }
            done, pending = wait(future_map, return_when=FIRST_EXCEPTION)
            failure: Optional[Tuple[SourceAdapter, BaseException]] = None
            for future in done:
                exc = future.exception()
                if exc is not None and failure is None:
                    failure = (future_map[future], exc)
            if failure is not None:
                for future in pending:
                    future.cancel()
                adapter, exc = failure
                self._record(adapter, healthy=False, now=now, error=str(exc))
                logger.error("Adapter %s failed; aborting aggregation: %s", adapter.name, exc)
                if isinstance(exc, AdapterFailure):
                    raise exc
                raise AdapterFailure(adapter.kind.value, str(exc), cause=exc) from exc

            results: List[T] = []
            for adapter_future, adapter in future_map.items():
                value, latency_ms = adapter_future.result()
                size = value if isinstance(value, int) else len(value)  # type: ignore[arg-type]
                self._record(adapter, healthy=True, now=now, items=size, latency_ms=latency_ms)
                logger.debug("Adapter %s returned %s items in %.1fms", adapter.name, size, latency_ms)
                results.append(value)
            return results

    @staticmethod
    def _timed(adapter: SourceAdapter, call: Callable[[SourceAdapter], T]) -> Tuple[T, float]:
        start = time.perf_counter()
        value = call(adapter)
        return value, (time.perf_counter() - start) * 1000

    def _record(
        self,
        adapter: SourceAdapter,
        *,
        healthy: bool,
        now: datetime,
        items: int = 0,
        latency_ms: Optional[float] = None,
        error: Optional[str] = None,
    ) -> None:
        with self._health_lock:
            previous = self._health.get(adapter.name)
            self._health[adapter.name] = HealthStatus(
                name=adapter.name,
                healthy=healthy,
                last_error=error,
                last_success=now if healthy else (previous.last_success if previous else None),
                items_last_fetch=items,
                latency_ms=latency_ms,
            )
