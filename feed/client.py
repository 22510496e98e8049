"""
Client-side feed consumption: the HTTP transport for ``/api/feed`` and an
incremental pager that accumulates pages for infinite-scroll style views.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from enum import Enum
from typing import Callable, List, Optional

from feed.dedupe import dedupe_by_key
from feed.models import ContentItem, FeedPage
from feed.schemas import decode_feed_page
from utils.http_client import HttpClient

logger = logging.getLogger(__name__)

FetchPage = Callable[[int, int, Optional[str]], FeedPage]


class FeedApiClient:
    """Fetches and decodes feed pages from a civic-feed server."""

    def __init__(self, base_url: str, http: Optional[HttpClient] = None, path: str = "/api/feed") -> None:
        self.base_url = base_url.rstrip("/")
        self.path = path
        self.http = http or HttpClient(user_agent="CivicFeed-FeedClient/1.0")

    def fetch_page(self, page: int, limit: int, search: Optional[str] = None) -> FeedPage:
        params = {"page": page, "limit": limit}
        if search:
            params["search"] = search
        payload = self.http.get_json(f"{self.base_url}{self.path}", params=params)
        return decode_feed_page(payload)


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class IncrementalFeedClient:
    """
    Accumulates feed pages in increasing page order.

    At most one load runs at a time per logical operation: a ``load_more`` issued
    while another load is in flight waits for that load and returns its result.
    ``load_initial``/``refresh`` start a new generation; results of loads from an
    older generation are dropped instead of being appended.
    """

    def __init__(self, fetch_page: FetchPage, limit: int = 20, search: Optional[str] = None) -> None:
        self._fetch_page = fetch_page
        self.limit = limit
        self.search_term = search
        self._lock = threading.Lock()
        self._items: List[ContentItem] = []
        self._page = 0
        self._has_more = True
        self._total: Optional[int] = None
        self._state = LoadState.IDLE
        self._last_error: Optional[BaseException] = None
        self._generation = 0
        self._inflight: Optional[Future] = None

    @property
    def items(self) -> List[ContentItem]:
        with self._lock:
            return list(self._items)

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def current_page(self) -> int:
        return self._page

    @property
    def total(self) -> Optional[int]:
        return self._total

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    def load_initial(self) -> List[ContentItem]:
        return self._restart(self.search_term)

    def refresh(self) -> List[ContentItem]:
        return self.load_initial()

    def search(self, term: Optional[str]) -> List[ContentItem]:
        return self._restart(term.strip() if term and term.strip() else None)

    def _restart(self, search: Optional[str]) -> List[ContentItem]:
        # accumulated pages and the search term stay until page 1 arrives
        future: Future = Future()
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._state = LoadState.LOADING
            self._inflight = future
        return self._run_load(future, generation, 1, search, replace=True)

    def load_more(self) -> List[ContentItem]:
        with self._lock:
            inflight = self._inflight
            if inflight is None:
                if not self._has_more:
                    return list(self._items)
                future: Future = Future()
                self._inflight = future
                self._state = LoadState.LOADING
                generation = self._generation
                next_page = self._page + 1
                search = self.search_term
        if inflight is not None:
            logger.debug("load_more joined an in-flight load")
            return inflight.result()
        return self._run_load(future, generation, next_page, search, replace=False)

    def _run_load(
        self,
        future: Future,
        generation: int,
        page_number: int,
        search: Optional[str],
        *,
        replace: bool,
    ) -> List[ContentItem]:
        try:
            page = self._fetch_page(page_number, self.limit, search)
        except Exception as exc:
            with self._lock:
                if self._inflight is future:
                    self._inflight = None
                if generation == self._generation:
                    self._state = LoadState.FAILED
                    self._last_error = exc
            logger.warning("Feed page %s failed to load: %s", page_number, exc)
            future.set_exception(exc)
            raise

        with self._lock:
            if self._inflight is future:
                self._inflight = None
            if generation == self._generation:
                merged = page.items if replace else self._items + page.items
                self._items = dedupe_by_key(merged, key_fn=lambda item: item.key)
                if replace:
                    self.search_term = search
                self._page = page_number
                self._has_more = page.has_more
                self._total = page.total
                self._state = LoadState.LOADED
                self._last_error = None
            else:
                logger.debug("Discarding page %s from a superseded load", page_number)
            result = list(self._items)
        future.set_result(result)
        return result
