"""
Public API for the unified feed: adapters over posts, events and petitions,
the aggregator that merges them, and the client that pages through the result.
"""
from __future__ import annotations

from typing import Optional

from feed.adapters import default_registry
from feed.aggregator import FeedAggregator
from feed.client import FeedApiClient, IncrementalFeedClient, LoadState
from feed.models import ContentItem, ContentKind, FeedPage
from feed.settings import FeedSettings, load_settings
from storage.store import ContentStore


def build_aggregator(store: ContentStore, settings: Optional[FeedSettings] = None) -> FeedAggregator:
    """Wire the default per-kind adapters over ``store``."""
    resolved = settings or load_settings()
    return FeedAggregator(default_registry().build_all(store), settings=resolved)


def build_feed_client(settings: Optional[FeedSettings] = None, search: Optional[str] = None) -> IncrementalFeedClient:
    resolved = settings or load_settings()
    api = FeedApiClient(resolved.api_base_url)
    return IncrementalFeedClient(api.fetch_page, limit=resolved.default_limit, search=search)


__all__ = [
    "ContentItem",
    "ContentKind",
    "FeedAggregator",
    "FeedApiClient",
    "FeedPage",
    "FeedSettings",
    "IncrementalFeedClient",
    "LoadState",
    "build_aggregator",
    "build_feed_client",
    "load_settings",
]
