"""Main application module for the civic-feed service."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from flask import Flask
from flask_cors import CORS

from api_routes import register_routes
from app_utils import SmartCache
from directory import DirectorySettings, DirectorySyncCache, build_directory_cache
from directory import load_settings as load_directory_settings
from directory.listing import DirectoryListing
from feed import FeedSettings, build_aggregator
from feed import load_settings as load_feed_settings
from storage import ContentStore

logger = logging.getLogger("civicfeed")

PROJECT_ROOT = Path(__file__).resolve().parent
LOG_DIR = PROJECT_ROOT / "logs"
STATS_CACHE_TTL_SECONDS = 60


def configure_logging(level: int = logging.INFO) -> None:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(LOG_DIR / 'civicfeed.log'),
            logging.StreamHandler()
        ]
    )


def create_app(
    feed_settings: Optional[FeedSettings] = None,
    directory_settings: Optional[DirectorySettings] = None,
    store: Optional[ContentStore] = None,
    directory_cache: Optional[DirectorySyncCache] = None,
) -> Flask:
    """Build the Flask app with its feed aggregator, legislator listing and directory cache."""
    feed_settings = feed_settings or load_feed_settings()
    directory_settings = directory_settings or load_directory_settings()
    store = store or ContentStore(feed_settings.database_url)

    app = Flask(__name__)
    CORS(app)

    aggregator = build_aggregator(store, feed_settings)
    listing = DirectoryListing(store)
    if directory_cache is None:
        directory_cache = build_directory_cache(directory_settings)

    app.extensions["civicfeed"] = {
        "store": store,
        "aggregator": aggregator,
        "listing": listing,
        "directory_cache": directory_cache,
    }
    register_routes(
        app,
        aggregator=aggregator,
        listing=listing,
        feed_settings=feed_settings,
        directory_cache=directory_cache,
        cache=SmartCache(ttl_seconds=STATS_CACHE_TTL_SECONDS),
    )
    logger.info(
        "civic-feed app ready: %s adapters, merge strategy %s, directory source %s",
        len(aggregator.adapters),
        feed_settings.merge_strategy,
        directory_cache.source.name,
    )
    return app


__all__ = ["configure_logging", "create_app"]
