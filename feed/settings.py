"""
Centralised settings for the feed aggregator and feed client (env-first, YAML overrides).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from utils.config import get_int_env, get_str_env, load_yaml_config

logger = logging.getLogger(__name__)

MERGE_STRATEGIES = ("materialize", "merge")


@dataclass
class FeedSettings:
    database_url: str = "sqlite:///data/civicfeed.db"
    default_limit: int = 20
    max_limit: int = 100
    max_search_length: int = 200
    max_workers: int = 3
    merge_strategy: str = "materialize"
    api_base_url: str = "http://127.0.0.1:5000"


def _parse_strategy(raw: str) -> str:
    value = raw.strip().lower()
    if value not in MERGE_STRATEGIES:
        logger.warning("Unknown merge strategy '%s'; using 'materialize'.", raw)
        return "materialize"
    return value


def load_settings(overrides: Optional[Dict[str, Any]] = None) -> FeedSettings:
    section = (overrides if overrides is not None else load_yaml_config()).get("feed", {}) or {}
    defaults = FeedSettings()
    return FeedSettings(
        database_url=get_str_env("CIVICFEED_DATABASE_URL", str(section.get("database_url", defaults.database_url))),
        default_limit=get_int_env("FEED_DEFAULT_LIMIT", int(section.get("default_limit", defaults.default_limit))),
        max_limit=get_int_env("FEED_MAX_LIMIT", int(section.get("max_limit", defaults.max_limit))),
        max_search_length=get_int_env(
            "FEED_MAX_SEARCH_LENGTH", int(section.get("max_search_length", defaults.max_search_length))
        ),
        max_workers=get_int_env("FEED_MAX_WORKERS", int(section.get("max_workers", defaults.max_workers))),
        merge_strategy=_parse_strategy(
            get_str_env("FEED_MERGE_STRATEGY", str(section.get("merge_strategy", defaults.merge_strategy)))
        ),
        api_base_url=get_str_env("FEED_API_BASE_URL", str(section.get("api_base_url", defaults.api_base_url))),
    )
