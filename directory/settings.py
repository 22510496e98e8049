"""
Settings for the directory cache and its remote sources (env-first, YAML overrides).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from utils.config import get_float_env, get_int_env, get_str_env, load_yaml_config

logger = logging.getLogger(__name__)

DEFAULT_FIXTURE_PATH = Path(__file__).resolve().parent / "fixtures" / "legislators.yaml"


@dataclass
class DirectorySettings:
    source: str = "fixture"
    refresh_interval_seconds: int = 24 * 60 * 60
    cache_path: str = "data/directory_cache.db"
    congress_api_key: str = ""
    congress_api_base_url: str = "https://api.congress.gov/v3"
    congress_number: int = 118
    congress_request_delay: float = 0.1
    congress_page_size: int = 250
    backend_base_url: str = "http://127.0.0.1:5000"
    backend_page_size: int = 100
    fixture_path: Path = field(default_factory=lambda: DEFAULT_FIXTURE_PATH)


def load_settings(overrides: Optional[Dict[str, Any]] = None) -> DirectorySettings:
    section = (overrides if overrides is not None else load_yaml_config()).get("directory", {}) or {}
    defaults = DirectorySettings()
    fixture_raw = get_str_env("DIRECTORY_FIXTURE_PATH", str(section.get("fixture_path", "")))
    return DirectorySettings(
        source=get_str_env("DIRECTORY_SOURCE", str(section.get("source", defaults.source))).lower(),
        refresh_interval_seconds=get_int_env(
            "DIRECTORY_REFRESH_INTERVAL",
            int(section.get("refresh_interval_seconds", defaults.refresh_interval_seconds)),
        ),
        cache_path=get_str_env("DIRECTORY_CACHE_PATH", str(section.get("cache_path", defaults.cache_path))),
        congress_api_key=get_str_env("CONGRESS_API_KEY", str(section.get("congress_api_key", ""))),
        congress_api_base_url=get_str_env(
            "CONGRESS_API_BASE_URL", str(section.get("congress_api_base_url", defaults.congress_api_base_url))
        ),
        congress_number=get_int_env("CONGRESS_NUMBER", int(section.get("congress_number", defaults.congress_number))),
        congress_request_delay=get_float_env(
            "CONGRESS_API_REQUEST_DELAY", float(section.get("congress_request_delay", defaults.congress_request_delay))
        ),
        congress_page_size=int(section.get("congress_page_size", defaults.congress_page_size)),
        backend_base_url=get_str_env("BACKEND_BASE_URL", str(section.get("backend_base_url", defaults.backend_base_url))),
        backend_page_size=int(section.get("backend_page_size", defaults.backend_page_size)),
        fixture_path=Path(fixture_raw) if fixture_raw else DEFAULT_FIXTURE_PATH,
    )
