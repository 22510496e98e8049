"""
Remote directory sources and the static selection between them.
"""
from __future__ import annotations

import logging

from directory.settings import DirectorySettings
from directory.sources.backend_api import BackendApiSource
from directory.sources.base import DirectoryPredicate, DirectorySource
from directory.sources.congress_api import CongressApiSource
from directory.sources.fixture import FixtureSource

logger = logging.getLogger(__name__)

SOURCE_NAMES = ("congress_api", "backend", "fixture")


def select_source(settings: DirectorySettings) -> DirectorySource:
    """
    Build the one source named by ``settings.source``. There is no fallback:
    the chosen source's failures reach the cache unchanged.
    """
    if settings.source == "congress_api":
        source: DirectorySource = CongressApiSource(
            api_key=settings.congress_api_key,
            base_url=settings.congress_api_base_url,
            congress=settings.congress_number,
            page_size=settings.congress_page_size,
            request_delay=settings.congress_request_delay,
        )
    elif settings.source == "backend":
        source = BackendApiSource(settings.backend_base_url, page_size=settings.backend_page_size)
    elif settings.source == "fixture":
        source = FixtureSource(settings.fixture_path)
    else:
        raise ValueError(f"Unknown directory source '{settings.source}'; expected one of {', '.join(SOURCE_NAMES)}")
    logger.info("Directory source selected: %s", source.name)
    return source


__all__ = [
    "BackendApiSource",
    "CongressApiSource",
    "DirectoryPredicate",
    "DirectorySource",
    "FixtureSource",
    "SOURCE_NAMES",
    "select_source",
]
