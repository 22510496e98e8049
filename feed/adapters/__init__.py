"""
Per-kind content sources feeding the aggregator.
"""
from __future__ import annotations

from feed.adapters.base import AdapterFactory, AdapterRegistry, SourceAdapter
from feed.adapters.events import EventSourceAdapter
from feed.adapters.petitions import PetitionSourceAdapter
from feed.adapters.posts import PostSourceAdapter
from feed.models import ContentKind


def default_registry() -> AdapterRegistry:
    registry = AdapterRegistry()
    registry.register(ContentKind.POST, AdapterFactory(PostSourceAdapter))
    registry.register(ContentKind.EVENT, AdapterFactory(EventSourceAdapter))
    registry.register(ContentKind.PETITION, AdapterFactory(PetitionSourceAdapter))
    return registry


__all__ = [
    "AdapterFactory",
    "AdapterRegistry",
    "EventSourceAdapter",
    "PetitionSourceAdapter",
    "PostSourceAdapter",
    "SourceAdapter",
    "default_registry",
]
