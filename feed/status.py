"""
Status/health payloads for the system-health endpoint.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from feed.aggregator import FeedAggregator
from feed.models import HealthStatus
from feed.settings import FeedSettings


def _health_to_dict(status: HealthStatus) -> Dict[str, Any]:
    return {
        "name": status.name,
        "healthy": status.healthy,
        "last_error": status.last_error,
        "last_success": status.last_success.isoformat() if status.last_success else None,
        "items_last_fetch": status.items_last_fetch,
        "latency_ms": status.latency_ms,
    }


def build_status(
    aggregator: FeedAggregator,
    settings: FeedSettings,
    directory_snapshot: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    health = [_health_to_dict(entry) for entry in aggregator.get_health()]
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "feed": {
            "health": health,
            "adapter_count": len(aggregator.adapters),
            "merge_strategy": settings.merge_strategy,
            "default_limit": settings.default_limit,
            "max_limit": settings.max_limit,
        },
        "directory": directory_snapshot,
    }
