"""API routes for the civic-feed service."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import jsonify, request
from pydantic import ValidationError

from app_utils import SmartCache, get_current_timestamp
from directory.listing import DirectoryListing
from directory.schemas import DirectoryQueryParams
from directory.serialization import entry_to_dict
from directory.sync_cache import DirectorySyncCache
from feed.aggregator import FeedAggregator
from feed.schemas import FeedQueryParams
from feed.serialization import page_to_dict
from feed.settings import FeedSettings
from feed.status import build_status
from utils.errors import AdapterFailure, InvalidQuery

logger = logging.getLogger("civicfeed")


def _error(message: str, status: int, **extra: Any):
    body: Dict[str, Any] = {"status": "error", "error": message, "timestamp": get_current_timestamp()}
    body.update(extra)
    return jsonify(body), status


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "query"
    return f"{field}: {first.get('msg', 'invalid value')}"


def register_routes(
    app,
    aggregator: FeedAggregator,
    listing: DirectoryListing,
    feed_settings: FeedSettings,
    directory_cache: Optional[DirectorySyncCache],
    cache: SmartCache,
):
    """Register all API routes with the Flask app.

    Args:
        app: Flask app instance.
        aggregator: Feed aggregator over the content adapters.
        listing: Server-side legislator queries.
        feed_settings: Feed defaults (page size, limits).
        directory_cache: Local directory cache, reported by the health endpoint.
        cache: SmartCache for aggregate legislator stats.
    """

    @app.route("/api/feed")
    def api_feed():
        """Unified, time-ordered feed of posts, events and petitions."""
        try:
            params = FeedQueryParams.model_validate(
                {
                    "page": request.args.get("page", 1),
                    "limit": request.args.get("limit", feed_settings.default_limit),
                    "search": request.args.get("search"),
                }
            )
        except ValidationError as exc:
            logger.info("Rejected feed query %s: %s", dict(request.args), exc.error_count())
            return _error(_validation_message(exc), 400)

        logger.info("Received feed request page=%s limit=%s search=%r", params.page, params.limit, params.search)
        try:
            page = aggregator.aggregate(params.page, params.limit, params.search)
        except InvalidQuery as exc:
            return _error(str(exc), 400)
        except AdapterFailure as exc:
            logger.error("Feed aggregation failed: %s", exc, exc_info=True)
            return _error("Feed temporarily unavailable", 503, source=exc.kind)
        return jsonify(page_to_dict(page))

    @app.route("/api/legislators")
    def api_legislators():
        """Paginated legislator listing with optional filters."""
        try:
            params = DirectoryQueryParams.model_validate(request.args.to_dict())
        except ValidationError as exc:
            return _error(_validation_message(exc), 400)

        result = listing.list(params.to_filter(), limit=params.limit, offset=params.offset)
        logger.debug("Legislator listing returned %s of %s", len(result.legislators), result.total)
        return jsonify(
            {
                "legislators": [entry_to_dict(entry) for entry in result.legislators],
                "total": result.total,
                "limit": result.limit,
                "offset": result.offset,
                "hasMore": result.has_more,
            }
        )

    @app.route("/api/legislators/stats")
    def api_legislator_stats():
        """Totals by chamber and party."""
        cached = cache.get("legislators:stats")
        if cached is not None:
            return jsonify(cached)
        stats = listing.stats()
        cache.set("legislators:stats", stats)
        return jsonify(stats)

    @app.route("/api/legislators/states/<state>")
    def api_legislators_by_state(state: str):
        if len(state) != 2 or not state.isalpha():
            return _error(f"state must be a two-letter code, got {state!r}", 400)
        entries = listing.find_by_state(state)
        return jsonify([entry_to_dict(entry) for entry in entries])

    @app.route("/api/legislators/<external_id>")
    def api_legislator(external_id: str):
        entry = listing.find_one(external_id)
        if entry is None:
            return _error(f"Legislator {external_id} not found", 404)
        return jsonify(entry_to_dict(entry))

    @app.route("/api/system-health")
    def api_system_health():
        """Adapter health plus the directory cache snapshot."""
        logger.info("Received request for system health status")
        try:
            snapshot = directory_cache.snapshot() if directory_cache is not None else None
            status = build_status(aggregator, feed_settings, directory_snapshot=snapshot)
            status["status"] = "ok"
            return jsonify(status)
        except Exception as exc:
            logger.error("System health check failed: %s", exc, exc_info=True)
            return jsonify({
                "status": "error",
                "error": "Failed to retrieve system health status",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }), 500
