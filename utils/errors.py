"""
Error kinds shared by the feed aggregator, the feed client and the directory cache.
"""
from __future__ import annotations

from typing import Optional


class CivicFeedError(Exception):
    """Base class for every error raised by civic-feed components."""


class InvalidQuery(CivicFeedError):
    """Malformed page/limit/search input. Raised before any source is queried."""


class AdapterFailure(CivicFeedError):
    """One content source failed; the whole aggregation fails with it."""

    def __init__(self, kind: str, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"{kind} adapter failed: {message}")
        self.kind = kind
        self.cause = cause


class RemoteSourceFailure(CivicFeedError):
    """An upstream HTTP fetch failed (transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CacheWriteFailure(CivicFeedError):
    """The local directory replace could not commit; previous contents are intact."""


class DecodeFailure(CivicFeedError):
    """A response payload did not match the expected shape."""
