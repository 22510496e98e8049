"""
Persistence collaborator: content tables read by the feed adapters and the
server-side legislator table behind the directory endpoints.
"""
from storage.store import ContentStore

__all__ = ["ContentStore"]
