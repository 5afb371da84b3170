"""Row store access."""

from questlog.store.client import Query, QueryResult, StoreClient, StoreError

__all__ = ["Query", "QueryResult", "StoreClient", "StoreError"]
