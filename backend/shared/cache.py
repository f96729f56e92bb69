"""
In-process cache for derived query results.

Dashboards and profile views cache data derived from the signed-in user
here. The whole cache is invalidated on sign-out so that a later sign-in
by a different identity never observes the previous user's data.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

_MISSING = object()


class QueryCache:
    """
    Keyed cache with optional per-entry TTL.

    Entries are stored with the time they were written; an entry older
    than its TTL is treated as missing.
    """

    DEFAULT_TTL_SECONDS = 300

    def __init__(self, ttl_seconds: Optional[int] = DEFAULT_TTL_SECONDS):
        self._ttl = ttl_seconds
        self._entries: dict[str, tuple[Any, datetime]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value for key, or None if missing or stale."""
        value = self._lookup(key)
        return None if value is _MISSING else value

    def _lookup(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING

        value, stored_at = entry
        if self._ttl is not None:
            age = (datetime.now(timezone.utc) - stored_at).total_seconds()
            if age > self._ttl:
                del self._entries[key]
                return _MISSING
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (value, datetime.now(timezone.utc))

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return the cached value or load, store and return it.

        Args:
            key: Cache key
            loader: Coroutine factory invoked on a miss

        Returns:
            Cached or freshly loaded value
        """
        value = self._lookup(key)
        if value is _MISSING:
            value = await loader()
            self.set(key, value)
        return value

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> None:
        """Drop every entry whose key starts with prefix."""
        for key in [k for k in self._entries if k.startswith(prefix)]:
            del self._entries[key]

    def invalidate_all(self) -> None:
        """Drop every entry."""
        count = len(self._entries)
        self._entries.clear()
        logger.debug(f"Query cache cleared ({count} entries)")
