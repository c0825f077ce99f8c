"""
Process-wide query cache for the client façade.

Lifecycle mirrors the DB pool: `init_query_client()` once per client process,
`close_query_client()` on teardown, `query_client()` in between. Successful
mutations mark entries stale by key prefix; the next read refetches.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable

from core import settings

logger = logging.getLogger(__name__)

QueryKey = tuple[Hashable, ...]

_client: QueryClient | None = None


@dataclass
class CacheEntry:
    data: Any
    fetched_at: float
    stale: bool = False


class QueryClient:
    def __init__(self, *, stale_after_s: float | None = None) -> None:
        self.stale_after_s = stale_after_s
        self._entries: dict[QueryKey, CacheEntry] = {}
        # Bumped by invalidate() for every key it touches, cached or in flight.
        self._generations: dict[QueryKey, int] = {}
        self._in_flight: dict[QueryKey, int] = {}

    def _is_fresh(self, entry: CacheEntry) -> bool:
        if entry.stale:
            return False
        if self.stale_after_s is None:
            return True
        return (time.monotonic() - entry.fetched_at) < self.stale_after_s

    def get(self, key: QueryKey) -> CacheEntry | None:
        return self._entries.get(tuple(key))

    async def fetch(self, key: QueryKey, fn: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return cached data for `key` while fresh, otherwise run `fn` and cache
        its result. Failures are not cached.

        A result whose key was invalidated while `fn` was running is stored
        stale, so the next read refetches.
        """
        key = tuple(key)
        entry = self._entries.get(key)
        if entry is not None and self._is_fresh(entry):
            return entry.data

        generation = self._generations.get(key, 0)
        self._in_flight[key] = self._in_flight.get(key, 0) + 1
        try:
            data = await fn()
        finally:
            remaining = self._in_flight[key] - 1
            if remaining:
                self._in_flight[key] = remaining
            else:
                del self._in_flight[key]

        self._entries[key] = CacheEntry(
            data=data,
            fetched_at=time.monotonic(),
            stale=self._generations.get(key, 0) != generation,
        )
        return data

    def invalidate(self, prefix: QueryKey) -> int:
        """
        Mark every entry whose key starts with `prefix` stale.
        """
        prefix = tuple(prefix)
        count = 0
        for key, entry in self._entries.items():
            if key[: len(prefix)] == prefix:
                entry.stale = True
                count += 1
        for key in {*self._entries, *self._in_flight}:
            if key[: len(prefix)] == prefix:
                self._generations[key] = self._generations.get(key, 0) + 1
        logger.debug("queries_invalidated prefix=%s count=%s", prefix, count)
        return count

    def clear(self) -> None:
        self._entries.clear()
        self._generations.clear()


def init_query_client(*, stale_after_s: float | None = None) -> QueryClient:
    """
    Create the process-wide client, or return the existing one.

    `stale_after_s` (default: env QUERY_STALE_AFTER_S) is only read on the
    first call; a later call asking for a different value gets the existing
    client unchanged and a warning.
    """
    global _client
    if _client is None:
        if stale_after_s is None:
            stale_after_s = settings.env_float("QUERY_STALE_AFTER_S", None)
        _client = QueryClient(stale_after_s=stale_after_s)
    elif stale_after_s is not None and stale_after_s != _client.stale_after_s:
        logger.warning(
            "query_client_already_initialized stale_after_s=%s requested=%s",
            _client.stale_after_s,
            stale_after_s,
        )
    return _client


def close_query_client() -> None:
    global _client
    if _client is None:
        return None
    _client.clear()
    _client = None


def query_client() -> QueryClient:
    if _client is None:
        raise RuntimeError("Query client is not initialized. Call init_query_client() first.")
    return _client
