"""In-memory response cache with TTLs and request de-duplication.

- ``fetch()`` serves a fresh entry straight from memory.
- Concurrent fetches of the same key share one in-flight call.
- An entry past 70% of its TTL is still served, and refreshed in the
  background (stale-while-revalidate).
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = ["CacheTTL", "CacheKeys", "ResponseCache"]

# Entries older than this fraction of their TTL are revalidated in the background.
STALE_FRACTION = 0.7


class CacheTTL:
    """TTL presets, in seconds."""

    SHORT = 30.0
    MEDIUM = 2 * 60.0
    LONG = 10 * 60.0
    VERY_LONG = 30 * 60.0
    PERMANENT = 24 * 60 * 60.0


class CacheKeys:
    INBOX = "inbox"
    READ_LATER = "read-later"
    FAVORITES = "favorites"
    TRASH = "trash"
    CATEGORIES = "categories"
    USER_PROFILE = "user-profile"
    ANALYTICS_SNAPSHOT = "analytics-snapshot"

    @staticmethod
    def email_detail(email_id: str) -> str:
        return f"email:{email_id}"


@dataclass
class _Entry:
    data: Any
    stored_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.stored_at

    def is_valid(self, now: float) -> bool:
        return self.age(now) < self.ttl

    def is_stale(self, now: float) -> bool:
        return self.age(now) > self.ttl * STALE_FRACTION


class ResponseCache:
    """Keyed cache of decoded API responses."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._pending: dict[str, asyncio.Future[Any]] = {}
        self._background: set[asyncio.Task[None]] = set()
        self._revalidating: set[str] = set()
        # Bumped by invalidate_all so in-flight fetches do not repopulate.
        self._generation = 0

    @staticmethod
    def make_key(endpoint: str, params: dict[str, Any] | None = None) -> str:
        param_str = json.dumps(params, sort_keys=True) if params else ""
        return f"{endpoint}:{param_str}"

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_valid(self._clock()):
            del self._entries[key]
            return None
        return entry.data

    def set(self, key: str, data: Any, ttl: float = CacheTTL.MEDIUM) -> None:
        self._entries[key] = _Entry(data=data, stored_at=self._clock(), ttl=ttl)

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with *prefix*. Returns count removed."""
        doomed = [k for k in self._entries if k.startswith(prefix)]
        for k in doomed:
            del self._entries[k]
        return len(doomed)

    def invalidate_all(self) -> None:
        self._entries.clear()
        self._pending.clear()
        self._generation += 1

    def cleanup(self) -> int:
        """Remove expired entries. Returns count removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if not e.is_valid(now)]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def stats(self) -> dict[str, int]:
        return {"entries": len(self._entries), "pending": len(self._pending)}

    async def _dedupe(self, key: str, fetch_fn: Callable[[], Awaitable[T]]) -> T:
        pending = self._pending.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future: asyncio.Future[T] = asyncio.ensure_future(fetch_fn())
        self._pending[key] = future
        try:
            return await asyncio.shield(future)
        finally:
            if self._pending.get(key) is future:
                del self._pending[key]

    async def fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[T]],
        *,
        ttl: float = CacheTTL.MEDIUM,
        force_refresh: bool = False,
        stale_while_revalidate: bool = True,
    ) -> T:
        """Return the cached value for *key*, calling *fetch_fn* on a miss."""
        if not force_refresh:
            entry = self._entries.get(key)
            now = self._clock()
            if entry is not None and entry.is_valid(now):
                if stale_while_revalidate and entry.is_stale(now):
                    self._revalidate(key, fetch_fn, ttl)
                return entry.data

        generation = self._generation
        data = await self._dedupe(key, fetch_fn)
        if generation == self._generation:
            self.set(key, data, ttl)
        return data

    def _revalidate(self, key: str, fetch_fn: Callable[[], Awaitable[Any]], ttl: float) -> None:
        if key in self._revalidating:
            return
        self._revalidating.add(key)
        generation = self._generation

        async def _run() -> None:
            try:
                data = await fetch_fn()
            except Exception as e:
                logger.warning("Background revalidation of %s failed: %s", key, e)
                return
            finally:
                self._revalidating.discard(key)
            if generation == self._generation:
                self.set(key, data, ttl)

        task = asyncio.create_task(_run())
        self._background.add(task)
        task.add_done_callback(self._background.discard)
