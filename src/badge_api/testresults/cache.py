"""TTL cache with stale fallback for upstream documents."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from ..errors import UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached payload, the time it was fetched and the TTL it was stored with."""

    key: str
    payload: T
    fetched_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.fetched_at

    def is_fresh(self, now: float, ttl: Optional[float] = None) -> bool:
        return self.age(now) < (self.ttl if ttl is None else ttl)


class StaleFallbackCache(Generic[T]):
    """Keyed cache that prefers stale data over no data.

    A fresh entry is served without calling upstream. Otherwise the fetch
    function runs; a valid result replaces the entry, an upstream failure
    falls back to the previous entry of any age, and an invalid result is
    dropped without touching the entry.

    Entries are replaced whole and only on the event loop thread, so no
    locking is needed. Concurrent misses for one key may each fetch; the
    last successful fetch wins.
    """

    def __init__(
        self,
        default_ttl: float = 300,
        validator: Optional[Callable[[Any], T]] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache.

        Args:
            default_ttl: Default time-to-live in seconds.
            validator: Converts a raw fetched payload into ``T``; raising
                ``ValueError`` marks the payload invalid.
            clock: Time source in seconds.
        """
        self._default_ttl = default_ttl
        self._validator = validator
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}

    def peek(self, key: str) -> Optional[CacheEntry[T]]:
        """Return the entry for ``key`` regardless of age."""
        return self._entries.get(key)

    def get(self, key: str, ttl: Optional[float] = None) -> Optional[T]:
        """Return the payload for ``key`` if it is still fresh.

        Freshness uses ``ttl`` when given, else the TTL the entry was stored with.
        """
        entry = self._entries.get(key)
        if entry is None or not entry.is_fresh(self._clock(), ttl):
            return None
        return entry.payload

    def set(self, key: str, payload: T, ttl: Optional[float] = None) -> None:
        """Store ``payload`` for ``key`` stamped with the current time."""
        self._entries[key] = CacheEntry(
            key=key,
            payload=payload,
            fetched_at=self._clock(),
            ttl=ttl if ttl is not None else self._default_ttl,
        )

    async def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        ttl: Optional[float] = None,
    ) -> Optional[T]:
        """Return fresh, refetched or stale data for ``key``, else None.

        Args:
            key: Cache key.
            fetch: Coroutine function returning the raw payload or raising
                UpstreamError.
            ttl: Optional TTL override in seconds.
        """
        effective_ttl = ttl if ttl is not None else self._default_ttl
        cached = self._entries.get(key)

        if cached is not None and cached.is_fresh(self._clock(), effective_ttl):
            logger.debug("Cache hit for %s", key)
            return cached.payload

        try:
            raw = await fetch()
        except UpstreamError as exc:
            logger.error("Failed to fetch %s: %s", key, exc)
            if cached is not None:
                logger.info("Returning stale cached data for %s as fallback", key)
                return cached.payload
            return None

        try:
            payload = self._validator(raw) if self._validator else raw
        except ValueError as exc:
            logger.error("Invalid payload for %s: %s", key, exc)
            return None

        self.set(key, payload, effective_ttl)
        return payload

    def invalidate(self, key: str) -> None:
        """Remove a single key."""
        if self._entries.pop(key, None) is not None:
            logger.info("Cleared cache for %s", key)

    def invalidate_prefix(self, prefix: str) -> None:
        """Remove every key starting with ``prefix``."""
        keys_to_remove = [k for k in self._entries if k.startswith(prefix)]
        for key in keys_to_remove:
            del self._entries[key]
        logger.info("Cleared %d cache entries under %s", len(keys_to_remove), prefix)

    def clear(self) -> None:
        """Clear all cached entries."""
        self._entries.clear()
        logger.info("Cleared all cache")

    def status(self) -> Dict[str, Dict[str, Any]]:
        """Per-key age in seconds, freshness and payload presence."""
        now = self._clock()
        return {
            key: {
                "age": round(entry.age(now)),
                "isValid": entry.is_fresh(now),
                "data": "present" if entry.payload is not None else "null",
            }
            for key, entry in self._entries.items()
        }

    def __len__(self) -> int:
        return len(self._entries)
