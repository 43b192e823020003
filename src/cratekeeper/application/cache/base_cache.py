"""Base cache interface and in-memory implementation."""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

K = TypeVar("K")  # Key type
V = TypeVar("V")  # Value type


@dataclass
class CacheEntry(Generic[V]):
    """Cache entry with value and metadata."""

    value: V
    created_at: float
    ttl_seconds: float

    # Monotonic clock: wall-clock jumps (NTP, manual changes) must not expire or
    # resurrect entries.
    def is_expired(self, now: float | None = None) -> bool:
        """Check if cache entry is expired."""
        current = time.monotonic() if now is None else now
        return current >= self.created_at + self.ttl_seconds


class BaseCache(ABC, Generic[K, V]):
    """Base cache interface for all cache implementations."""

    @abstractmethod
    async def get(self, key: K) -> V | None:
        """Get value from cache.

        Returns:
            Cached value if found and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, key: K, value: V, ttl_seconds: float = 3600) -> None:
        """Set value in cache."""
        pass

    @abstractmethod
    async def delete(self, key: K) -> bool:
        """Delete value from cache.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Clear all entries from cache."""
        pass

    @abstractmethod
    async def get_or_load(
        self, key: K, loader: Callable[[], Awaitable[V]], ttl_seconds: float
    ) -> V:
        """Get a cached value, loading and storing it on a miss."""
        pass


class InMemoryCache(BaseCache[K, V]):
    """In-memory cache implementation using dictionary.

    Per-process only. Every read-modify-write on the dict goes through _lock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize in-memory cache.

        Args:
            clock: Time source in seconds, injectable for tests
        """
        self._cache: dict[K, CacheEntry[V]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock
        self._hits = 0
        self._misses = 0

    # Expired entries are evicted on read, so get() is not side-effect free.
    async def get(self, key: K) -> V | None:
        """Get value from cache."""
        async with self._lock:
            return self._get_unlocked(key)

    def _get_unlocked(self, key: K) -> V | None:
        entry = self._cache.get(key)
        if entry is None:
            self._misses += 1
            return None
        if entry.is_expired(self._clock()):
            del self._cache[key]
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    async def set(self, key: K, value: V, ttl_seconds: float = 3600) -> None:
        """Set value in cache."""
        async with self._lock:
            self._cache[key] = CacheEntry(
                value=value, created_at=self._clock(), ttl_seconds=ttl_seconds
            )

    async def delete(self, key: K) -> bool:
        """Delete value from cache."""
        async with self._lock:
            return self._cache.pop(key, None) is not None

    async def clear(self) -> None:
        """Clear all entries from cache."""
        async with self._lock:
            self._cache.clear()

    # Hey future me, the loader runs UNDER the lock on purpose: two concurrent
    # get_all_artists() calls after an invalidation must not both hit the
    # database. Keep loaders short (one query) or this becomes a bottleneck.
    async def get_or_load(
        self, key: K, loader: Callable[[], Awaitable[V]], ttl_seconds: float
    ) -> V:
        """Get a cached value, loading and storing it on a miss."""
        async with self._lock:
            cached = self._get_unlocked(key)
            if cached is not None:
                return cached
            value = await loader()
            self._cache[key] = CacheEntry(
                value=value, created_at=self._clock(), ttl_seconds=ttl_seconds
            )
            return value

    async def cleanup_expired(self) -> int:
        """Remove expired entries from cache.

        Returns:
            Number of entries removed
        """
        async with self._lock:
            now = self._clock()
            expired_keys = [key for key, entry in self._cache.items() if entry.is_expired(now)]
            for key in expired_keys:
                del self._cache[key]
            return len(expired_keys)

    # Not locked: stats are for monitoring and may be slightly stale.
    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        now = self._clock()
        total_entries = len(self._cache)
        expired_entries = sum(1 for entry in self._cache.values() if entry.is_expired(now))
        return {
            "total_entries": total_entries,
            "active_entries": total_entries - expired_entries,
            "expired_entries": expired_entries,
            "hits": self._hits,
            "misses": self._misses,
        }
