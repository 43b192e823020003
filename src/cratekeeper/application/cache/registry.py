"""Named caches shared by services in one process."""

import logging
from collections.abc import Callable
from typing import Any

from cratekeeper.application.cache.base_cache import InMemoryCache

logger = logging.getLogger(__name__)


class CacheRegistry:
    """Hands out one InMemoryCache per owner name.

    Services ask for their cache by name ("artists") instead of constructing
    it, so tests and the worker can share or clear them in one place.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._caches: dict[str, InMemoryCache[Any, Any]] = {}
        self._clock = clock

    def get_cache(self, owner: str) -> InMemoryCache[Any, Any]:
        """Get (or create) the cache for an owner."""
        cache = self._caches.get(owner)
        if cache is None:
            cache = InMemoryCache() if self._clock is None else InMemoryCache(self._clock)
            self._caches[owner] = cache
            logger.debug(f"Created cache '{owner}'")
        return cache

    async def clear_all(self) -> None:
        """Clear every registered cache."""
        for cache in self._caches.values():
            await cache.clear()

    def get_stats(self) -> dict[str, dict[str, Any]]:
        """Stats of every registered cache keyed by owner."""
        return {owner: cache.get_stats() for owner, cache in self._caches.items()}
