"""Caching layer - time-boxed in-process caches."""

from cratekeeper.application.cache.base_cache import BaseCache, CacheEntry, InMemoryCache
from cratekeeper.application.cache.registry import CacheRegistry

__all__ = ["BaseCache", "CacheEntry", "CacheRegistry", "InMemoryCache"]
