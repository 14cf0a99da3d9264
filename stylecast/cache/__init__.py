"""Resolver caches."""

from stylecast.cache.sweeper import CacheSweeper
from stylecast.cache.ttl import CacheEntry, TTLCache

__all__ = ["CacheEntry", "CacheSweeper", "TTLCache"]
