"""Expiring key/value cache backing every resolver.

Entries expire a fixed number of seconds after they were stored. Expiry is
evaluated when the cache is touched, using the clock at call time, so an
expired entry is never returned: reading it counts as a miss and removes it.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from stylecast.observability.logging import get_logger
from stylecast.observability.metrics import CACHE_EVICTIONS, CACHE_HITS, CACHE_MISSES

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the clock reading at insertion."""

    key: str
    value: Any
    created_at: float


class TTLCache:
    """In-process TTL cache.

    All access happens on one event loop, so no locking is done. Values are
    stored as given; callers store immutable objects.
    """

    def __init__(
        self,
        name: str,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            name: Cache name used in logs and metric labels
            ttl_seconds: Lifetime of each entry
            clock: Monotonic clock, injectable for tests
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.name = name
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self._ttl_seconds

    def get(self, key: str) -> Any | None:
        """Return the fresh value for key, or None on a miss."""
        entry = self._entries.get(key)
        if entry is None:
            CACHE_MISSES.labels(cache=self.name).inc()
            return None

        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            CACHE_MISSES.labels(cache=self.name).inc()
            CACHE_EVICTIONS.labels(cache=self.name, reason="expired").inc()
            logger.debug("cache_entry_expired", cache=self.name, key=key)
            return None

        CACHE_HITS.labels(cache=self.name).inc()
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous entry."""
        self._entries[key] = CacheEntry(key=key, value=value, created_at=self._clock())

    def invalidate(self, key: str) -> bool:
        """Remove one entry. Returns True if it was present."""
        removed = self._entries.pop(key, None) is not None
        if removed:
            CACHE_EVICTIONS.labels(cache=self.name, reason="invalidated").inc()
        return removed

    def invalidate_by_prefix(self, prefix: str) -> int:
        """Remove every entry whose key starts with prefix.

        Returns:
            Number of entries removed
        """
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]

        if doomed:
            CACHE_EVICTIONS.labels(cache=self.name, reason="invalidated").inc(len(doomed))
            logger.debug(
                "cache_prefix_invalidated",
                cache=self.name,
                prefix=prefix,
                removed=len(doomed),
            )
        return len(doomed)

    def sweep_expired(self) -> int:
        """Remove all expired entries.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]

        if expired:
            CACHE_EVICTIONS.labels(cache=self.name, reason="swept").inc(len(expired))
        return len(expired)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def keys(self) -> list[str]:
        """Keys currently stored, including ones not yet swept."""
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and not self._is_expired(entry, self._clock())

    def __len__(self) -> int:
        return len(self._entries)
