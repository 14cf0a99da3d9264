"""Background sweep of expired cache entries."""

import asyncio
from collections.abc import Iterable

from stylecast.cache.ttl import TTLCache
from stylecast.observability.logging import get_logger

logger = get_logger(__name__)


class CacheSweeper:
    """Periodically removes expired entries from a set of caches.

    Each sweep is a synchronous pass between awaits, so it never interleaves
    with a get/set on the same loop.
    """

    def __init__(self, caches: Iterable[TTLCache], interval_seconds: float = 60.0) -> None:
        """Initialize sweeper.

        Args:
            caches: Caches to sweep
            interval_seconds: Time between sweeps
        """
        self._caches = list(caches)
        self._interval_seconds = interval_seconds
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Launch the background sweep loop."""
        if self._running:
            logger.warning("cache_sweeper_already_running")
            return

        self._running = True
        self._task = asyncio.create_task(self._sweep_loop())

        logger.info(
            "cache_sweeper_started",
            interval_seconds=self._interval_seconds,
            caches=[cache.name for cache in self._caches],
        )

    async def stop(self) -> None:
        """Stop the sweep loop."""
        if not self._running:
            return

        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("cache_sweeper_stopped")

    def sweep_once(self) -> int:
        """Sweep every cache once and return the number of entries removed."""
        removed = 0
        for cache in self._caches:
            removed += cache.sweep_expired()
        if removed:
            logger.debug("cache_sweep_completed", removed=removed)
        return removed

    async def _sweep_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self._interval_seconds)
            try:
                self.sweep_once()
            except Exception as e:
                logger.error("cache_sweep_error", error=str(e))
