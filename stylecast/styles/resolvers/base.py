"""Shared machinery for the style resolvers.

Every resolver reads through a TTLCache, turns read-path failures into
fallback values, and publishes re-resolved values after a mutation.
"""

import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from stylecast.cache import TTLCache
from stylecast.observability.logging import get_logger
from stylecast.observability.metrics import FALLBACKS, RESOLUTION_LATENCY
from stylecast.styles.events import StyleUpdateBus
from stylecast.styles.exceptions import (
    FragmentNotFoundError,
    InvalidMutationError,
    StoreUnavailableError,
)
from stylecast.styles.keys import key_prefix
from stylecast.styles.merge import check_payload
from stylecast.styles.models import (
    ConfigurationFragment,
    FragmentCreate,
    FragmentScope,
    FragmentUpdate,
    OrderUpdate,
    ResolvedStyleConfiguration,
    check_fragment_shape,
)
from stylecast.styles.stores import RecordStore

if TYPE_CHECKING:
    from stylecast.styles.resolvers.theme import ThemeResolver

logger = get_logger(__name__)

T = TypeVar("T")
V = TypeVar("V")

UpdateListener = Callable[[str, T], Awaitable[None] | None]


class CachedResolver(Generic[T]):
    """Cache-through resolution with fallback and an update bus.

    Attributes:
        resolver_name: Label for logs and metrics
    """

    resolver_name = "resolver"

    def __init__(self, store: RecordStore, cache: TTLCache) -> None:
        self._store = store
        self._cache = cache
        self._bus: StyleUpdateBus[T] = StyleUpdateBus(self.resolver_name)

    @property
    def cache(self) -> TTLCache:
        return self._cache

    def subscribe(self, listener: UpdateListener[T]) -> Callable[[], None]:
        """Register an update listener. Returns its unsubscribe handle."""
        return self._bus.subscribe(listener)

    def unsubscribe(self, listener: UpdateListener[T]) -> bool:
        return self._bus.unsubscribe(listener)

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _cached(
        self,
        key: str,
        operation: str,
        compute: Callable[[], Awaitable[V]],
        fallback: Callable[[], V],
        *,
        cache_fallback: bool,
    ) -> V:
        """Serve key from cache, else compute and store it.

        A failed computation never reaches the caller. If another task
        filled the key meanwhile that value is served; otherwise the
        fallback is returned, and cached when cache_fallback is set.
        """
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        start = time.perf_counter()
        try:
            value = await compute()
        except Exception as e:
            reason = "store_unavailable" if isinstance(e, StoreUnavailableError) else "error"
            FALLBACKS.labels(resolver=self.resolver_name, reason=reason).inc()
            logger.warning(
                "style_resolution_fallback",
                resolver=self.resolver_name,
                operation=operation,
                key=key,
                reason=reason,
                error=str(e),
            )

            concurrent = self._cache.get(key)
            if concurrent is not None:
                return concurrent

            value = fallback()
            if cache_fallback:
                self._cache.set(key, value)
            return value
        finally:
            RESOLUTION_LATENCY.labels(
                resolver=self.resolver_name,
                operation=operation,
            ).observe(time.perf_counter() - start)

        self._cache.set(key, value)
        return value


class ScopedStyleResolver(CachedResolver[ResolvedStyleConfiguration]):
    """Base for resolvers owning page or component fragments.

    Cache keys start with (key_root, theme_id, owner_key), so one owner's
    entries, section and variant keys included, form a prefix range.
    """

    key_root = ""
    scopes: tuple[FragmentScope, ...] = ()

    def __init__(
        self,
        store: RecordStore,
        cache: TTLCache,
        theme_resolver: "ThemeResolver | None" = None,
    ) -> None:
        super().__init__(store, cache)
        self._themes = theme_resolver

    async def _theme_layer(self, theme_id: str, group: str, owner_key: str) -> dict[str, Any] | None:
        """Style layer the theme record defines for owner_key, if any."""
        if self._themes is None:
            return None
        theme = await self._themes.get_theme(theme_id)
        if theme is None:
            return None
        return getattr(theme, group).get(owner_key)

    def _related_keys(self, theme_id: str) -> list[str]:
        """Theme-wide keys that any mutation in theme_id makes stale."""
        return []

    async def _resolve_owner(self, theme_id: str, owner_key: str) -> ResolvedStyleConfiguration:
        raise NotImplementedError

    def invalidate_owner(self, theme_id: str | None, owner_key: str) -> int:
        """Drop every cached entry for one owner within one theme."""
        theme_id = theme_id or ""
        removed = self._cache.invalidate_by_prefix(key_prefix(self.key_root, theme_id, owner_key))
        for key in self._related_keys(theme_id):
            removed += int(self._cache.invalidate(key))
        return removed

    def invalidate_theme(self, theme_id: str) -> int:
        """Drop every cached entry belonging to theme_id."""
        removed = self._cache.invalidate_by_prefix(key_prefix(self.key_root, theme_id))
        for key in self._related_keys(theme_id):
            removed += int(self._cache.invalidate(key))
        logger.debug(
            "theme_styles_invalidated",
            resolver=self.resolver_name,
            theme_id=theme_id,
            removed=removed,
        )
        return removed

    def _check_scope(self, scope: FragmentScope) -> None:
        if scope not in self.scopes:
            raise InvalidMutationError(
                f"{scope.value} fragments are not managed by the {self.resolver_name} resolver",
                field="scope",
            )

    async def _owned_fragment(self, fragment_id: str) -> ConfigurationFragment:
        fragment = await self._store.get(fragment_id)
        if fragment is None:
            raise FragmentNotFoundError(fragment_id)
        self._check_scope(fragment.scope)
        return fragment

    async def _publish(self, owners: set[tuple[str | None, str]]) -> None:
        """Re-resolve each owner and deliver it to listeners."""
        if not len(self._bus):
            return
        for theme_id, owner_key in sorted(owners, key=lambda o: (o[0] or "", o[1])):
            config = await self._resolve_owner(theme_id or "", owner_key)
            await self._bus.publish(owner_key, config)

    async def create_style(self, fragment: FragmentCreate) -> str:
        """Insert a fragment and invalidate its owner."""
        self._check_scope(fragment.scope)
        check_fragment_shape(fragment.scope, fragment.theme_id, fragment.sub_key)
        check_payload(fragment.payload)

        fragment_id = await self._store.insert(fragment)
        self.invalidate_owner(fragment.theme_id, fragment.owner_key)

        logger.info(
            "style_fragment_created",
            resolver=self.resolver_name,
            fragment_id=fragment_id,
            theme_id=fragment.theme_id,
            owner_key=fragment.owner_key,
            sub_key=fragment.sub_key,
        )

        if fragment.active:
            await self._publish({(fragment.theme_id, fragment.owner_key)})
        return fragment_id

    async def update_style(self, fragment_id: str, changes: FragmentUpdate) -> ConfigurationFragment:
        """Apply a partial update and invalidate the old and new owner."""
        before = await self._owned_fragment(fragment_id)
        if changes.payload is not None:
            check_payload(changes.payload)
        after = await self._store.update(fragment_id, changes)

        owners = {(before.theme_id, before.owner_key), (after.theme_id, after.owner_key)}
        for theme_id, owner_key in owners:
            self.invalidate_owner(theme_id, owner_key)

        logger.info(
            "style_fragment_updated",
            resolver=self.resolver_name,
            fragment_id=fragment_id,
            fields=sorted(changes.changes()),
        )

        if before.active or after.active:
            await self._publish(owners)
        return after

    async def delete_style(self, fragment_id: str) -> None:
        """Delete a fragment and invalidate its owner."""
        fragment = await self._owned_fragment(fragment_id)
        await self._store.delete(fragment_id)
        self.invalidate_owner(fragment.theme_id, fragment.owner_key)

        logger.info(
            "style_fragment_deleted",
            resolver=self.resolver_name,
            fragment_id=fragment_id,
            owner_key=fragment.owner_key,
        )

        if fragment.active:
            await self._publish({(fragment.theme_id, fragment.owner_key)})

    async def toggle_active(self, fragment_id: str, active: bool | None = None) -> ConfigurationFragment:
        """Set or flip the active flag of a fragment."""
        fragment = await self._owned_fragment(fragment_id)
        target = (not fragment.active) if active is None else active
        return await self.update_style(fragment_id, FragmentUpdate(active=target))

    async def update_order(self, updates: list[OrderUpdate]) -> list[ConfigurationFragment]:
        """Reorder fragments and invalidate every owner involved."""
        for update in updates:
            await self._owned_fragment(update.id)

        fragments = await self._store.reorder(updates)
        await self.apply_reordered(fragments)
        return fragments

    async def apply_reordered(self, fragments: list[ConfigurationFragment]) -> None:
        """Invalidate and publish the owners of rows the store just reordered."""
        owners = {(f.theme_id, f.owner_key) for f in fragments}
        for theme_id, owner_key in owners:
            self.invalidate_owner(theme_id, owner_key)

        logger.info(
            "style_fragments_reordered",
            resolver=self.resolver_name,
            count=len(fragments),
        )

        active_owners = {(f.theme_id, f.owner_key) for f in fragments if f.active}
        if active_owners:
            await self._publish(active_owners)
