"""Theme resolver.

Tracks which theme is active and resolves theme records into frozen Theme
objects. Theme records are fragments with scope "theme" whose owner key is
the theme id; at most one of them is active.
"""

import json
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from stylecast.cache import TTLCache
from stylecast.observability.logging import get_logger
from stylecast.observability.metrics import FALLBACKS
from stylecast.styles.defaults import DEFAULT_THEME_ID, DEFAULT_THEME_NAME, default_theme_tokens
from stylecast.styles.exceptions import InvalidMutationError, MalformedFragmentError
from stylecast.styles.keys import cache_key, key_prefix
from stylecast.styles.merge import deep_merge_styles, parse_payload
from stylecast.styles.models import (
    ConfigurationFragment,
    FragmentCreate,
    FragmentScope,
    FragmentUpdate,
    Theme,
    ThemeState,
    ThemeSummary,
)
from stylecast.styles.models.theme import TOKEN_GROUP_ALIASES
from stylecast.styles.resolvers.base import CachedResolver, UpdateListener
from stylecast.styles.stores import RecordStore

logger = get_logger(__name__)

ACTIVE_THEME_KEY = cache_key("theme", "active")
THEME_LIST_KEY = cache_key("theme", "all")


def build_theme(fragment: ConfigurationFragment) -> Theme:
    """Build a Theme from a theme record, over the default tokens.

    A scalar "name" entry is the display name; every other top-level entry
    must be a group.

    Raises:
        MalformedFragmentError: If the payload cannot be interpreted
    """
    raw = fragment.payload
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise MalformedFragmentError(f"Payload is not valid JSON: {e}", fragment.id) from e

    name = fragment.owner_key
    if isinstance(raw, Mapping) and isinstance(raw.get("name"), str):
        name = raw["name"]
        raw = {k: v for k, v in raw.items() if k != "name"}

    payload = parse_payload(raw, fragment.id)

    tokens = default_theme_tokens()
    for group, aliases in TOKEN_GROUP_ALIASES.items():
        # legacy names first so the current name wins
        for alias in reversed(aliases):
            if alias in payload:
                tokens[group] = deep_merge_styles(tokens[group], payload[alias])

    try:
        return Theme(
            id=fragment.owner_key,
            name=name,
            **tokens,
            components=deep_merge_styles({}, payload.get("components", {})),
            pages=deep_merge_styles({}, payload.get("pages", {})),
            active=fragment.active,
        )
    except ValidationError as e:
        raise MalformedFragmentError(f"Invalid theme tokens: {e}", fragment.id) from e


def check_theme_payload(theme_id: str, payload: dict[str, Any], active: bool = False) -> Theme:
    """Build the theme a payload would produce, before it is written.

    Raises:
        InvalidMutationError: If the payload would not build a theme
    """
    candidate = ConfigurationFragment(
        scope=FragmentScope.THEME,
        owner_key=theme_id,
        payload=payload,
        active=active,
    )
    try:
        return build_theme(candidate)
    except MalformedFragmentError as e:
        raise InvalidMutationError(e.message, field="payload") from e


class ThemeResolver(CachedResolver[Theme]):
    """Resolver for the active theme and the theme catalogue.

    State moves from NO_ACTIVE_THEME to ACTIVE_THEME on the first
    successful read of an active record, and follows switch_theme after
    that.
    """

    resolver_name = "theme"

    def __init__(
        self,
        store: RecordStore,
        cache: TTLCache,
        default_theme_id: str = DEFAULT_THEME_ID,
    ) -> None:
        super().__init__(store, cache)
        self._default_theme_id = default_theme_id
        self._state = ThemeState.NO_ACTIVE_THEME
        self._active_theme_id: str | None = None

    @property
    def state(self) -> ThemeState:
        return self._state

    @property
    def active_theme_id(self) -> str | None:
        """Id of the active theme record, None until one has been read."""
        return self._active_theme_id

    def on_theme_update(self, listener: UpdateListener[Theme]) -> Callable[[], None]:
        return self.subscribe(listener)

    def off_theme_update(self, listener: UpdateListener[Theme]) -> bool:
        return self.unsubscribe(listener)

    def default_theme(self) -> Theme:
        """Theme built from built-in tokens alone."""
        return Theme(
            id=self._default_theme_id,
            name=DEFAULT_THEME_NAME,
            **default_theme_tokens(),
            active=True,
            is_fallback=True,
        )

    def _theme_key(self, theme_id: str) -> str:
        return cache_key("theme", "id", theme_id)

    def _transition(self, theme_id: str) -> None:
        if self._state is ThemeState.ACTIVE_THEME and self._active_theme_id == theme_id:
            return
        logger.info(
            "theme_state_changed",
            previous_theme_id=self._active_theme_id,
            theme_id=theme_id,
        )
        self._state = ThemeState.ACTIVE_THEME
        self._active_theme_id = theme_id

    def invalidate_all(self) -> int:
        """Drop every cached theme entry."""
        return self._cache.invalidate_by_prefix(key_prefix("theme"))

    async def _find_record(self, theme_id: str) -> ConfigurationFragment | None:
        records = await self._store.query(
            FragmentScope.THEME,
            owner_key=theme_id,
            active_only=False,
        )
        return records[0] if records else None

    async def _require_record(self, theme_id: str) -> ConfigurationFragment:
        record = await self._find_record(theme_id)
        if record is None:
            raise InvalidMutationError(f"Theme not found: {theme_id}", field="theme_id")
        return record

    async def get_active_theme(self) -> Theme:
        """Resolve the active theme, or the default theme. Never raises."""

        async def compute() -> Theme:
            records = await self._store.query(FragmentScope.THEME)
            if not records:
                FALLBACKS.labels(resolver=self.resolver_name, reason="no_active_theme").inc()
                logger.info("no_active_theme", default_theme_id=self._default_theme_id)
                return self.default_theme()

            if len(records) > 1:
                logger.warning(
                    "multiple_active_themes",
                    theme_ids=[r.owner_key for r in records],
                    using=records[0].owner_key,
                )
            theme = build_theme(records[0])
            self._transition(theme.id)
            return theme

        return await self._cached(
            ACTIVE_THEME_KEY,
            "get_active_theme",
            compute,
            self.default_theme,
            cache_fallback=True,
        )

    async def get_theme(self, theme_id: str) -> Theme | None:
        """Resolve a theme by id, active or not. None if absent or unreadable."""

        async def compute() -> Theme | None:
            record = await self._find_record(theme_id)
            return build_theme(record) if record is not None else None

        return await self._cached(
            self._theme_key(theme_id),
            "get_theme",
            compute,
            lambda: None,
            cache_fallback=False,
        )

    async def get_all_themes(self) -> list[ThemeSummary]:
        """List every theme record for a theme picker."""

        async def compute() -> tuple[ThemeSummary, ...]:
            records = await self._store.query(FragmentScope.THEME, active_only=False)
            summaries = []
            for record in records:
                try:
                    name = build_theme(record).name
                except MalformedFragmentError as e:
                    logger.warning("malformed_theme_record", theme_id=record.owner_key, error=e.message)
                    name = record.owner_key
                summaries.append(ThemeSummary(id=record.owner_key, name=name, active=record.active))
            return tuple(summaries)

        themes = await self._cached(
            THEME_LIST_KEY,
            "get_all_themes",
            compute,
            tuple,
            cache_fallback=False,
        )
        return list(themes)

    async def switch_theme(self, theme_id: str) -> Theme:
        """Make theme_id the only active theme and publish it.

        Raises:
            InvalidMutationError: If no such theme exists
            StoreUnavailableError: If the store cannot be reached
        """
        record = await self._require_record(theme_id)
        previous = self._active_theme_id

        await self._store.set_active_exclusive(record.id)

        self._cache.invalidate(ACTIVE_THEME_KEY)
        self._cache.invalidate(THEME_LIST_KEY)
        self._cache.invalidate_by_prefix(key_prefix("theme", "id"))
        self._transition(theme_id)

        theme = await self.get_active_theme()
        logger.info("theme_switched", previous_theme_id=previous, theme_id=theme_id)
        await self._bus.publish(theme.id, theme)
        return theme

    async def create_theme(
        self,
        theme_id: str,
        payload: dict[str, Any],
        *,
        name: str | None = None,
        active: bool = False,
    ) -> str:
        """Create a theme record. Returns the record id."""
        if name is not None:
            payload = {**payload, "name": name}

        check_theme_payload(theme_id, payload, active)
        record_id = await self._store.insert(
            FragmentCreate(
                scope=FragmentScope.THEME,
                owner_key=theme_id,
                payload=payload,
                active=active,
            )
        )
        self.invalidate_all()
        logger.info("theme_created", theme_id=theme_id, active=active)

        if active:
            self._transition(theme_id)
            theme = await self.get_active_theme()
            await self._bus.publish(theme.id, theme)
        return record_id

    async def update_theme(
        self,
        theme_id: str,
        payload: dict[str, Any],
        *,
        name: str | None = None,
    ) -> Theme:
        """Replace a theme's payload and return the rebuilt theme."""
        record = await self._require_record(theme_id)
        if name is not None:
            payload = {**payload, "name": name}

        check_theme_payload(theme_id, payload, record.active)
        updated = await self._store.update(record.id, FragmentUpdate(payload=payload))
        self.invalidate_all()
        logger.info("theme_updated", theme_id=theme_id)

        theme = build_theme(updated)
        if updated.active:
            await self._bus.publish(theme.id, theme)
        return theme

    async def delete_theme(self, theme_id: str) -> None:
        """Delete an inactive theme.

        Raises:
            InvalidMutationError: If the theme is missing or active
        """
        record = await self._require_record(theme_id)
        if record.active:
            raise InvalidMutationError(
                f"Cannot delete the active theme: {theme_id}",
                field="theme_id",
            )

        await self._store.delete(record.id)
        self.invalidate_all()
        logger.info("theme_deleted", theme_id=theme_id)
