"""StyleEngine: the consumer-facing entry point.

Owns the record store, one TTL cache per resolver, the resolvers and the
background sweeper. Page and component reads default to the active theme.

Usage:
    async with StyleEngine.from_settings() as engine:
        button = await engine.get_component_styles("Button")
        css = engine.generate_css_styles(button)
"""

import time
from collections.abc import Callable
from typing import Any

from stylecast.cache import CacheSweeper, TTLCache
from stylecast.config import Settings, get_settings
from stylecast.observability.logging import get_logger, setup_logging
from stylecast.observability.metrics import render_metrics
from stylecast.styles import css
from stylecast.styles.exceptions import FragmentNotFoundError, InvalidMutationError
from stylecast.styles.models import (
    Breakpoint,
    ConfigurationFragment,
    FragmentUpdate,
    InteractionState,
    OrderUpdate,
    ResolvedStyleConfiguration,
    Theme,
    ThemeSummary,
)
from stylecast.styles.resolvers import (
    ComponentStyleResolver,
    PageStyleResolver,
    ScopedStyleResolver,
    ThemeResolver,
    compose_instance_style,
)
from stylecast.styles.resolvers.base import UpdateListener
from stylecast.styles.stores import RecordStore, create_record_store

logger = get_logger(__name__)


class StyleEngine:
    """Resolve, cache and synthesize styles over one record store."""

    def __init__(
        self,
        store: RecordStore,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Record store holding style fragments
            settings: Settings (defaults to model defaults)
            clock: Monotonic clock for the caches, injectable for tests
        """
        self._settings = settings or Settings()
        self._store = store
        cache_config = self._settings.cache

        self._theme_cache = TTLCache("theme", cache_config.theme_ttl_seconds, clock)
        self._page_cache = TTLCache("page", cache_config.page_ttl_seconds, clock)
        self._component_cache = TTLCache("component", cache_config.component_ttl_seconds, clock)

        self.themes = ThemeResolver(
            store,
            self._theme_cache,
            default_theme_id=self._settings.default_theme_id,
        )
        self.pages = PageStyleResolver(store, self._page_cache, self.themes)
        self.components = ComponentStyleResolver(store, self._component_cache, self.themes)

        self._sweeper = CacheSweeper(
            [self._theme_cache, self._page_cache, self._component_cache],
            interval_seconds=cache_config.sweep_interval_seconds,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "StyleEngine":
        """Build an engine, its store and its logging from settings."""
        settings = settings or get_settings()
        log_config = settings.observability.logging
        setup_logging(
            level=log_config.level,
            format=log_config.format,
            redact_secrets=log_config.redact_secrets,
        )
        return cls(create_record_store(settings.store), settings)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def store(self) -> RecordStore:
        return self._store

    async def __aenter__(self) -> "StyleEngine":
        await self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def start(self) -> None:
        """Start the background cache sweeper."""
        await self._sweeper.start()

    async def stop(self) -> None:
        await self._sweeper.stop()

    async def close(self) -> None:
        """Stop the sweeper and release the store."""
        await self.stop()
        await self._store.close()

    def sweep_expired(self) -> int:
        """Remove expired entries from every cache now."""
        return self._sweeper.sweep_once()

    def clear_caches(self) -> None:
        self.themes.clear_cache()
        self.pages.clear_cache()
        self.components.clear_cache()

    def metrics(self) -> bytes:
        """Prometheus exposition of the engine metrics, empty when disabled."""
        if not self._settings.observability.metrics.enabled:
            return b""
        return render_metrics()

    async def _theme_id(self, theme_id: str | None) -> str:
        if theme_id is not None:
            return theme_id
        return (await self.themes.get_active_theme()).id

    # Themes
    async def get_active_theme(self) -> Theme:
        return await self.themes.get_active_theme()

    async def get_theme(self, theme_id: str) -> Theme | None:
        return await self.themes.get_theme(theme_id)

    async def get_all_themes(self) -> list[ThemeSummary]:
        return await self.themes.get_all_themes()

    async def switch_theme(self, theme_id: str) -> Theme:
        """Activate a theme. Cached page and component styles stay valid."""
        return await self.themes.switch_theme(theme_id)

    async def create_theme(
        self,
        theme_id: str,
        payload: dict[str, Any],
        *,
        name: str | None = None,
        active: bool = False,
    ) -> str:
        record_id = await self.themes.create_theme(theme_id, payload, name=name, active=active)
        self._invalidate_theme_styles(theme_id)
        return record_id

    async def update_theme(
        self,
        theme_id: str,
        payload: dict[str, Any],
        *,
        name: str | None = None,
    ) -> Theme:
        theme = await self.themes.update_theme(theme_id, payload, name=name)
        self._invalidate_theme_styles(theme_id)
        return theme

    async def delete_theme(self, theme_id: str) -> None:
        await self.themes.delete_theme(theme_id)
        self._invalidate_theme_styles(theme_id)

    def _invalidate_theme_styles(self, theme_id: str) -> None:
        # page and component layers embed the theme record
        self.pages.invalidate_theme(theme_id)
        self.components.invalidate_theme(theme_id)

    # Pages
    async def get_page_styles(
        self,
        page_name: str,
        theme_id: str | None = None,
    ) -> ResolvedStyleConfiguration:
        return await self.pages.get_page_styles(await self._theme_id(theme_id), page_name)

    async def get_page_section_styles(
        self,
        page_name: str,
        section_name: str,
        theme_id: str | None = None,
    ) -> ResolvedStyleConfiguration:
        return await self.pages.get_page_section_styles(
            await self._theme_id(theme_id),
            page_name,
            section_name,
        )

    async def get_page_sections(self, page_name: str, theme_id: str | None = None) -> list[str]:
        return await self.pages.get_page_sections(await self._theme_id(theme_id), page_name)

    async def create_page_style(
        self,
        page_name: str,
        payload: dict[str, Any],
        *,
        section: str | None = None,
        sort_order: int = 0,
        active: bool = True,
        theme_id: str | None = None,
    ) -> str:
        return await self.pages.create_page_style(
            await self._theme_id(theme_id),
            page_name,
            payload,
            section=section,
            sort_order=sort_order,
            active=active,
        )

    async def update_page_style(self, fragment_id: str, changes: FragmentUpdate) -> ConfigurationFragment:
        return await self.pages.update_page_style(fragment_id, changes)

    async def delete_page_style(self, fragment_id: str) -> None:
        await self.pages.delete_page_style(fragment_id)

    async def toggle_page_style_active(
        self,
        fragment_id: str,
        active: bool | None = None,
    ) -> ConfigurationFragment:
        return await self.pages.toggle_page_style_active(fragment_id, active)

    async def update_page_styles_order(self, updates: list[OrderUpdate]) -> list[ConfigurationFragment]:
        return await self.pages.update_page_styles_order(updates)

    # Components
    async def get_component_styles(
        self,
        component_name: str,
        theme_id: str | None = None,
    ) -> ResolvedStyleConfiguration:
        return await self.components.get_component_styles(
            await self._theme_id(theme_id),
            component_name,
        )

    async def get_component_variant_styles(
        self,
        component_name: str,
        variant: str,
        theme_id: str | None = None,
    ) -> ResolvedStyleConfiguration:
        return await self.components.get_component_variant_styles(
            await self._theme_id(theme_id),
            component_name,
            variant,
        )

    async def get_component_variants(self, component_name: str, theme_id: str | None = None) -> list[str]:
        return await self.components.get_component_variants(
            await self._theme_id(theme_id),
            component_name,
        )

    async def get_theme_components(self, theme_id: str | None = None) -> list[str]:
        return await self.components.get_theme_components(await self._theme_id(theme_id))

    async def get_instance_style(
        self,
        component_name: str,
        *,
        variant: str | None = None,
        state: InteractionState | str | None = None,
        breakpoint: Breakpoint | str | None = None,
        theme_id: str | None = None,
    ) -> dict[str, Any]:
        """Flat properties for one rendered component instance."""
        config = await self.get_component_styles(component_name, theme_id)
        return compose_instance_style(config, variant, state, breakpoint)

    async def create_component_style(
        self,
        component_name: str,
        payload: dict[str, Any],
        *,
        variant: str | None = None,
        sort_order: int = 0,
        active: bool = True,
        theme_id: str | None = None,
    ) -> str:
        return await self.components.create_component_style(
            await self._theme_id(theme_id),
            component_name,
            payload,
            variant=variant,
            sort_order=sort_order,
            active=active,
        )

    async def update_component_style(
        self,
        fragment_id: str,
        changes: FragmentUpdate,
    ) -> ConfigurationFragment:
        return await self.components.update_component_style(fragment_id, changes)

    async def delete_component_style(self, fragment_id: str) -> None:
        await self.components.delete_component_style(fragment_id)

    async def toggle_component_style_active(
        self,
        fragment_id: str,
        active: bool | None = None,
    ) -> ConfigurationFragment:
        return await self.components.toggle_component_style_active(fragment_id, active)

    async def update_component_styles_order(
        self,
        updates: list[OrderUpdate],
    ) -> list[ConfigurationFragment]:
        return await self.components.update_component_styles_order(updates)

    # Scope-agnostic mutations
    async def _resolver_for(self, fragment_id: str) -> ScopedStyleResolver:
        fragment = await self._store.get(fragment_id)
        if fragment is None:
            raise FragmentNotFoundError(fragment_id)
        if fragment.scope in self.pages.scopes:
            return self.pages
        if fragment.scope in self.components.scopes:
            return self.components
        raise InvalidMutationError(
            "Theme records change through the theme operations",
            field="scope",
        )

    async def toggle_active(self, fragment_id: str, active: bool | None = None) -> ConfigurationFragment:
        """Set or flip the active flag of any page or component fragment."""
        resolver = await self._resolver_for(fragment_id)
        return await resolver.toggle_active(fragment_id, active)

    async def update_order(self, updates: list[OrderUpdate]) -> list[ConfigurationFragment]:
        """Reorder page and component fragments in one store write.

        Every id is checked before anything is written, so a bad id leaves
        all sort orders as they were.
        """
        for update in updates:
            await self._resolver_for(update.id)

        fragments = await self._store.reorder(updates)
        for resolver in (self.pages, self.components):
            reordered = [f for f in fragments if f.scope in resolver.scopes]
            if reordered:
                await resolver.apply_reordered(reordered)
        return fragments

    # Synthesis
    @staticmethod
    def generate_css_styles(config: ResolvedStyleConfiguration) -> str:
        return css.generate_css_styles(config)

    async def generate_theme_css(self, theme_id: str | None = None) -> str:
        """Custom-property declarations for a theme, the active one by default."""
        theme = None
        if theme_id is not None:
            theme = await self.themes.get_theme(theme_id)
        if theme is None:
            theme = await self.themes.get_active_theme()
        return css.generate_theme_variables(theme)

    async def generate_page_css(self, page_name: str, theme_id: str | None = None) -> str:
        config = await self.get_page_styles(page_name, theme_id)
        return css.generate_page_variables(config, page_name)

    async def generate_component_css(self, component_name: str, theme_id: str | None = None) -> str:
        config = await self.get_component_styles(component_name, theme_id)
        return css.generate_component_variables(config, component_name)

    # Subscriptions
    def on_style_update(self, listener: UpdateListener[ResolvedStyleConfiguration]) -> Callable[[], None]:
        """Listen for page and component updates. Returns an unsubscribe handle."""
        self.pages.subscribe(listener)
        self.components.subscribe(listener)

        def _unsubscribe() -> None:
            self.off_style_update(listener)

        return _unsubscribe

    def off_style_update(self, listener: UpdateListener[ResolvedStyleConfiguration]) -> bool:
        removed_page = self.pages.unsubscribe(listener)
        removed_component = self.components.unsubscribe(listener)
        return removed_page or removed_component

    def on_theme_update(self, listener: UpdateListener[Theme]) -> Callable[[], None]:
        return self.themes.on_theme_update(listener)

    def off_theme_update(self, listener: UpdateListener[Theme]) -> bool:
        return self.themes.off_theme_update(listener)
