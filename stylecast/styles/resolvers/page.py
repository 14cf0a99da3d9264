"""Page style resolver.

Resolves whole-page styles and independent section overlays for one page
within one theme.
"""

from typing import Any

from stylecast.styles.defaults import default_page_styles
from stylecast.styles.keys import cache_key
from stylecast.styles.merge import fragment_layers, merge_layers
from stylecast.styles.models import (
    PAGE_SCOPES,
    ConfigurationFragment,
    FragmentCreate,
    FragmentScope,
    FragmentUpdate,
    OrderUpdate,
    ResolvedStyleConfiguration,
)
from stylecast.styles.resolvers.base import ScopedStyleResolver


class PageStyleResolver(ScopedStyleResolver):
    """Resolver for page and page-section fragments.

    Whole-page styles layer built-in layout defaults, the theme's page
    layer, then the page's own fragments. Section fragments never feed the
    whole-page object; each section resolves on its own.
    """

    resolver_name = "page"
    key_root = "page"
    scopes = PAGE_SCOPES

    async def _resolve_owner(self, theme_id: str, owner_key: str) -> ResolvedStyleConfiguration:
        return await self.get_page_styles(theme_id, owner_key)

    async def get_page_styles(self, theme_id: str, page_name: str) -> ResolvedStyleConfiguration:
        """Resolve the whole-page configuration. Never raises."""

        async def compute() -> ResolvedStyleConfiguration:
            fragments = await self._store.query(
                FragmentScope.PAGE,
                theme_id=theme_id,
                owner_key=page_name,
            )
            theme_layer = await self._theme_layer(theme_id, "pages", page_name)
            return merge_layers(
                [
                    (None, default_page_styles()),
                    (f"theme:{theme_id}", theme_layer),
                    *fragment_layers(fragments),
                ]
            )

        return await self._cached(
            cache_key(self.key_root, theme_id, page_name, "styles"),
            "get_page_styles",
            compute,
            lambda: ResolvedStyleConfiguration(default_page_styles()),
            cache_fallback=True,
        )

    async def get_page_section_styles(
        self,
        theme_id: str,
        page_name: str,
        section_name: str,
    ) -> ResolvedStyleConfiguration:
        """Resolve one section's overlay. Empty when nothing is stored."""

        async def compute() -> ResolvedStyleConfiguration:
            fragments = await self._store.query(
                FragmentScope.PAGE_SECTION,
                theme_id=theme_id,
                owner_key=page_name,
                sub_key=section_name,
            )
            return merge_layers(fragment_layers(fragments))

        return await self._cached(
            cache_key(self.key_root, theme_id, page_name, "section", section_name),
            "get_page_section_styles",
            compute,
            ResolvedStyleConfiguration,
            cache_fallback=False,
        )

    async def get_page_sections(self, theme_id: str, page_name: str) -> list[str]:
        """Names of sections that have active fragments, sorted."""

        async def compute() -> tuple[str, ...]:
            fragments = await self._store.query(
                FragmentScope.PAGE_SECTION,
                theme_id=theme_id,
                owner_key=page_name,
            )
            return tuple(sorted({f.sub_key for f in fragments if f.sub_key}))

        sections = await self._cached(
            cache_key(self.key_root, theme_id, page_name, "sections"),
            "get_page_sections",
            compute,
            tuple,
            cache_fallback=False,
        )
        return list(sections)

    async def create_page_style(
        self,
        theme_id: str,
        page_name: str,
        payload: dict[str, Any],
        *,
        section: str | None = None,
        sort_order: int = 0,
        active: bool = True,
    ) -> str:
        """Create a page fragment, or a section fragment when section is given."""
        return await self.create_style(
            FragmentCreate(
                theme_id=theme_id,
                scope=FragmentScope.PAGE_SECTION if section else FragmentScope.PAGE,
                owner_key=page_name,
                sub_key=section,
                payload=payload,
                sort_order=sort_order,
                active=active,
            )
        )

    async def update_page_style(self, fragment_id: str, changes: FragmentUpdate) -> ConfigurationFragment:
        return await self.update_style(fragment_id, changes)

    async def delete_page_style(self, fragment_id: str) -> None:
        await self.delete_style(fragment_id)

    async def toggle_page_style_active(
        self,
        fragment_id: str,
        active: bool | None = None,
    ) -> ConfigurationFragment:
        return await self.toggle_active(fragment_id, active)

    async def update_page_styles_order(self, updates: list[OrderUpdate]) -> list[ConfigurationFragment]:
        return await self.update_order(updates)
