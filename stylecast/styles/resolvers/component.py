"""Component style resolver.

Resolves a component's base configuration with its variants folded in,
single-variant views, and the flat style of one rendered instance.
"""

from collections.abc import Mapping
from typing import Any

from stylecast.styles.defaults import default_component_styles
from stylecast.styles.keys import cache_key
from stylecast.styles.merge import MergeLayer, deep_merge_styles, merge_layers, safe_parse
from stylecast.styles.models import (
    COMPONENT_SCOPES,
    Breakpoint,
    ConfigurationFragment,
    FragmentCreate,
    FragmentScope,
    FragmentUpdate,
    InteractionState,
    OrderUpdate,
    ResolvedStyleConfiguration,
)
from stylecast.styles.models.resolved import BASE_GROUP, RESPONSIVE_GROUP, VARIANTS_GROUP
from stylecast.styles.resolvers.base import ScopedStyleResolver


def _group(source: Mapping[str, Any] | None, *path: str) -> Mapping[str, Any] | None:
    node: Any = source
    for part in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(part)
    return node if isinstance(node, Mapping) else None


def _known(kind: type[InteractionState] | type[Breakpoint], value: str) -> str | None:
    try:
        return kind(value).value
    except ValueError:
        return None


def compose_instance_style(
    config: Mapping[str, Any],
    variant: str | None = None,
    state: InteractionState | str | None = None,
    breakpoint: Breakpoint | str | None = None,
) -> dict[str, Any]:
    """Flatten the properties one rendered component instance receives.

    Precedence, lowest first: component base, variant base, component state
    overlay, variant state overlay, component responsive overlay, variant
    responsive overlay. An unknown state or breakpoint contributes nothing.
    """
    variant_config = _group(config, VARIANTS_GROUP, variant) if variant else None

    paths: list[tuple[str, ...]] = [(BASE_GROUP,)]
    state_name = _known(InteractionState, state) if state is not None else None
    if state_name is not None:
        paths.append((state_name,))
    breakpoint_name = _known(Breakpoint, breakpoint) if breakpoint is not None else None
    if breakpoint_name is not None:
        paths.append((RESPONSIVE_GROUP, breakpoint_name))

    result: dict[str, Any] = {}
    for path in paths:
        for source in (config, variant_config):
            layer = _group(source, *path)
            if layer is not None:
                result = deep_merge_styles(result, layer)
    return result


class ComponentStyleResolver(ScopedStyleResolver):
    """Resolver for component and component-variant fragments."""

    resolver_name = "component"
    key_root = "component"
    scopes = COMPONENT_SCOPES

    def _list_key(self, theme_id: str) -> str:
        return cache_key("component-list", theme_id)

    def _related_keys(self, theme_id: str) -> list[str]:
        return [self._list_key(theme_id)]

    async def _resolve_owner(self, theme_id: str, owner_key: str) -> ResolvedStyleConfiguration:
        return await self.get_component_styles(theme_id, owner_key)

    async def get_component_styles(self, theme_id: str, component_name: str) -> ResolvedStyleConfiguration:
        """Resolve a component with every variant under "variants". Never raises."""

        async def compute() -> ResolvedStyleConfiguration:
            fragments = await self._store.query(
                COMPONENT_SCOPES,
                theme_id=theme_id,
                owner_key=component_name,
            )
            theme_layer = await self._theme_layer(theme_id, "components", component_name)

            layers: list[MergeLayer] = [
                (None, default_component_styles(component_name)),
                (f"theme:{theme_id}", theme_layer),
            ]
            for fragment in sorted(fragments, key=lambda f: f.sort_order):
                if fragment.scope is FragmentScope.COMPONENT:
                    layers.append((fragment.id, fragment.payload))
                    continue
                payload = safe_parse(fragment.payload, fragment.id)
                if payload is not None:
                    layers.append((fragment.id, {VARIANTS_GROUP: {fragment.sub_key: payload}}))
            return merge_layers(layers)

        return await self._cached(
            cache_key(self.key_root, theme_id, component_name, "styles"),
            "get_component_styles",
            compute,
            lambda: ResolvedStyleConfiguration(default_component_styles(component_name)),
            cache_fallback=True,
        )

    async def get_component_variant_styles(
        self,
        theme_id: str,
        component_name: str,
        variant: str,
    ) -> ResolvedStyleConfiguration:
        """Resolve the component base with one variant merged over it."""

        def flatten(config: ResolvedStyleConfiguration) -> ResolvedStyleConfiguration:
            root = {k: v for k, v in config.items() if k != VARIANTS_GROUP}
            return merge_layers([(None, root), (variant, config.variants.get(variant))])

        async def compute() -> ResolvedStyleConfiguration:
            return flatten(await self.get_component_styles(theme_id, component_name))

        return await self._cached(
            cache_key(self.key_root, theme_id, component_name, "variant", variant),
            "get_component_variant_styles",
            compute,
            lambda: flatten(ResolvedStyleConfiguration(default_component_styles(component_name))),
            cache_fallback=False,
        )

    async def get_component_variants(self, theme_id: str, component_name: str) -> list[str]:
        """Names of variants that have active fragments, sorted."""

        async def compute() -> tuple[str, ...]:
            fragments = await self._store.query(
                FragmentScope.COMPONENT_VARIANT,
                theme_id=theme_id,
                owner_key=component_name,
            )
            return tuple(sorted({f.sub_key for f in fragments if f.sub_key}))

        variants = await self._cached(
            cache_key(self.key_root, theme_id, component_name, "variants"),
            "get_component_variants",
            compute,
            tuple,
            cache_fallback=False,
        )
        return list(variants)

    async def get_theme_components(self, theme_id: str) -> list[str]:
        """Names of components that have active fragments in a theme, sorted."""

        async def compute() -> tuple[str, ...]:
            fragments = await self._store.query(COMPONENT_SCOPES, theme_id=theme_id)
            return tuple(sorted({f.owner_key for f in fragments}))

        components = await self._cached(
            self._list_key(theme_id),
            "get_theme_components",
            compute,
            tuple,
            cache_fallback=False,
        )
        return list(components)

    async def create_component_style(
        self,
        theme_id: str,
        component_name: str,
        payload: dict[str, Any],
        *,
        variant: str | None = None,
        sort_order: int = 0,
        active: bool = True,
    ) -> str:
        """Create a component fragment, or a variant fragment when variant is given."""
        return await self.create_style(
            FragmentCreate(
                theme_id=theme_id,
                scope=FragmentScope.COMPONENT_VARIANT if variant else FragmentScope.COMPONENT,
                owner_key=component_name,
                sub_key=variant,
                payload=payload,
                sort_order=sort_order,
                active=active,
            )
        )

    async def update_component_style(
        self,
        fragment_id: str,
        changes: FragmentUpdate,
    ) -> ConfigurationFragment:
        return await self.update_style(fragment_id, changes)

    async def delete_component_style(self, fragment_id: str) -> None:
        await self.delete_style(fragment_id)

    async def toggle_component_style_active(
        self,
        fragment_id: str,
        active: bool | None = None,
    ) -> ConfigurationFragment:
        return await self.toggle_active(fragment_id, active)

    async def update_component_styles_order(
        self,
        updates: list[OrderUpdate],
    ) -> list[ConfigurationFragment]:
        return await self.update_order(updates)
