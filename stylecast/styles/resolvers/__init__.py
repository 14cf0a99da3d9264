"""Style resolvers for themes, pages and components."""

from stylecast.styles.resolvers.base import CachedResolver, ScopedStyleResolver
from stylecast.styles.resolvers.component import ComponentStyleResolver, compose_instance_style
from stylecast.styles.resolvers.page import PageStyleResolver
from stylecast.styles.resolvers.theme import ThemeResolver, build_theme

__all__ = [
    "CachedResolver",
    "ComponentStyleResolver",
    "PageStyleResolver",
    "ScopedStyleResolver",
    "ThemeResolver",
    "build_theme",
    "compose_instance_style",
]
