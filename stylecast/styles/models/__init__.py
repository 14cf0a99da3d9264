"""Style domain models."""

from stylecast.styles.models.enums import (
    COMPONENT_SCOPES,
    PAGE_SCOPES,
    Breakpoint,
    FragmentScope,
    InteractionState,
    ThemeState,
)
from stylecast.styles.models.fragment import (
    ConfigurationFragment,
    FragmentCreate,
    FragmentUpdate,
    OrderUpdate,
    check_fragment_shape,
)
from stylecast.styles.models.resolved import ResolvedStyleConfiguration
from stylecast.styles.models.theme import Theme, ThemeSummary

__all__ = [
    "COMPONENT_SCOPES",
    "PAGE_SCOPES",
    "Breakpoint",
    "ConfigurationFragment",
    "FragmentCreate",
    "FragmentScope",
    "FragmentUpdate",
    "InteractionState",
    "OrderUpdate",
    "ResolvedStyleConfiguration",
    "Theme",
    "ThemeState",
    "ThemeSummary",
    "check_fragment_shape",
]
