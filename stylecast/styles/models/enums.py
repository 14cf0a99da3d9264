"""Enums for the style domain."""

from enum import Enum


class FragmentScope(str, Enum):
    """Level at which a configuration fragment applies.

    - THEME: global token set, one row per theme
    - PAGE: whole-page styles, no sub key
    - PAGE_SECTION: one named region of a page, sub key is the section name
    - COMPONENT: reusable component base styles, no sub key
    - COMPONENT_VARIANT: named component variant, sub key is the variant name
    """

    THEME = "theme"
    PAGE = "page"
    PAGE_SECTION = "page-section"
    COMPONENT = "component"
    COMPONENT_VARIANT = "component-variant"

    @property
    def requires_sub_key(self) -> bool:
        return self in (FragmentScope.PAGE_SECTION, FragmentScope.COMPONENT_VARIANT)

    @property
    def requires_theme(self) -> bool:
        return self is not FragmentScope.THEME


PAGE_SCOPES = (FragmentScope.PAGE, FragmentScope.PAGE_SECTION)
COMPONENT_SCOPES = (FragmentScope.COMPONENT, FragmentScope.COMPONENT_VARIANT)


class InteractionState(str, Enum):
    """Interaction states rendered as pseudo-class blocks."""

    HOVER = "hover"
    ACTIVE = "active"
    FOCUS = "focus"
    DISABLED = "disabled"
    LOADING = "loading"


class Breakpoint(str, Enum):
    """Responsive breakpoints with fixed media thresholds."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


class ThemeState(str, Enum):
    """Theme resolver lifecycle."""

    NO_ACTIVE_THEME = "no_active_theme"
    ACTIVE_THEME = "active_theme"
