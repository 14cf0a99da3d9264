"""Stylesheet text synthesis from resolved configurations.

generate_css_styles() renders one component or page region:

    background: #fff; padding: 8px;
    &:hover { background: #eee; }
    @media (max-width: 768px) { padding: 4px; }

Pseudo-state blocks use the nesting selector, so the output is meant to be
placed inside a rule (see generate_css_rule) or fed to a CSS-in-JS runtime.
Variants are not rendered; a caller merges the selected variant into "base"
first. The *_variables() helpers emit :root custom-property declarations.
"""

import re
from collections.abc import Mapping
from typing import Any

from stylecast.styles.models.resolved import BASE_GROUP, RESPONSIVE_GROUP, STATE_GROUPS
from stylecast.styles.models.theme import Theme

MEDIA_QUERIES: dict[str, str] = {
    "mobile": "@media (max-width: 768px)",
    "tablet": "@media (min-width: 769px) and (max-width: 1024px)",
    "desktop": "@media (min-width: 1025px)",
}

_UPPER = re.compile(r"([A-Z])")
_VENDOR_MS = re.compile(r"^ms[A-Z]")
_NON_IDENT = re.compile(r"[^a-z0-9-]+")


def to_css_property(name: str) -> str:
    """Convert a structured property name to its hyphenated CSS form.

    camelCase becomes kebab-case, vendor prefixes keep their leading dash
    (WebkitTransition, msTransform), custom properties pass through.
    """
    if name.startswith("--"):
        return name
    if _VENDOR_MS.match(name):
        name = "M" + name[1:]
    return _UPPER.sub(r"-\1", name).lower()


def _slug(value: str) -> str:
    return _NON_IDENT.sub("-", to_css_property(value).lstrip("-")).strip("-")


def _format_value(value: Any) -> str | None:
    if value is None or isinstance(value, Mapping):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def declarations(properties: Mapping[str, Any]) -> str:
    """Render a flat property map as `prop: value;` declarations.

    Nested maps and None values are not declarations and are left out.
    """
    rendered: list[str] = []
    for name, value in properties.items():
        formatted = _format_value(value)
        if formatted is None:
            continue
        rendered.append(f"{to_css_property(name)}: {formatted};")
    return " ".join(rendered)


def generate_css_styles(config: Mapping[str, Any]) -> str:
    """Render base, pseudo-state and responsive groups as stylesheet text.

    Absent or empty groups produce no block; unknown groups are ignored.
    """
    rules: list[str] = []

    base = config.get(BASE_GROUP)
    if isinstance(base, Mapping):
        base_declarations = declarations(base)
        if base_declarations:
            rules.append(base_declarations)

    for state in STATE_GROUPS:
        group = config.get(state)
        if not isinstance(group, Mapping):
            continue
        state_declarations = declarations(group)
        if state_declarations:
            rules.append(f"&:{state} {{ {state_declarations} }}")

    responsive = config.get(RESPONSIVE_GROUP)
    if isinstance(responsive, Mapping):
        for breakpoint, query in MEDIA_QUERIES.items():
            group = responsive.get(breakpoint)
            if not isinstance(group, Mapping):
                continue
            breakpoint_declarations = declarations(group)
            if breakpoint_declarations:
                rules.append(f"{query} {{ {breakpoint_declarations} }}")

    return "\n".join(rules)


def generate_css_rule(selector: str, config: Mapping[str, Any]) -> str:
    """Wrap generate_css_styles() output in a rule for selector."""
    body = generate_css_styles(config)
    if not body:
        return ""
    return f"{selector} {{\n{body}\n}}"


def _root_block(variables: list[str]) -> str:
    return f":root {{ {' '.join(variables)} }}" if variables else ""


def generate_theme_variables(theme: Theme) -> str:
    """Emit the theme's tokens as :root custom properties."""
    variables: list[str] = []

    for key, value in theme.palette.items():
        variables.append(f"--color-{_slug(key)}: {value};")

    for family in ("primary", "secondary"):
        if theme.typography.get(family):
            variables.append(f"--font-{family}: {theme.typography[family]};")
    sizes = theme.typography.get("sizes")
    if isinstance(sizes, Mapping):
        for key, value in sizes.items():
            variables.append(f"--font-size-{_slug(key)}: {value};")

    for key, value in theme.spacing.items():
        variables.append(f"--spacing-{_slug(key)}: {value};")
    for key, value in theme.radius.items():
        variables.append(f"--border-radius-{_slug(key)}: {value};")
    for key, value in theme.elevation.items():
        variables.append(f"--shadow-{_slug(key)}: {value};")

    return _root_block(variables)


def generate_page_variables(config: Mapping[str, Any], page_name: str) -> str:
    """Emit every scalar page property as --{page}-{group}-{property}."""
    variables: list[str] = []
    page = _slug(page_name)

    for group, properties in config.items():
        if not isinstance(properties, Mapping):
            continue
        for name, value in properties.items():
            if isinstance(value, (str, int, float)) and not isinstance(value, bool):
                variables.append(f"--{page}-{_slug(group)}-{to_css_property(name)}: {value};")

    return _root_block(variables)


def generate_component_variables(config: Mapping[str, Any], component_name: str) -> str:
    """Emit base and interaction-state properties as component custom properties."""
    variables: list[str] = []
    component = _slug(component_name)

    base = config.get(BASE_GROUP)
    if isinstance(base, Mapping):
        for name, value in base.items():
            formatted = _format_value(value)
            if formatted is not None:
                variables.append(f"--{component}-{to_css_property(name)}: {formatted};")

    for state in STATE_GROUPS:
        group = config.get(state)
        if not isinstance(group, Mapping):
            continue
        for name, value in group.items():
            formatted = _format_value(value)
            if formatted is not None:
                variables.append(f"--{component}-{state}-{to_css_property(name)}: {formatted};")

    return _root_block(variables)
