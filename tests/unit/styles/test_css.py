"""Tests for CSS synthesis."""

import pytest

from stylecast.styles.css import (
    declarations,
    generate_component_variables,
    generate_css_rule,
    generate_css_styles,
    generate_page_variables,
    generate_theme_variables,
    to_css_property,
)
from stylecast.styles.models import ResolvedStyleConfiguration, Theme


class TestToCssProperty:
    """Property name normalization."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("color", "color"),
            ("backgroundColor", "background-color"),
            ("borderTopLeftRadius", "border-top-left-radius"),
            ("background-color", "background-color"),
            ("--brand-color", "--brand-color"),
            ("WebkitTransition", "-webkit-transition"),
            ("msTransform", "-ms-transform"),
        ],
    )
    def test_normalizes(self, name: str, expected: str) -> None:
        assert to_css_property(name) == expected


class TestDeclarations:
    def test_skips_nested_and_none(self) -> None:
        rendered = declarations({"color": "red", "nested": {"a": 1}, "margin": None, "zIndex": 2})
        assert rendered == "color: red; z-index: 2;"


class TestGenerateCssStyles:
    """Base, pseudo-state and media blocks."""

    def test_full_shape(self) -> None:
        config = ResolvedStyleConfiguration(
            {
                "base": {"backgroundColor": "#fff", "padding": "8px"},
                "hover": {"backgroundColor": "#eee"},
                "disabled": {"opacity": "0.5"},
                "responsive": {
                    "desktop": {"padding": "12px"},
                    "mobile": {"padding": "4px"},
                },
            }
        )

        assert generate_css_styles(config) == "\n".join(
            [
                "background-color: #fff; padding: 8px;",
                "&:hover { background-color: #eee; }",
                "&:disabled { opacity: 0.5; }",
                "@media (max-width: 768px) { padding: 4px; }",
                "@media (min-width: 1025px) { padding: 12px; }",
            ]
        )

    def test_tablet_query(self) -> None:
        css = generate_css_styles({"responsive": {"tablet": {"gap": "2px"}}})
        assert css == "@media (min-width: 769px) and (max-width: 1024px) { gap: 2px; }"

    def test_empty_groups_and_unknown_groups_skipped(self) -> None:
        config = {
            "base": {},
            "hover": {},
            "variants": {"primary": {"base": {"color": "blue"}}},
            "header": {"height": "64px"},
        }
        assert generate_css_styles(config) == ""

    def test_rule_wrapper(self) -> None:
        assert generate_css_rule(".btn", {"base": {"color": "red"}}) == ".btn {\ncolor: red;\n}"
        assert generate_css_rule(".btn", {}) == ""


class TestVariableGenerators:
    """:root custom-property output."""

    def test_theme_variables(self) -> None:
        theme = Theme(
            id="light",
            palette={"primary": "#3b82f6"},
            typography={"primary": "Inter", "sizes": {"base": "1rem"}},
            spacing={"md": "1rem"},
            radius={"lg": "0.5rem"},
            elevation={"sm": "0 1px 2px"},
        )
        assert generate_theme_variables(theme) == (
            ":root { --color-primary: #3b82f6; --font-primary: Inter; "
            "--font-size-base: 1rem; --spacing-md: 1rem; "
            "--border-radius-lg: 0.5rem; --shadow-sm: 0 1px 2px; }"
        )

    def test_page_variables(self) -> None:
        config = {"layout": {"maxWidth": "1200px"}, "header": {"sticky": True, "height": 64}}
        assert generate_page_variables(config, "home") == (
            ":root { --home-layout-max-width: 1200px; --home-header-height: 64; }"
        )

    def test_component_variables(self) -> None:
        config = {"base": {"color": "red"}, "hover": {"color": "pink"}}
        assert generate_component_variables(config, "Button") == (
            ":root { --button-color: red; --button-hover-color: pink; }"
        )

    def test_empty_is_blank(self) -> None:
        assert generate_page_variables({}, "home") == ""
        assert generate_component_variables({}, "Card") == ""
