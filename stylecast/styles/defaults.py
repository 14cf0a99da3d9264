"""Built-in fallback styles.

These are the lowest precedence layer of every resolution and the whole
answer when the record store cannot be reached.
"""

import copy
from typing import Any

DEFAULT_THEME_ID = "default"
DEFAULT_THEME_NAME = "Default Theme"

DEFAULT_THEME_TOKENS: dict[str, dict[str, Any]] = {
    "palette": {
        "primary": "#3b82f6",
        "secondary": "#64748b",
        "accent": "#f59e0b",
        "background": "#ffffff",
        "text": "#1f2937",
        "border": "#e5e7eb",
        "success": "#10b981",
        "warning": "#f59e0b",
        "error": "#ef4444",
    },
    "typography": {
        "primary": "Inter, sans-serif",
        "secondary": "Georgia, serif",
        "sizes": {
            "xs": "0.75rem",
            "sm": "0.875rem",
            "base": "1rem",
            "lg": "1.125rem",
            "xl": "1.25rem",
            "2xl": "1.5rem",
            "3xl": "1.875rem",
        },
    },
    "spacing": {
        "xs": "0.25rem",
        "sm": "0.5rem",
        "md": "1rem",
        "lg": "1.5rem",
        "xl": "2rem",
        "2xl": "3rem",
    },
    "radius": {
        "none": "0",
        "sm": "0.125rem",
        "md": "0.375rem",
        "lg": "0.5rem",
        "full": "9999px",
    },
    "elevation": {
        "sm": "0 1px 2px 0 rgb(0 0 0 / 0.05)",
        "md": "0 4px 6px -1px rgb(0 0 0 / 0.1)",
        "lg": "0 10px 15px -3px rgb(0 0 0 / 0.1)",
        "xl": "0 20px 25px -5px rgb(0 0 0 / 0.1)",
    },
}

DEFAULT_PAGE_STYLES: dict[str, dict[str, Any]] = {
    "layout": {
        "maxWidth": "1200px",
        "padding": "0 1rem",
        "margin": "0 auto",
        "gap": "1rem",
    },
    "header": {
        "height": "64px",
        "background": "#ffffff",
        "borderBottom": "1px solid #e8e8e8",
        "position": "sticky",
    },
    "footer": {
        "background": "#f5f5f5",
        "borderTop": "1px solid #e8e8e8",
        "position": "static",
    },
    "content": {
        "background": "#ffffff",
        "padding": "1rem",
        "borderRadius": "8px",
    },
    "navigation": {
        "background": "transparent",
        "activeColor": "#1677ff",
        "hoverColor": "#4096ff",
        "fontSize": "14px",
    },
    "section": {
        "padding": "2rem 0",
        "margin": "0",
        "background": "transparent",
    },
}

DEFAULT_COMPONENT_STYLES: dict[str, dict[str, dict[str, Any]]] = {
    "Button": {
        "base": {
            "display": "inline-flex",
            "alignItems": "center",
            "justifyContent": "center",
            "padding": "8px 16px",
            "border": "1px solid #d9d9d9",
            "borderRadius": "6px",
            "background": "#ffffff",
            "color": "#262626",
            "fontSize": "14px",
            "fontWeight": "400",
            "lineHeight": "1.5",
            "cursor": "pointer",
            "transition": "all 0.2s ease",
        },
        "hover": {
            "background": "#f5f5f5",
            "borderColor": "#4096ff",
        },
        "active": {
            "background": "#e6f4ff",
            "borderColor": "#1677ff",
        },
        "disabled": {
            "background": "#f5f5f5",
            "color": "#bfbfbf",
            "cursor": "not-allowed",
            "opacity": "0.6",
        },
    },
    "Input": {
        "base": {
            "display": "block",
            "width": "100%",
            "padding": "8px 12px",
            "border": "1px solid #d9d9d9",
            "borderRadius": "6px",
            "background": "#ffffff",
            "color": "#262626",
            "fontSize": "14px",
            "lineHeight": "1.5",
            "transition": "all 0.2s ease",
        },
        "focus": {
            "borderColor": "#4096ff",
            "boxShadow": "0 0 0 2px rgba(22, 119, 255, 0.1)",
        },
        "disabled": {
            "background": "#f5f5f5",
            "color": "#bfbfbf",
            "cursor": "not-allowed",
        },
    },
    "Card": {
        "base": {
            "background": "#ffffff",
            "border": "1px solid #f0f0f0",
            "borderRadius": "8px",
            "padding": "16px",
            "boxShadow": "0 2px 8px rgba(0, 0, 0, 0.06)",
        },
    },
}

GENERIC_COMPONENT_STYLES: dict[str, dict[str, Any]] = {"base": {"display": "block"}}


def default_theme_tokens() -> dict[str, dict[str, Any]]:
    return copy.deepcopy(DEFAULT_THEME_TOKENS)


def default_page_styles() -> dict[str, dict[str, Any]]:
    return copy.deepcopy(DEFAULT_PAGE_STYLES)


def default_component_styles(component_name: str) -> dict[str, dict[str, Any]]:
    """Fallback declarations for a component, generic when the name is unknown."""
    return copy.deepcopy(DEFAULT_COMPONENT_STYLES.get(component_name, GENERIC_COMPONENT_STYLES))
