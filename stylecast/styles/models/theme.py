"""Theme model: the global token set plus optional theme-level style layers."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Payload keys accepted for each token group; the second name is the one
# older theme rows were written with.
TOKEN_GROUP_ALIASES: dict[str, tuple[str, ...]] = {
    "palette": ("palette", "colors"),
    "typography": ("typography", "fonts"),
    "spacing": ("spacing",),
    "radius": ("radius", "borderRadius"),
    "elevation": ("elevation", "shadows"),
}


class Theme(BaseModel):
    """A resolved theme.

    Frozen: a resolved theme is built in one step from one record, so a
    reader never sees a mix of two themes.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., description="Theme identifier")
    name: str = Field(default="", description="Display name")
    palette: dict[str, str] = Field(default_factory=dict, description="Color tokens")
    typography: dict[str, Any] = Field(
        default_factory=dict,
        description="Font families and a nested 'sizes' scale",
    )
    spacing: dict[str, str] = Field(default_factory=dict, description="Spacing scale")
    radius: dict[str, str] = Field(default_factory=dict, description="Border radius scale")
    elevation: dict[str, str] = Field(default_factory=dict, description="Shadow scale")
    components: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Theme-level component style layers, keyed by component name",
    )
    pages: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Theme-level page style layers, keyed by page name",
    )
    active: bool = Field(default=False, description="Whether this is the active theme")
    is_fallback: bool = Field(
        default=False,
        description="True when built from built-in defaults instead of a record",
    )

    def tokens(self) -> dict[str, Any]:
        """Token groups as a plain dict."""
        return {
            "palette": dict(self.palette),
            "typography": dict(self.typography),
            "spacing": dict(self.spacing),
            "radius": dict(self.radius),
            "elevation": dict(self.elevation),
        }


class ThemeSummary(BaseModel):
    """Listing entry for the theme picker."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    active: bool
