"""Configuration fragment models.

A fragment is one persisted slice of style configuration. Rows read from the
store are frozen; edits go through FragmentCreate / FragmentUpdate and
produce new rows.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from stylecast.styles.exceptions import InvalidMutationError
from stylecast.styles.models.base import new_id, utc_now
from stylecast.styles.models.enums import FragmentScope


class ConfigurationFragment(BaseModel):
    """A persisted style fragment as read from the record store.

    The payload is kept as stored (a mapping or a serialized JSON string) and
    is only interpreted at merge time, so one bad row cannot break a query.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(default_factory=new_id, description="Record identifier")
    theme_id: str | None = Field(default=None, description="Owning theme for page/component rows")
    scope: FragmentScope = Field(..., description="Level at which the fragment applies")
    owner_key: str = Field(..., description="Theme id, page name or component name")
    sub_key: str | None = Field(default=None, description="Section or variant name")
    payload: Any = Field(default_factory=dict, description="Nested property-group map")
    sort_order: int = Field(default=0, description="Merge position, ascending")
    active: bool = Field(default=True, description="Whether the fragment participates in resolution")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class FragmentCreate(BaseModel):
    """Fields for a new fragment."""

    model_config = ConfigDict(extra="forbid")

    theme_id: str | None = None
    scope: FragmentScope
    owner_key: str = Field(..., min_length=1)
    sub_key: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    sort_order: int = 0
    active: bool = True


class FragmentUpdate(BaseModel):
    """Partial update of an existing fragment. Only set fields are applied."""

    model_config = ConfigDict(extra="forbid")

    owner_key: str | None = Field(default=None, min_length=1)
    sub_key: str | None = None
    payload: dict[str, Any] | None = None
    sort_order: int | None = None
    active: bool | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class OrderUpdate(BaseModel):
    """New sort position for one fragment."""

    id: str
    sort_order: int


def check_fragment_shape(
    scope: FragmentScope,
    theme_id: str | None,
    sub_key: str | None,
) -> None:
    """Validate the scope/theme/sub key combination of a row.

    Raises:
        InvalidMutationError: If the combination is not allowed
    """
    if scope.requires_sub_key and not sub_key:
        raise InvalidMutationError(f"{scope.value} fragments need a sub key", field="sub_key")
    if not scope.requires_sub_key and sub_key is not None:
        raise InvalidMutationError(f"{scope.value} fragments cannot have a sub key", field="sub_key")
    if scope.requires_theme and not theme_id:
        raise InvalidMutationError(f"{scope.value} fragments need a theme id", field="theme_id")
