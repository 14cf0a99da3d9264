"""RecordStore abstract interface.

The gateway to persisted style fragments. Every method is a network
round-trip in production: failures surface as StoreUnavailableError,
constraint violations on writes as InvalidMutationError.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from stylecast.styles.models import (
    ConfigurationFragment,
    FragmentCreate,
    FragmentScope,
    FragmentUpdate,
    OrderUpdate,
)

ScopeFilter = FragmentScope | Iterable[FragmentScope]


def normalize_scopes(scope: ScopeFilter) -> tuple[FragmentScope, ...]:
    if isinstance(scope, FragmentScope):
        return (scope,)
    return tuple(scope)


class RecordStore(ABC):
    """Abstract interface for style fragment storage."""

    @abstractmethod
    async def query(
        self,
        scope: ScopeFilter,
        *,
        theme_id: str | None = None,
        owner_key: str | None = None,
        sub_key: str | None = None,
        active_only: bool = True,
    ) -> list[ConfigurationFragment]:
        """Get fragments matching the filters, ordered by sort order.

        None filters match anything.
        """
        pass

    @abstractmethod
    async def get(self, fragment_id: str) -> ConfigurationFragment | None:
        """Get a fragment by ID, active or not."""
        pass

    @abstractmethod
    async def insert(self, fragment: FragmentCreate) -> str:
        """Insert a fragment, returning its ID."""
        pass

    @abstractmethod
    async def update(self, fragment_id: str, changes: FragmentUpdate) -> ConfigurationFragment:
        """Apply a partial update, returning the new row."""
        pass

    @abstractmethod
    async def delete(self, fragment_id: str) -> None:
        """Delete a fragment."""
        pass

    @abstractmethod
    async def set_active_exclusive(self, fragment_id: str) -> ConfigurationFragment:
        """Atomically deactivate every theme row and activate this one."""
        pass

    @abstractmethod
    async def reorder(self, updates: list[OrderUpdate]) -> list[ConfigurationFragment]:
        """Atomically apply new sort orders, returning the updated rows."""
        pass

    async def close(self) -> None:  # noqa: B027
        """Release connections. No-op by default."""
