"""In-memory implementation of RecordStore."""

from stylecast.styles.exceptions import FragmentNotFoundError, InvalidMutationError
from stylecast.styles.models import (
    ConfigurationFragment,
    FragmentCreate,
    FragmentScope,
    FragmentUpdate,
    OrderUpdate,
    check_fragment_shape,
)
from stylecast.styles.models.base import utc_now
from stylecast.styles.stores.record_store import RecordStore, ScopeFilter, normalize_scopes


class InMemoryRecordStore(RecordStore):
    """In-memory implementation of RecordStore for testing and development.

    Uses dict storage with linear scan for queries. Each method completes
    without awaiting, so multi-row writes are atomic on the event loop.
    """

    def __init__(self) -> None:
        self._fragments: dict[str, ConfigurationFragment] = {}

    async def query(
        self,
        scope: ScopeFilter,
        *,
        theme_id: str | None = None,
        owner_key: str | None = None,
        sub_key: str | None = None,
        active_only: bool = True,
    ) -> list[ConfigurationFragment]:
        """Get fragments matching the filters, ordered by sort order."""
        scopes = normalize_scopes(scope)
        results = []
        for fragment in self._fragments.values():
            if fragment.scope not in scopes:
                continue
            if theme_id is not None and fragment.theme_id != theme_id:
                continue
            if owner_key is not None and fragment.owner_key != owner_key:
                continue
            if sub_key is not None and fragment.sub_key != sub_key:
                continue
            if active_only and not fragment.active:
                continue
            results.append(fragment)

        results.sort(key=lambda f: (f.sort_order, f.created_at))
        return results

    async def get(self, fragment_id: str) -> ConfigurationFragment | None:
        """Get a fragment by ID."""
        return self._fragments.get(fragment_id)

    async def insert(self, fragment: FragmentCreate) -> str:
        """Insert a fragment, returning its ID."""
        check_fragment_shape(fragment.scope, fragment.theme_id, fragment.sub_key)
        if fragment.scope is FragmentScope.THEME:
            self._check_theme_owner_free(fragment.owner_key)
            if fragment.active:
                self._check_no_active_theme()

        stored = ConfigurationFragment(**fragment.model_dump())
        self._fragments[stored.id] = stored
        return stored.id

    async def update(self, fragment_id: str, changes: FragmentUpdate) -> ConfigurationFragment:
        """Apply a partial update, returning the new row."""
        existing = self._require(fragment_id)
        values = changes.changes()

        check_fragment_shape(existing.scope, existing.theme_id, values.get("sub_key", existing.sub_key))
        if existing.scope is FragmentScope.THEME:
            if values.get("owner_key", existing.owner_key) != existing.owner_key:
                self._check_theme_owner_free(values["owner_key"])
            if values.get("active") and not existing.active:
                self._check_no_active_theme()

        updated = existing.model_copy(update={**values, "updated_at": utc_now()})
        self._fragments[fragment_id] = updated
        return updated

    async def delete(self, fragment_id: str) -> None:
        """Delete a fragment."""
        self._require(fragment_id)
        del self._fragments[fragment_id]

    async def set_active_exclusive(self, fragment_id: str) -> ConfigurationFragment:
        """Deactivate every theme row and activate this one."""
        target = self._require(fragment_id)
        if target.scope is not FragmentScope.THEME:
            raise InvalidMutationError("Only theme fragments can be activated exclusively", field="scope")

        now = utc_now()
        for fragment in list(self._fragments.values()):
            if fragment.scope is not FragmentScope.THEME:
                continue
            should_be_active = fragment.id == fragment_id
            if fragment.active != should_be_active:
                self._fragments[fragment.id] = fragment.model_copy(
                    update={"active": should_be_active, "updated_at": now}
                )
        return self._fragments[fragment_id]

    async def reorder(self, updates: list[OrderUpdate]) -> list[ConfigurationFragment]:
        """Apply new sort orders; nothing is written if any id is unknown."""
        for update in updates:
            self._require(update.id)

        now = utc_now()
        results = []
        for update in updates:
            fragment = self._fragments[update.id].model_copy(
                update={"sort_order": update.sort_order, "updated_at": now}
            )
            self._fragments[update.id] = fragment
            results.append(fragment)
        return results

    def clear(self) -> None:
        """Remove all fragments (test utility)."""
        self._fragments.clear()

    def _require(self, fragment_id: str) -> ConfigurationFragment:
        fragment = self._fragments.get(fragment_id)
        if fragment is None:
            raise FragmentNotFoundError(fragment_id)
        return fragment

    def _check_theme_owner_free(self, owner_key: str) -> None:
        for fragment in self._fragments.values():
            if fragment.scope is FragmentScope.THEME and fragment.owner_key == owner_key:
                raise InvalidMutationError(f"Theme already exists: {owner_key}", field="owner_key")

    def _check_no_active_theme(self) -> None:
        for fragment in self._fragments.values():
            if fragment.scope is FragmentScope.THEME and fragment.active:
                raise InvalidMutationError(
                    "Another theme is active; switch themes to change the active theme",
                    field="active",
                )
