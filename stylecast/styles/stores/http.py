"""REST record store adapter.

Talks to a PostgREST-style endpoint: one table of fragment rows filtered
with ``column=op.value`` query parameters, plus two stored procedures for
the multi-row writes that must be atomic.
"""

from typing import Any

import httpx
from pydantic import ValidationError

from stylecast.observability.logging import get_logger
from stylecast.observability.metrics import STORE_ERRORS
from stylecast.styles.exceptions import (
    FragmentNotFoundError,
    InvalidMutationError,
    StoreUnavailableError,
)
from stylecast.styles.models import (
    ConfigurationFragment,
    FragmentCreate,
    FragmentUpdate,
    OrderUpdate,
    check_fragment_shape,
)
from stylecast.styles.models.base import new_id
from stylecast.styles.stores.record_store import RecordStore, ScopeFilter, normalize_scopes

logger = get_logger(__name__)

SET_ACTIVE_PROCEDURE = "set_active_theme"
REORDER_PROCEDURE = "reorder_fragments"


def _to_row(values: dict[str, Any]) -> dict[str, Any]:
    row = dict(values)
    if "active" in row:
        row["is_active"] = row.pop("active")
    return row


def _from_row(row: dict[str, Any]) -> dict[str, Any]:
    values = dict(row)
    if "is_active" in values:
        values["active"] = values.pop("is_active")
    return values


class HttpRecordStore(RecordStore):
    """RecordStore backed by a remote REST endpoint.

    Attributes:
        base_url: Root of the REST API
        table: Name of the fragment table
    """

    def __init__(
        self,
        base_url: str,
        *,
        table: str = "style_fragments",
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the store.

        Args:
            base_url: Root of the REST API
            table: Name of the fragment table
            api_key: Key sent as ``apikey`` and bearer token
            timeout: Request timeout in seconds
            transport: Optional transport override (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.table = table
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def _headers(self, *, returning: bool = False) -> dict[str, str]:
        """Build request headers."""
        headers = {"Content-Type": "application/json"}

        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"

        if returning:
            headers["Prefer"] = "return=representation"

        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        write: bool = False,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Make a request, mapping failures onto the store error types."""
        try:
            response = await self._client.request(
                method=method,
                url=path,
                headers=self._headers(returning=write),
                json=json,
                params=params,
            )
        except httpx.HTTPError as e:
            STORE_ERRORS.labels(operation=operation).inc()
            logger.warning("record_store_request_failed", operation=operation, error=str(e))
            raise StoreUnavailableError(f"{operation} failed: {e}", operation=operation) from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = body.get("message", response.text) if isinstance(body, dict) else response.text

            if write and response.status_code < 500:
                raise InvalidMutationError(message)

            STORE_ERRORS.labels(operation=operation).inc()
            logger.warning(
                "record_store_request_failed",
                operation=operation,
                status_code=response.status_code,
                error=message,
            )
            raise StoreUnavailableError(
                f"{operation} failed with status {response.status_code}: {message}",
                operation=operation,
            )

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            STORE_ERRORS.labels(operation=operation).inc()
            raise StoreUnavailableError(f"{operation} returned invalid JSON", operation=operation) from e

    def _parse_rows(self, data: Any) -> list[ConfigurationFragment]:
        """Convert response rows, skipping rows that do not validate."""
        if data is None:
            return []
        if isinstance(data, dict):
            data = [data]

        fragments = []
        for row in data:
            try:
                fragments.append(ConfigurationFragment.model_validate(_from_row(row)))
            except (ValidationError, TypeError) as e:
                row_id = row.get("id") if isinstance(row, dict) else None
                logger.warning("malformed_record_skipped", fragment_id=row_id, error=str(e))
        return fragments

    @property
    def _table_path(self) -> str:
        return f"/{self.table}"

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
        scopes = ",".join(s.value for s in normalize_scopes(scope))
        params = {
            "select": "*",
            "scope": f"in.({scopes})",
            "order": "sort_order.asc,created_at.asc",
        }
        if theme_id is not None:
            params["theme_id"] = f"eq.{theme_id}"
        if owner_key is not None:
            params["owner_key"] = f"eq.{owner_key}"
        if sub_key is not None:
            params["sub_key"] = f"eq.{sub_key}"
        if active_only:
            params["is_active"] = "is.true"

        data = await self._request("GET", self._table_path, operation="query", params=params)
        return self._parse_rows(data)

    async def get(self, fragment_id: str) -> ConfigurationFragment | None:
        """Get a fragment by ID."""
        data = await self._request(
            "GET",
            self._table_path,
            operation="get",
            params={"select": "*", "id": f"eq.{fragment_id}"},
        )
        fragments = self._parse_rows(data)
        return fragments[0] if fragments else None

    async def insert(self, fragment: FragmentCreate) -> str:
        """Insert a fragment, returning its ID."""
        check_fragment_shape(fragment.scope, fragment.theme_id, fragment.sub_key)
        row = _to_row({"id": new_id(), **fragment.model_dump(mode="json")})

        data = await self._request(
            "POST", self._table_path, operation="insert", write=True, json=row
        )
        fragments = self._parse_rows(data)
        return fragments[0].id if fragments else row["id"]

    async def update(self, fragment_id: str, changes: FragmentUpdate) -> ConfigurationFragment:
        """Apply a partial update, returning the new row."""
        data = await self._request(
            "PATCH",
            self._table_path,
            operation="update",
            write=True,
            params={"id": f"eq.{fragment_id}"},
            json=_to_row(changes.model_dump(mode="json", exclude_unset=True)),
        )
        fragments = self._parse_rows(data)
        if not fragments:
            raise FragmentNotFoundError(fragment_id)
        return fragments[0]

    async def delete(self, fragment_id: str) -> None:
        """Delete a fragment."""
        data = await self._request(
            "DELETE",
            self._table_path,
            operation="delete",
            write=True,
            params={"id": f"eq.{fragment_id}"},
        )
        if not data:
            raise FragmentNotFoundError(fragment_id)

    async def set_active_exclusive(self, fragment_id: str) -> ConfigurationFragment:
        """Switch the active theme row in one server-side transaction."""
        data = await self._request(
            "POST",
            f"/rpc/{SET_ACTIVE_PROCEDURE}",
            operation="set_active_exclusive",
            write=True,
            json={"target_id": fragment_id},
        )
        fragments = self._parse_rows(data)
        if not fragments:
            raise FragmentNotFoundError(fragment_id)
        return fragments[0]

    async def reorder(self, updates: list[OrderUpdate]) -> list[ConfigurationFragment]:
        """Apply new sort orders in one server-side transaction."""
        data = await self._request(
            "POST",
            f"/rpc/{REORDER_PROCEDURE}",
            operation="reorder",
            write=True,
            json={"updates": [u.model_dump() for u in updates]},
        )
        return self._parse_rows(data)
