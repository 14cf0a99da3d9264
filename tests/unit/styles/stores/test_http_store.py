"""Tests for HttpRecordStore against httpx.MockTransport."""

import json
from typing import Any

import httpx
import pytest

from stylecast.styles.exceptions import (
    FragmentNotFoundError,
    InvalidMutationError,
    StoreUnavailableError,
)
from stylecast.styles.models import FragmentScope, FragmentUpdate, OrderUpdate
from stylecast.styles.stores import HttpRecordStore
from tests.factories.styles import FragmentFactory


def _row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": "frag-1",
        "theme_id": "t1",
        "scope": "component",
        "owner_key": "Button",
        "sub_key": None,
        "payload": {"base": {"color": "red"}},
        "sort_order": 0,
        "is_active": True,
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
    }
    row.update(overrides)
    return row


def _store(handler, **kwargs: Any) -> HttpRecordStore:
    return HttpRecordStore(
        "http://records.local/rest/v1",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestQuery:
    """Read requests and response mapping."""

    @pytest.mark.asyncio
    async def test_query_builds_filters(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[_row()])

        store = _store(handler, api_key="secret-key")
        fragments = await store.query(
            (FragmentScope.COMPONENT, FragmentScope.COMPONENT_VARIANT),
            theme_id="t1",
            owner_key="Button",
        )
        await store.close()

        request = seen[0]
        assert request.url.path == "/rest/v1/style_fragments"
        assert request.url.params["scope"] == "in.(component,component-variant)"
        assert request.url.params["theme_id"] == "eq.t1"
        assert request.url.params["owner_key"] == "eq.Button"
        assert request.url.params["is_active"] == "is.true"
        assert request.url.params["order"] == "sort_order.asc,created_at.asc"
        assert "sub_key" not in request.url.params
        assert request.headers["apikey"] == "secret-key"

        assert len(fragments) == 1
        assert fragments[0].active is True
        assert fragments[0].payload == {"base": {"color": "red"}}

    @pytest.mark.asyncio
    async def test_inactive_rows_included_on_request(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        store = _store(handler)
        await store.query(FragmentScope.THEME, active_only=False)

        assert "is_active" not in seen[0].url.params

    @pytest.mark.asyncio
    async def test_invalid_rows_skipped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[_row(scope="nonsense"), _row(id="frag-2")])

        fragments = await _store(handler).query(FragmentScope.COMPONENT)

        assert [f.id for f in fragments] == ["frag-2"]

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"message": "down"})

        with pytest.raises(StoreUnavailableError) as exc_info:
            await _store(handler).query(FragmentScope.PAGE)
        assert exc_info.value.operation == "query"

    @pytest.mark.asyncio
    async def test_network_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(StoreUnavailableError):
            await _store(handler).get("frag-1")

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[])

        assert await _store(handler).get("frag-1") is None


class TestWrites:
    """Write requests and error mapping."""

    @pytest.mark.asyncio
    async def test_insert_posts_row(self) -> None:
        bodies: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            bodies.append(body)
            assert request.headers["Prefer"] == "return=representation"
            return httpx.Response(201, json=[_row(id=body["id"])])

        fragment_id = await _store(handler).insert(FragmentFactory.create())

        assert bodies[0]["is_active"] is True
        assert "active" not in bodies[0]
        assert bodies[0]["scope"] == "component"
        assert fragment_id == bodies[0]["id"]

    @pytest.mark.asyncio
    async def test_client_error_on_write_is_invalid_mutation(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(409, json={"message": "duplicate key"})

        with pytest.raises(InvalidMutationError, match="duplicate key"):
            await _store(handler).insert(FragmentFactory.create())

    @pytest.mark.asyncio
    async def test_update_sends_only_set_fields(self) -> None:
        bodies: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PATCH"
            assert request.url.params["id"] == "eq.frag-1"
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=[_row(is_active=False)])

        updated = await _store(handler).update("frag-1", FragmentUpdate(active=False))

        assert bodies == [{"is_active": False}]
        assert updated.active is False

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[])

        with pytest.raises(FragmentNotFoundError):
            await _store(handler).update("frag-1", FragmentUpdate(sort_order=1))

    @pytest.mark.asyncio
    async def test_delete_missing_raises_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[])

        with pytest.raises(FragmentNotFoundError):
            await _store(handler).delete("frag-1")

    @pytest.mark.asyncio
    async def test_set_active_exclusive_calls_procedure(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_row(scope="theme", theme_id=None, owner_key="dark"))

        theme = await _store(handler).set_active_exclusive("frag-1")

        assert seen[0].url.path == "/rest/v1/rpc/set_active_theme"
        assert json.loads(seen[0].content) == {"target_id": "frag-1"}
        assert theme.owner_key == "dark"

    @pytest.mark.asyncio
    async def test_reorder_calls_procedure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/rest/v1/rpc/reorder_fragments"
            body = json.loads(request.content)
            return httpx.Response(
                200,
                json=[_row(id=u["id"], sort_order=u["sort_order"]) for u in body["updates"]],
            )

        rows = await _store(handler).reorder([OrderUpdate(id="a", sort_order=2)])

        assert [(r.id, r.sort_order) for r in rows] == [("a", 2)]
