"""Tests for PageStyleResolver."""

from typing import Any

import pytest

from stylecast.styles.exceptions import InvalidMutationError, StoreUnavailableError
from stylecast.styles.keys import cache_key
from stylecast.styles.models import (
    FragmentScope,
    FragmentUpdate,
    OrderUpdate,
    ResolvedStyleConfiguration,
)
from stylecast.styles.resolvers import PageStyleResolver, ThemeResolver
from tests.factories.styles import FlakyRecordStore, FragmentFactory


@pytest.fixture
def flaky_store() -> FlakyRecordStore:
    return FlakyRecordStore()


@pytest.fixture
def themes(flaky_store: FlakyRecordStore, make_cache) -> ThemeResolver:
    return ThemeResolver(flaky_store, make_cache("theme"))


@pytest.fixture
def pages(flaky_store: FlakyRecordStore, make_cache, themes: ThemeResolver) -> PageStyleResolver:
    return PageStyleResolver(flaky_store, make_cache("page", ttl_seconds=180), themes)


class TestGetPageStyles:
    """Whole-page resolution."""

    @pytest.mark.asyncio
    async def test_defaults_without_fragments(self, pages: PageStyleResolver) -> None:
        config = await pages.get_page_styles("t1", "home")

        assert config["layout"]["maxWidth"] == "1200px"
        assert config["layout"]["margin"] == "0 auto"

    @pytest.mark.asyncio
    async def test_fragments_override_defaults_per_property(self, pages: PageStyleResolver) -> None:
        await pages.create_page_style("t1", "home", {"layout": {"maxWidth": "800px"}})

        config = await pages.get_page_styles("t1", "home")

        assert config["layout"]["maxWidth"] == "800px"
        assert config["layout"]["padding"] == "0 1rem"

    @pytest.mark.asyncio
    async def test_theme_page_layer_between_defaults_and_fragments(
        self,
        pages: PageStyleResolver,
        themes: ThemeResolver,
    ) -> None:
        await themes.create_theme(
            "t1",
            {"pages": {"home": {"layout": {"maxWidth": "960px", "gap": "2rem"}}}},
            active=True,
        )
        await pages.create_page_style("t1", "home", {"layout": {"maxWidth": "800px"}})

        config = await pages.get_page_styles("t1", "home")

        assert config["layout"]["maxWidth"] == "800px"
        assert config["layout"]["gap"] == "2rem"
        assert config["layout"]["padding"] == "0 1rem"

    @pytest.mark.asyncio
    async def test_section_fragments_do_not_leak_into_page(self, pages: PageStyleResolver) -> None:
        await pages.create_page_style("t1", "home", {"content": {"padding": "0"}})
        await pages.create_page_style("t1", "home", {"content": {"padding": "9rem"}}, section="hero")

        page = await pages.get_page_styles("t1", "home")
        hero = await pages.get_page_section_styles("t1", "home", "hero")

        assert page["content"]["padding"] == "0"
        assert hero.to_dict() == {"content": {"padding": "9rem"}}

    @pytest.mark.asyncio
    async def test_inactive_fragments_ignored(self, pages: PageStyleResolver) -> None:
        await pages.create_page_style("t1", "home", {"layout": {"maxWidth": "1px"}}, active=False)

        config = await pages.get_page_styles("t1", "home")

        assert config["layout"]["maxWidth"] == "1200px"

    @pytest.mark.asyncio
    async def test_malformed_fragment_isolated(
        self,
        pages: PageStyleResolver,
        flaky_store: FlakyRecordStore,
    ) -> None:
        await pages.create_page_style("t1", "home", {"header": {"height": "80px"}}, sort_order=1)
        flaky_store.put_raw(
            FragmentFactory.row(
                scope=FragmentScope.PAGE,
                owner_key="home",
                payload={"header": "tall"},
                sort_order=2,
            )
        )
        await pages.create_page_style("t1", "home", {"footer": {"position": "fixed"}}, sort_order=3)
        pages.clear_cache()

        config = await pages.get_page_styles("t1", "home")

        assert config["header"]["height"] == "80px"
        assert config["footer"]["position"] == "fixed"


class TestCaching:
    """Cache hits, exact invalidation and fallback."""

    @pytest.mark.asyncio
    async def test_second_read_served_from_cache(
        self,
        pages: PageStyleResolver,
        flaky_store: FlakyRecordStore,
    ) -> None:
        first = await pages.get_page_styles("t1", "home")
        queries = flaky_store.query_count

        second = await pages.get_page_styles("t1", "home")

        assert second is first
        assert flaky_store.query_count == queries

    @pytest.mark.asyncio
    async def test_expired_entry_recomputed(
        self,
        pages: PageStyleResolver,
        flaky_store: FlakyRecordStore,
        clock,
    ) -> None:
        await pages.get_page_styles("t1", "home")
        queries = flaky_store.query_count

        clock.advance(181)
        await pages.get_page_styles("t1", "home")

        assert flaky_store.query_count > queries

    @pytest.mark.asyncio
    async def test_mutation_invalidates_only_that_page(self, pages: PageStyleResolver) -> None:
        await pages.get_page_styles("t1", "home")
        await pages.get_page_section_styles("t1", "home", "hero")
        await pages.get_page_sections("t1", "home")
        await pages.get_page_styles("t1", "homepage")
        await pages.get_page_styles("t2", "home")

        await pages.create_page_style("t1", "home", {"content": {"padding": "0"}})

        assert cache_key("page", "t1", "home", "styles") not in pages.cache
        assert cache_key("page", "t1", "home", "section", "hero") not in pages.cache
        assert cache_key("page", "t1", "home", "sections") not in pages.cache
        assert cache_key("page", "t1", "homepage", "styles") in pages.cache
        assert cache_key("page", "t2", "home", "styles") in pages.cache

    @pytest.mark.asyncio
    async def test_store_failure_serves_cached_defaults(
        self,
        pages: PageStyleResolver,
        flaky_store: FlakyRecordStore,
    ) -> None:
        flaky_store.fail_reads = True

        config = await pages.get_page_styles("t1", "home")
        queries = flaky_store.query_count
        again = await pages.get_page_styles("t1", "home")

        assert config["layout"]["maxWidth"] == "1200px"
        assert again is config
        assert flaky_store.query_count == queries

    @pytest.mark.asyncio
    async def test_section_fallback_not_cached(
        self,
        pages: PageStyleResolver,
        flaky_store: FlakyRecordStore,
    ) -> None:
        await pages.create_page_style("t1", "home", {"content": {"padding": "1px"}}, section="hero")
        flaky_store.fail_reads = True

        assert len(await pages.get_page_section_styles("t1", "home", "hero")) == 0
        assert await pages.get_page_sections("t1", "home") == []

        flaky_store.fail_reads = False
        hero = await pages.get_page_section_styles("t1", "home", "hero")
        assert hero["content"]["padding"] == "1px"
        assert await pages.get_page_sections("t1", "home") == ["hero"]

    @pytest.mark.asyncio
    async def test_concurrent_fill_preferred_over_defaults(
        self,
        pages: PageStyleResolver,
        flaky_store: FlakyRecordStore,
    ) -> None:
        key = cache_key("page", "t1", "home", "styles")
        filled = ResolvedStyleConfiguration({"layout": {"maxWidth": "640px"}})

        async def query_then_fail(scope, **kwargs: Any):
            pages.cache.set(key, filled)
            raise StoreUnavailableError("timeout", operation="query")

        flaky_store.query = query_then_fail  # type: ignore[method-assign]

        assert await pages.get_page_styles("t1", "home") is filled


class TestSections:
    @pytest.mark.asyncio
    async def test_section_names_sorted_and_distinct(self, pages: PageStyleResolver) -> None:
        await pages.create_page_style("t1", "home", {"content": {"a": "1"}}, section="hero")
        await pages.create_page_style("t1", "home", {"content": {"a": "2"}}, section="about")
        await pages.create_page_style("t1", "home", {"content": {"a": "3"}}, section="hero")
        await pages.create_page_style("t1", "home", {"content": {"a": "4"}})

        assert await pages.get_page_sections("t1", "home") == ["about", "hero"]

    @pytest.mark.asyncio
    async def test_unknown_section_is_empty(self, pages: PageStyleResolver) -> None:
        assert len(await pages.get_page_section_styles("t1", "home", "nowhere")) == 0


class TestMutations:
    """CRUD passthroughs."""

    @pytest.mark.asyncio
    async def test_create_publishes_resolved_page(self, pages: PageStyleResolver) -> None:
        received: list[tuple[str, ResolvedStyleConfiguration]] = []
        pages.subscribe(lambda key, config: received.append((key, config)))

        await pages.create_page_style("t1", "home", {"header": {"height": "90px"}})

        assert len(received) == 1
        key, config = received[0]
        assert key == "home"
        assert config["header"]["height"] == "90px"

    @pytest.mark.asyncio
    async def test_inactive_create_not_published(self, pages: PageStyleResolver) -> None:
        received: list[str] = []
        pages.subscribe(lambda key, _config: received.append(key))

        await pages.create_page_style("t1", "home", {"header": {"height": "90px"}}, active=False)

        assert received == []

    @pytest.mark.asyncio
    async def test_update_and_toggle(self, pages: PageStyleResolver) -> None:
        fragment_id = await pages.create_page_style("t1", "home", {"header": {"height": "90px"}})
        await pages.get_page_styles("t1", "home")

        await pages.update_page_style(fragment_id, FragmentUpdate(payload={"header": {"height": "70px"}}))
        assert (await pages.get_page_styles("t1", "home"))["header"]["height"] == "70px"

        toggled = await pages.toggle_page_style_active(fragment_id)
        assert toggled.active is False
        assert (await pages.get_page_styles("t1", "home"))["header"]["height"] == "64px"

    @pytest.mark.asyncio
    async def test_reorder_changes_precedence(self, pages: PageStyleResolver) -> None:
        first = await pages.create_page_style("t1", "home", {"header": {"height": "1px"}}, sort_order=1)
        second = await pages.create_page_style("t1", "home", {"header": {"height": "2px"}}, sort_order=2)
        assert (await pages.get_page_styles("t1", "home"))["header"]["height"] == "2px"

        await pages.update_page_styles_order(
            [OrderUpdate(id=first, sort_order=2), OrderUpdate(id=second, sort_order=1)]
        )

        assert (await pages.get_page_styles("t1", "home"))["header"]["height"] == "1px"

    @pytest.mark.asyncio
    async def test_delete(self, pages: PageStyleResolver) -> None:
        fragment_id = await pages.create_page_style("t1", "home", {"header": {"height": "90px"}})
        await pages.get_page_styles("t1", "home")

        await pages.delete_page_style(fragment_id)

        assert (await pages.get_page_styles("t1", "home"))["header"]["height"] == "64px"

    @pytest.mark.asyncio
    async def test_rejects_foreign_fragments(
        self,
        pages: PageStyleResolver,
        flaky_store: FlakyRecordStore,
    ) -> None:
        component_id = await flaky_store.insert(FragmentFactory.create(scope=FragmentScope.COMPONENT))

        with pytest.raises(InvalidMutationError):
            await pages.delete_page_style(component_id)
        with pytest.raises(InvalidMutationError):
            await pages.create_style(FragmentFactory.create(scope=FragmentScope.COMPONENT))

    @pytest.mark.asyncio
    async def test_create_with_non_group_entry_rejected(
        self,
        pages: PageStyleResolver,
        flaky_store: FlakyRecordStore,
    ) -> None:
        with pytest.raises(InvalidMutationError) as exc_info:
            await pages.create_page_style("t1", "home", {"header": "tall"})

        assert exc_info.value.field == "payload"
        assert await flaky_store.query(FragmentScope.PAGE, active_only=False) == []

    @pytest.mark.asyncio
    async def test_update_with_non_group_entry_rejected(
        self,
        pages: PageStyleResolver,
        flaky_store: FlakyRecordStore,
    ) -> None:
        fragment_id = await pages.create_page_style("t1", "home", {"header": {"height": "90px"}})

        with pytest.raises(InvalidMutationError) as exc_info:
            await pages.update_page_style(fragment_id, FragmentUpdate(payload={"header": "tall"}))

        assert exc_info.value.field == "payload"
        assert (await flaky_store.get(fragment_id)).payload == {"header": {"height": "90px"}}
        assert (await pages.get_page_styles("t1", "home"))["header"]["height"] == "90px"
