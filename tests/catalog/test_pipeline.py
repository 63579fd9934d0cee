"""Tests for the query graph, memo cache and filter sessions."""

import asyncio

import pytest

from storefront.catalog.filter_state import (
    ClearFilters,
    FilterState,
    SetSort,
    ToggleBrand,
    ToggleColor,
    reduce,
)
from storefront.catalog.memory_store import CatalogSnapshot, InMemoryCatalogStore
from storefront.catalog.pipeline import COLOR_FACET, PRODUCT_PAGE, QueryCache, affected_queries
from storefront.catalog.service import ShopService
from storefront.domain.results import DATA_ACCESS_ERROR, Result


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class GatedStore(InMemoryCatalogStore):
    """Store whose listing fetches wait until the gate opens."""

    def __init__(self, snapshot: CatalogSnapshot) -> None:
        super().__init__(snapshot)
        self.gate = asyncio.Event()

    async def fetch_products(self, query):
        await self.gate.wait()
        return await super().fetch_products(query)


class TestQueryGraph:
    """Tests for query dependencies."""

    def test_sort_change_affects_listing_only(self) -> None:
        """A sort change re-runs only the listing fetch."""
        previous = FilterState.build(colors=["Red"])
        assert affected_queries(previous, reduce(previous, SetSort("price-low"))) == ["products"]

    def test_color_change(self) -> None:
        """A color change re-runs what reads colors."""
        previous = FilterState()
        assert affected_queries(previous, reduce(previous, ToggleColor("Red"))) == [
            "candidates.colors",
            "facet.sizes",
            "facet.brands",
            "facet.attribute",
            "products",
        ]

    def test_brand_change(self) -> None:
        """Brands never feed candidate sets or the brand facet itself."""
        previous = FilterState()
        assert affected_queries(previous, reduce(previous, ToggleBrand("b-nike"))) == [
            "facet.colors",
            "facet.sizes",
            "facet.attribute",
            "products",
        ]

    def test_unchanged_state(self) -> None:
        """Identical states affect nothing."""
        state = FilterState.build(sizes=["9"])
        assert affected_queries(state, FilterState.build(sizes=["9"])) == []

    def test_cache_key_ignores_unread_fields(self) -> None:
        """Keys differ only in the fields a query reads."""
        context_key = ("c-shoes", None)
        base = FilterState.build(sizes=["9"])
        resorted = FilterState.build(sizes=["9"], sort="newest")
        resized = FilterState.build(sizes=["10"])

        assert COLOR_FACET.cache_key(context_key, base) == COLOR_FACET.cache_key(context_key, resorted)
        assert COLOR_FACET.cache_key(context_key, base) != COLOR_FACET.cache_key(context_key, resized)
        assert not PRODUCT_PAGE.cacheable


class TestQueryCache:
    """Tests for the memo cache."""

    def test_entries_expire(self) -> None:
        """Entries are served until their TTL runs out."""
        clock = FakeClock()
        cache = QueryCache(ttl_seconds=300, max_entries=10, clock=clock)
        cache.put("k", Result.ok(1))

        clock.now = 299.0
        assert cache.get("k").unwrap() == 1
        clock.now = 300.0
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_least_recently_used_evicted(self) -> None:
        """The least recently used entry goes first."""
        cache = QueryCache(ttl_seconds=300, max_entries=2, clock=FakeClock())
        cache.put("a", Result.ok("a"))
        cache.put("b", Result.ok("b"))
        cache.get("a")
        cache.put("c", Result.ok("c"))

        assert cache.get("b") is None
        assert cache.get("a") is not None
        assert cache.get("c") is not None

    def test_failures_not_stored(self) -> None:
        """Failed results are never cached."""
        cache = QueryCache(ttl_seconds=300, max_entries=10)
        cache.put("k", Result.fail(DATA_ACCESS_ERROR, "down"))
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_failures_recomputed(self) -> None:
        """A failed computation runs again on the next request."""
        cache = QueryCache(ttl_seconds=300, max_entries=10)
        calls = 0

        async def compute():
            nonlocal calls
            calls += 1
            return Result.fail(DATA_ACCESS_ERROR, "down")

        await cache.get_or_compute("k", compute)
        result = await cache.get_or_compute("k", compute)

        assert calls == 2
        assert result.failure.error_code == DATA_ACCESS_ERROR

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_computation(self) -> None:
        """Concurrent misses on one key compute once."""
        cache = QueryCache(ttl_seconds=300, max_entries=10)
        calls = 0

        async def compute():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return Result.ok(calls)

        first, second = await asyncio.gather(
            cache.get_or_compute("k", compute),
            cache.get_or_compute("k", compute),
        )

        assert calls == 1
        assert first.unwrap() == second.unwrap() == 1
        assert cache.misses == 1
        assert (await cache.get_or_compute("k", compute)).unwrap() == 1
        assert cache.hits == 1

    @pytest.mark.asyncio
    async def test_cancelled_caller_leaves_computation_running(self) -> None:
        """Cancelling one caller does not cancel the shared computation."""
        cache = QueryCache(ttl_seconds=300, max_entries=10)
        calls = 0

        async def compute():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return Result.ok("done")

        waiter = asyncio.create_task(cache.get_or_compute("k", compute))
        await asyncio.sleep(0)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        result = await cache.get_or_compute("k", compute)
        assert result.unwrap() == "done"
        assert calls == 1


class TestFilterSession:
    """Tests for last-state-wins filter sessions."""

    @pytest.mark.asyncio
    async def test_apply_returns_view(self, service: ShopService) -> None:
        """An uncontested action yields the view of the new state."""
        context = (await service.resolve_context(["shoes"])).unwrap()
        session = service.open_session(context)

        view = (await session.apply(ToggleBrand("b-acme"))).unwrap()

        assert session.state.brands == frozenset({"b-acme"})
        assert [p.id for p in view.products.items] == ["p3", "p6"]

    @pytest.mark.asyncio
    async def test_noop_dispatch_keeps_state(self, service: ShopService) -> None:
        """An action that changes nothing keeps the state object."""
        context = (await service.resolve_context(["shoes"])).unwrap()
        session = service.open_session(context)
        state = session.state
        assert session.dispatch(ClearFilters()) is state

    @pytest.mark.asyncio
    async def test_superseded_refresh_discarded(self, snapshot: CatalogSnapshot) -> None:
        """Only the latest selection produces a view."""
        store = GatedStore(snapshot)
        service = ShopService(store, cache=QueryCache(ttl_seconds=300, max_entries=256))
        context = (await service.resolve_context(["shoes"])).unwrap()
        session = service.open_session(context)

        first = asyncio.create_task(session.apply(ToggleColor("Red")))
        await asyncio.sleep(0.01)
        second = asyncio.create_task(session.apply(SetSort("price-low")))
        await asyncio.sleep(0.01)
        store.gate.set()

        assert await first is None
        view = (await second).unwrap()
        assert view.state == FilterState.build(colors=["Red"], sort="price-low")
        assert [p.id for p in view.products.items] == ["p1", "p3"]
