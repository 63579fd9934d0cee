"""Tests for the facet availability calculator."""

import pytest

from storefront.catalog.facets import FacetAvailabilityCalculator, facet_sort_key, sort_facet_values
from storefront.catalog.memory_store import InMemoryCatalogStore
from storefront.catalog.store import CatalogScope
from storefront.domain.results import DATA_ACCESS_ERROR, Result

ACTIVE_SELLERS = frozenset({"s-1", "s-2"})
SHOES_SCOPE = CatalogScope(category_id="c-shoes", seller_ids=ACTIVE_SELLERS)


class CountingStore(InMemoryCatalogStore):
    """Store counting attribute value reads."""

    value_reads = 0

    async def fetch_attribute_value_rows(self, attribute_id, scope, limit):
        self.value_reads += 1
        return await super().fetch_attribute_value_rows(attribute_id, scope, limit)


class FailingValueStore(InMemoryCatalogStore):
    """Store whose attribute value reads fail."""

    async def fetch_attribute_value_rows(self, attribute_id, scope, limit):
        return Result.fail(DATA_ACCESS_ERROR, "timeout")


class TestFacetOrdering:
    """Tests for facet value ordering."""

    def test_numbers_sort_numerically(self) -> None:
        """Numeric sizes sort by value, not text."""
        assert sort_facet_values({"10", "9", "8.5", "12"}) == ("8.5", "9", "10", "12")

    def test_standard_sizes_sort_in_size_order(self) -> None:
        """Letter sizes follow the canonical size order."""
        assert sort_facet_values({"XL", "S", "M", "XXS", "L"}) == ("XXS", "S", "M", "L", "XL")

    def test_alphanumeric_natural_order(self) -> None:
        """Alphanumeric tokens sort naturally."""
        assert sort_facet_values({"W32", "W30", "W4"}) == ("W4", "W30", "W32")

    def test_tiers(self) -> None:
        """Numbers, slash numbers, sizes, alphanumerics, then text."""
        values = {"Red", "W30", "M", "32/34", "9", "blue"}
        assert sort_facet_values(values) == ("9", "32/34", "M", "W30", "blue", "Red")

    def test_keys_are_comparable(self) -> None:
        """Keys of different tiers compare without errors."""
        keys = [facet_sort_key(v) for v in ("1", "1/2", "S", "A1", "", "other")]
        assert sorted(keys) == keys


class TestAvailableValues:
    """Tests for available_values."""

    @pytest.mark.asyncio
    async def test_distinct_sorted_values(self, store: InMemoryCatalogStore) -> None:
        """Values of every encoding are parsed, deduplicated and sorted."""
        calculator = FacetAvailabilityCalculator(store)
        values = (await calculator.available_values("a-shoe-size", SHOES_SCOPE)).unwrap()
        assert values == ("8", "9", "10")

    @pytest.mark.asyncio
    async def test_hidden_listings_do_not_contribute(self, store: InMemoryCatalogStore) -> None:
        """Draft listings and suspended sellers are outside every scope."""
        calculator = FacetAvailabilityCalculator(store)
        scope = CatalogScope(category_id="c-shoes", brand_ids=frozenset({"b-nike"}), seller_ids=ACTIVE_SELLERS)
        values = (await calculator.available_values("a-colour", scope)).unwrap()
        assert values == ("Blue", "Red")

    @pytest.mark.asyncio
    async def test_candidate_narrowing(self, store: InMemoryCatalogStore) -> None:
        """Only candidate listings contribute."""
        calculator = FacetAvailabilityCalculator(store)
        scope = SHOES_SCOPE.narrowed({"p3"})
        values = (await calculator.available_values("a-colour", scope)).unwrap()
        assert values == ("Black", "Red")

    @pytest.mark.asyncio
    async def test_empty_candidates_skip_the_read(self, snapshot) -> None:
        """An empty candidate set matches nothing without reading."""
        store = CountingStore(snapshot)
        calculator = FacetAvailabilityCalculator(store)
        result = await calculator.available_values("a-colour", SHOES_SCOPE.narrowed(set()))
        assert result.unwrap() == ()
        assert store.value_reads == 0

    @pytest.mark.asyncio
    async def test_read_failure_is_forwarded(self, snapshot) -> None:
        """Read failures come back unchanged."""
        calculator = FacetAvailabilityCalculator(FailingValueStore(snapshot))
        result = await calculator.available_values("a-colour", SHOES_SCOPE)
        assert result.failure.error_code == DATA_ACCESS_ERROR


class TestProductIdsMatching:
    """Tests for product_ids_matching."""

    @pytest.mark.asyncio
    async def test_any_selected_value_matches(self, store: InMemoryCatalogStore) -> None:
        """Selected values combine with OR."""
        calculator = FacetAvailabilityCalculator(store)
        ids = (await calculator.product_ids_matching("a-shoe-size", {"8", "10"}, SHOES_SCOPE)).unwrap()
        assert ids == frozenset({"p1", "p2", "p3"})

    @pytest.mark.asyncio
    async def test_case_insensitive_and_trimmed(self, store: InMemoryCatalogStore) -> None:
        """Matching ignores case and surrounding whitespace."""
        calculator = FacetAvailabilityCalculator(store)
        scope = CatalogScope(category_id="c-men", seller_ids=ACTIVE_SELLERS)
        ids = (await calculator.product_ids_matching("a-colour", {" RED "}, scope)).unwrap()
        assert ids == frozenset({"p8"})

    @pytest.mark.asyncio
    async def test_blank_selection_matches_nothing(self, store: InMemoryCatalogStore) -> None:
        """A selection of blanks matches no listing."""
        calculator = FacetAvailabilityCalculator(store)
        ids = (await calculator.product_ids_matching("a-colour", {" "}, SHOES_SCOPE)).unwrap()
        assert ids == frozenset()

    @pytest.mark.asyncio
    async def test_no_active_sellers(self, store: InMemoryCatalogStore) -> None:
        """An empty seller allowlist matches nothing."""
        calculator = FacetAvailabilityCalculator(store)
        scope = CatalogScope(category_id="c-shoes", seller_ids=frozenset())
        ids = (await calculator.product_ids_matching("a-colour", {"Red"}, scope)).unwrap()
        assert ids == frozenset()


class TestAvailableBrands:
    """Tests for available_brands."""

    @pytest.mark.asyncio
    async def test_brands_in_scope(self, store: InMemoryCatalogStore) -> None:
        """Brands of visible listings, ordered by name."""
        calculator = FacetAvailabilityCalculator(store)
        brands = (await calculator.available_brands(SHOES_SCOPE.narrowed({"p1", "p6"}))).unwrap()
        assert [brand.name for brand in brands] == ["Acme", "Nike"]

    @pytest.mark.asyncio
    async def test_empty_candidates(self, store: InMemoryCatalogStore) -> None:
        """No candidates, no brands."""
        calculator = FacetAvailabilityCalculator(store)
        assert (await calculator.available_brands(SHOES_SCOPE.narrowed(()))).unwrap() == []
