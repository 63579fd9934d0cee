"""Tests for the demo catalog generator."""

import pytest

from storefront.catalog.codec import attribute_tokens
from storefront.catalog.generator import CatalogGenerator, GeneratorConfig, generate_catalog
from storefront.catalog.memory_store import InMemoryCatalogStore
from storefront.catalog.pipeline import QueryCache
from storefront.catalog.service import ShopService
from storefront.domain.entities import ProductStatus


def demo_service(seed: int = 42) -> ShopService:
    return ShopService(
        InMemoryCatalogStore(generate_catalog(seed=seed)),
        cache=QueryCache(ttl_seconds=300, max_entries=512),
    )


class TestGeneratorConfig:
    """Tests for generator sizes."""

    def test_default_count(self) -> None:
        """The default catalog holds six listings per leaf category."""
        generator = CatalogGenerator()
        assert generator.expected_count() == 120
        assert len(generator.generate().products) == 120

    def test_small_and_full(self) -> None:
        """Preset sizes."""
        assert CatalogGenerator(GeneratorConfig.small()).expected_count() == 60
        assert CatalogGenerator(GeneratorConfig.full()).expected_count() == 600


class TestGeneratedCatalog:
    """Tests for generated catalog contents."""

    def test_deterministic(self) -> None:
        """The same seed yields the same catalog."""
        first = generate_catalog(seed=7)
        second = generate_catalog(seed=7)
        assert first.products == second.products
        assert first.attribute_values == second.attribute_values

    def test_seed_changes_catalog(self) -> None:
        """Different seeds yield different listings."""
        first = {p.id for p in generate_catalog(seed=1).products}
        second = {p.id for p in generate_catalog(seed=2).products}
        assert first.isdisjoint(second)

    def test_listings_sit_on_leaf_paths(self) -> None:
        """Every listing names one category per level, each a child of the previous."""
        snapshot = generate_catalog()
        nodes = {node.id: node for node in snapshot.categories}

        for product in snapshot.products:
            ids = [
                product.category_id,
                product.subcategory_id,
                product.sub_subcategory_id,
                product.sub_sub_subcategory_id,
            ]
            assert [nodes[i].level for i in ids] == [1, 2, 3, 4]
            assert [nodes[i].parent_id for i in ids[1:]] == ids[:3]

    def test_sellers_and_statuses(self) -> None:
        """One seller is suspended and both statuses occur."""
        snapshot = generate_catalog()
        assert sum(seller.is_suspended for seller in snapshot.sellers) == 1
        assert {p.status for p in snapshot.products} == {ProductStatus.PUBLISHED, ProductStatus.DRAFT}

    def test_payloads_parse(self) -> None:
        """Every stored payload decodes to at least one value."""
        snapshot = generate_catalog()
        assert snapshot.attribute_values
        for row in snapshot.attribute_values:
            assert attribute_tokens(row)


class TestGeneratedShop:
    """Tests browsing the generated catalog."""

    @pytest.mark.asyncio
    async def test_size_attribute_by_department(self) -> None:
        """Each department picks its own size attribute."""
        service = demo_service()
        expected = {
            "men": "Size (Men)",
            "women": "Size (Women)",
            "kids": "Size (Junior)",
            "shoes": "Shoe Size",
        }
        for slug, name in expected.items():
            context = (await service.resolve_context([slug])).unwrap()
            assert context.size_attribute.name == name

    @pytest.mark.asyncio
    async def test_subcategory_links_replace_department_links(self) -> None:
        """Attributes linked to a subcategory replace the department's."""
        service = demo_service()
        department = (await service.resolve_context(["men"])).unwrap()
        clothing = (await service.resolve_context(["men", "clothing"])).unwrap()

        assert [a.name for a in department.dynamic_attributes] == ["Material"]
        assert [a.name for a in clothing.dynamic_attributes] == ["Fit"]

    @pytest.mark.asyncio
    async def test_hidden_size_filter(self) -> None:
        """The home department hides its size filter."""
        view = (await demo_service().browse(["home"], {})).unwrap()
        assert view.facets.sizes == ()
        assert view.products.total > 0

    @pytest.mark.asyncio
    async def test_shoe_sizes_in_numeric_order(self) -> None:
        """Shoe sizes are listed numerically."""
        view = (await demo_service().browse(["shoes"], {})).unwrap()
        sizes = [int(size) for size in view.facets.sizes]
        assert sizes == sorted(sizes)
        assert view.facets.colors
