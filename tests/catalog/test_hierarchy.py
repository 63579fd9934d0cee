"""Tests for the category hierarchy resolver."""

import pytest

from storefront.catalog.hierarchy import CategoryHierarchyResolver, ResolvedPath
from storefront.catalog.memory_store import InMemoryCatalogStore
from storefront.domain.results import DATA_ACCESS_ERROR, Result


class FailingCategoryStore(InMemoryCatalogStore):
    """Store whose category reads fail."""

    async def fetch_category_nodes(self, level, parent_id=None):
        return Result.fail(DATA_ACCESS_ERROR, "connection refused")


class TestResolve:
    """Tests for slug path resolution."""

    @pytest.fixture
    def resolver(self, store: InMemoryCatalogStore) -> CategoryHierarchyResolver:
        """Create resolver over the fixture catalog."""
        return CategoryHierarchyResolver(store)

    @pytest.mark.asyncio
    async def test_resolves_full_path(self, resolver: CategoryHierarchyResolver) -> None:
        """Four slugs resolve to one id per level."""
        path = (await resolver.resolve(["shoes", "trainers", "running", "road"])).unwrap()
        assert path.found
        assert path.level_ids == ("c-shoes", "c-trainers", "c-running", "c-road")
        assert path.depth == 4
        assert path.breadcrumb == ["Shoes", "Trainers", "Running", "Road"]

    @pytest.mark.asyncio
    async def test_slugs_are_case_insensitive(self, resolver: CategoryHierarchyResolver) -> None:
        """Slugs match regardless of case."""
        path = (await resolver.resolve(["SHOES", "Boots"])).unwrap()
        assert path.found
        assert path.id_at(2) == "c-boots"

    @pytest.mark.asyncio
    async def test_empty_path_is_main_page(self, resolver: CategoryHierarchyResolver) -> None:
        """No slugs resolve to the unscoped page."""
        path = (await resolver.resolve([])).unwrap()
        assert path.found
        assert path.is_main_page
        assert path.level_ids == ()

    @pytest.mark.asyncio
    async def test_unknown_slug_is_not_found(self, resolver: CategoryHierarchyResolver) -> None:
        """Any unresolved slug marks the whole path not found."""
        path = (await resolver.resolve(["shoes", "sandals", "beach"])).unwrap()
        assert not path.found
        assert path.level_ids == ("c-shoes", None, None)

    @pytest.mark.asyncio
    async def test_slug_must_be_child_of_previous(self, resolver: CategoryHierarchyResolver) -> None:
        """A slug under a different parent does not resolve."""
        path = (await resolver.resolve(["men", "trainers"])).unwrap()
        assert not path.found

    @pytest.mark.asyncio
    async def test_inactive_category_is_not_found(self, resolver: CategoryHierarchyResolver) -> None:
        """Inactive nodes never resolve."""
        assert not (await resolver.resolve(["archive"])).unwrap().found

    @pytest.mark.asyncio
    async def test_too_deep_is_not_found(self, resolver: CategoryHierarchyResolver) -> None:
        """More than four slugs never resolve."""
        path = (await resolver.resolve(["shoes", "trainers", "running", "road", "extra"])).unwrap()
        assert not path.found
        assert path.nodes == ()

    @pytest.mark.asyncio
    async def test_read_failure_is_forwarded(self, snapshot) -> None:
        """A failed read is returned unchanged."""
        resolver = CategoryHierarchyResolver(FailingCategoryStore(snapshot))
        result = await resolver.resolve(["shoes"])
        assert not result.success
        assert result.failure.error_code == DATA_ACCESS_ERROR


class TestLowestLevelOptions:
    """Tests for the category facet."""

    @pytest.fixture
    def resolver(self, store: InMemoryCatalogStore) -> CategoryHierarchyResolver:
        """Create resolver over the fixture catalog."""
        return CategoryHierarchyResolver(store)

    @pytest.mark.asyncio
    async def test_children_of_deepest_node(self, resolver: CategoryHierarchyResolver) -> None:
        """The facet lists the children of the deepest node by name."""
        path = (await resolver.resolve(["shoes"])).unwrap()
        options = (await resolver.lowest_level_options(path)).unwrap()
        assert [option.name for option in options] == ["Boots", "Trainers"]
        assert {option.level for option in options} == {2}

    @pytest.mark.asyncio
    async def test_main_page_lists_top_level(self, resolver: CategoryHierarchyResolver) -> None:
        """The unscoped page offers active top-level categories."""
        options = (await resolver.lowest_level_options(ResolvedPath())).unwrap()
        assert [option.slug for option in options] == ["men", "shoes"]

    @pytest.mark.asyncio
    async def test_leaf_page_has_no_options(self, resolver: CategoryHierarchyResolver) -> None:
        """A level-4 page has nothing below it."""
        path = (await resolver.resolve(["shoes", "trainers", "running", "road"])).unwrap()
        assert (await resolver.lowest_level_options(path)).unwrap() == []


class TestCategoryGridAndSearch:
    """Tests for the category grid and category search."""

    @pytest.fixture
    def resolver(self, store: InMemoryCatalogStore) -> CategoryHierarchyResolver:
        """Create resolver over the fixture catalog."""
        return CategoryHierarchyResolver(store)

    @pytest.mark.asyncio
    async def test_category_grid(self, resolver: CategoryHierarchyResolver) -> None:
        """The grid lists flagged level-3 categories and the grid images."""
        shoes = (await resolver.resolve(["shoes"])).unwrap().top_level
        grid = (await resolver.category_grid(shoes)).unwrap()
        assert [item.slug for item in grid.categories] == ["running"]
        assert grid.categories[0].parent_slug == "trainers"
        assert [image.id for image in grid.images] == ["g-shoes-sale"]

    @pytest.mark.asyncio
    async def test_search_by_name_and_synonym(self, resolver: CategoryHierarchyResolver) -> None:
        """Search matches names and synonyms case-insensitively."""
        by_name = (await resolver.search("SHO")).unwrap()
        by_synonym = (await resolver.search("footwear")).unwrap()
        assert [node.id for node in by_name] == ["c-shoes"]
        assert [node.id for node in by_synonym] == ["c-shoes"]

    @pytest.mark.asyncio
    async def test_blank_search(self, resolver: CategoryHierarchyResolver) -> None:
        """A blank query matches nothing."""
        assert (await resolver.search("  ")).unwrap() == []
