"""Category hierarchy resolver.

Maps URL slug paths onto the four-level category tree and derives the
read-only views built from it: the lowest-level category facet, the
category grid and category search.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from storefront.catalog.store import MAX_CATEGORY_DEPTH, CatalogStore
from storefront.domain.entities import CategoryGridImage, CategoryNode
from storefront.domain.results import Result

logger = structlog.get_logger()


@dataclass(frozen=True)
class ResolvedPath:
    """Outcome of resolving a slug path.

    Attributes:
        slugs: Requested slugs, top level first.
        nodes: Resolved nodes, one per slug up to the first failure.
        found: False if any slug did not resolve.
    """

    slugs: tuple[str, ...] = ()
    nodes: tuple[CategoryNode, ...] = ()
    found: bool = True

    @property
    def level_ids(self) -> tuple[str | None, ...]:
        """Node id per requested level, None from the first unresolved slug on."""
        ids: list[str | None] = [node.id for node in self.nodes]
        ids.extend([None] * (len(self.slugs) - len(self.nodes)))
        return tuple(ids)

    @property
    def depth(self) -> int:
        """Number of resolved levels (0 on the unscoped shop page)."""
        return len(self.nodes)

    @property
    def is_main_page(self) -> bool:
        """Whether this is the unscoped "all products" page."""
        return not self.slugs

    @property
    def deepest(self) -> CategoryNode | None:
        """Most specific resolved node."""
        return self.nodes[-1] if self.nodes else None

    @property
    def top_level(self) -> CategoryNode | None:
        """Level-1 node of the path."""
        return self.nodes[0] if self.nodes else None

    def id_at(self, level: int) -> str | None:
        """Resolved node id at a level (1-4), if any."""
        if 1 <= level <= len(self.nodes):
            return self.nodes[level - 1].id
        return None

    @property
    def breadcrumb(self) -> list[str]:
        """Display names of the resolved nodes, top level first."""
        return [node.name for node in self.nodes]


@dataclass(frozen=True)
class CategoryFacetOption:
    """One selectable lowest-level category."""

    id: str
    name: str
    slug: str
    level: int


@dataclass(frozen=True)
class GridCategory:
    """A level-3 category shown in its top-level category grid."""

    id: str
    name: str
    slug: str
    parent_slug: str
    image_url: str | None = None


@dataclass(frozen=True)
class CategoryGrid:
    """Grid view of a top-level category page."""

    category: CategoryNode
    categories: list[GridCategory] = field(default_factory=list)
    images: list[CategoryGridImage] = field(default_factory=list)


class CategoryHierarchyResolver:
    """Resolves slug paths against the category tree.

    Example usage:
        resolver = CategoryHierarchyResolver(store)
        result = await resolver.resolve(["clothing", "men", "tops"])
        if result.success and result.data.found:
            print(result.data.level_ids)
    """

    def __init__(self, store: CatalogStore) -> None:
        """Initialize resolver.

        Args:
            store: Catalog store to read from.
        """
        self.store = store

    async def resolve(self, slugs: Sequence[str]) -> Result[ResolvedPath]:
        """Resolve a path of up to four slugs.

        Each slug is looked up among the active children of the previous
        level's node. The first slug that does not resolve marks the whole
        path as not found; there is no partial match.

        Args:
            slugs: URL slugs, top level first.

        Returns:
            Resolved path, or the forwarded read failure.
        """
        requested = tuple(slug.strip().lower() for slug in slugs)
        nodes: list[CategoryNode] = []

        if len(requested) > MAX_CATEGORY_DEPTH:
            logger.info("Category path too deep", slugs=requested)
            return Result.ok(ResolvedPath(slugs=requested, found=False))

        parent_id: str | None = None
        for level, slug in enumerate(requested, start=1):
            children = await self.store.fetch_category_nodes(level, parent_id)
            if not children.success:
                return Result.from_failure(children.failure)

            match = next(
                (node for node in children.unwrap() if node.slug.lower() == slug),
                None,
            )
            if match is None:
                logger.info("Category slug not found", slug=slug, level=level)
                return Result.ok(ResolvedPath(slugs=requested, nodes=tuple(nodes), found=False))

            nodes.append(match)
            parent_id = match.id

        return Result.ok(ResolvedPath(slugs=requested, nodes=tuple(nodes)))

    async def lowest_level_options(self, path: ResolvedPath) -> Result[list[CategoryFacetOption]]:
        """Get the categories selectable as the lowest-level facet.

        These are the active children of the deepest resolved node, or the
        top-level categories on the unscoped page.

        Args:
            path: A found path.

        Returns:
            Options ordered by name, or the forwarded read failure.
        """
        if not path.found or path.depth >= MAX_CATEGORY_DEPTH:
            return Result.ok([])

        deepest = path.deepest
        children = await self.store.fetch_category_nodes(
            path.depth + 1,
            deepest.id if deepest is not None else None,
        )
        if not children.success:
            return Result.from_failure(children.failure)

        return Result.ok(
            [
                CategoryFacetOption(id=node.id, name=node.name, slug=node.slug, level=node.level)
                for node in children.unwrap()
            ]
        )

    async def category_grid(self, category: CategoryNode) -> Result[CategoryGrid]:
        """Build the grid view of a top-level category.

        Lists the level-3 categories flagged for the grid under each of the
        category's level-2 children, plus its grid images.

        Args:
            category: Level-1 category node.

        Returns:
            Grid view, or the forwarded read failure.
        """
        subcategories = await self.store.fetch_category_nodes(2, category.id)
        if not subcategories.success:
            return Result.from_failure(subcategories.failure)

        grid_categories: list[GridCategory] = []
        for subcategory in subcategories.unwrap():
            children = await self.store.fetch_category_nodes(3, subcategory.id)
            if not children.success:
                return Result.from_failure(children.failure)
            grid_categories.extend(
                GridCategory(
                    id=node.id,
                    name=node.name,
                    slug=node.slug,
                    parent_slug=subcategory.slug,
                    image_url=node.image_url,
                )
                for node in children.unwrap()
                if node.show_in_category_grid
            )

        images = await self.store.fetch_category_grid_images(category.id)
        if not images.success:
            return Result.from_failure(images.failure)

        grid_categories.sort(key=lambda item: (item.name, item.id))
        return Result.ok(
            CategoryGrid(category=category, categories=grid_categories, images=images.unwrap())
        )

    async def search(self, query: str, level: int = 1) -> Result[list[CategoryNode]]:
        """Find active categories of a level by name or synonym.

        Args:
            query: Case-insensitive search text.
            level: Tree level to search.

        Returns:
            Matching nodes ordered by name.
        """
        needle = query.strip().lower()
        nodes = await self.store.fetch_category_nodes(level)
        if not nodes.success:
            return nodes
        if not needle:
            return Result.ok([])

        return Result.ok(
            [
                node
                for node in nodes.unwrap()
                if needle in node.name.lower()
                or any(needle in synonym.lower() for synonym in node.synonyms)
            ]
        )
