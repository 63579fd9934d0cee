"""Attribute directory.

Finds which attributes apply to a category page: the dynamic attributes
scoped to the page's category path, the color and size attributes that
back the fixed color/size filters, and the per-category filter toggles.
"""

import asyncio

import structlog

from storefront.catalog.hierarchy import ResolvedPath
from storefront.catalog.store import CatalogStore
from storefront.domain.entities import Attribute, AttributeOption, FilterVisibility
from storefront.domain.results import Result

logger = structlog.get_logger()

# Most specific level first; the first level with links wins
SCOPE_LEVEL_PRIORITY = (3, 2, 1)

COLOR_NAME_PATTERNS = ("color", "colour")
GENERIC_SIZE_PATTERN = "size"


def size_pattern_for(category_name: str | None) -> str:
    """Pick the size attribute name pattern for a top-level category.

    Args:
        category_name: Name of the level-1 category, if any.

    Returns:
        `%`-wildcard pattern matched against attribute names.
    """
    name = (category_name or "").lower()
    if "women" in name:
        return "size%women"
    if "men" in name:
        return "size%men"
    if "kid" in name or "junior" in name:
        return "size%junior"
    return GENERIC_SIZE_PATTERN


class AttributeDirectory:
    """Looks up attribute definitions for category pages.

    Example usage:
        directory = AttributeDirectory(store)
        attributes = await directory.filterable_attributes(path)
    """

    def __init__(self, store: CatalogStore) -> None:
        """Initialize directory.

        Args:
            store: Catalog store to read from.
        """
        self.store = store

    async def scoped_attributes(self, path: ResolvedPath) -> Result[list[Attribute]]:
        """Get the attributes linked to a category path.

        Links on a more specific level replace those of less specific
        levels: level 3 wins over level 2, which wins over level 1.

        Args:
            path: Resolved category path.

        Returns:
            Attributes of the most specific linked level (possibly empty).
        """
        for level in SCOPE_LEVEL_PRIORITY:
            category_id = path.id_at(level)
            if category_id is None:
                continue

            links = await self.store.fetch_attribute_links(level, category_id)
            if not links.success:
                return links
            if links.unwrap():
                logger.debug(
                    "Resolved attribute scope",
                    level=level,
                    category_id=category_id,
                    attribute_count=len(links.unwrap()),
                )
                return links

        return Result.ok([])

    async def options(self, attribute_id: str) -> Result[list[AttributeOption]]:
        """Get the active options of an attribute."""
        return await self.store.fetch_attribute_options(attribute_id)

    async def filterable_attributes(self, path: ResolvedPath) -> Result[list[Attribute]]:
        """Get the scoped attributes that have at least one active option.

        Args:
            path: Resolved category path.

        Returns:
            Attributes ordered by display order, then label.
        """
        scoped = await self.scoped_attributes(path)
        if not scoped.success:
            return scoped

        attributes = scoped.unwrap()
        option_results = await asyncio.gather(
            *(self.options(attribute.id) for attribute in attributes)
        )

        filterable = []
        for attribute, options in zip(attributes, option_results):
            if not options.success:
                return Result.from_failure(options.failure)
            if options.unwrap():
                filterable.append(attribute)

        filterable.sort(key=lambda a: (a.display_order, a.display_label, a.id))
        return Result.ok(filterable)

    async def color_attribute(self) -> Result[Attribute | None]:
        """Find the attribute backing the color filter.

        Returns:
            First attribute named like "color", else like "colour", else None.
        """
        for pattern in COLOR_NAME_PATTERNS:
            found = await self.store.find_attributes_by_name(pattern)
            if not found.success:
                return Result.from_failure(found.failure)
            if found.unwrap():
                return Result.ok(found.unwrap()[0])
        return Result.ok(None)

    async def size_attribute(self, category_name: str | None) -> Result[Attribute | None]:
        """Find the attribute backing the size filter for a top-level category.

        Men's categories never pick a women's size attribute. When the
        category-specific pattern finds nothing, the generic "size" pattern
        is tried.

        Args:
            category_name: Name of the level-1 category, if any.

        Returns:
            Size attribute, or None if the catalog has none.
        """
        patterns = [size_pattern_for(category_name)]
        if patterns[0] != GENERIC_SIZE_PATTERN:
            patterns.append(GENERIC_SIZE_PATTERN)

        for pattern in patterns:
            found = await self.store.find_attributes_by_name(pattern)
            if not found.success:
                return Result.from_failure(found.failure)

            candidates = found.unwrap()
            if pattern == "size%men":
                candidates = [a for a in candidates if "women" not in a.name.lower()]
            if candidates:
                return Result.ok(candidates[0])

        return Result.ok(None)

    async def filter_visibility(self, path: ResolvedPath) -> FilterVisibility:
        """Get the fixed-filter toggles of the deepest category on a path.

        Falls back to showing every filter when nothing is configured or the
        read fails.

        Args:
            path: Resolved category path.

        Returns:
            Filter toggles; never fails.
        """
        deepest = path.deepest
        if deepest is None:
            return FilterVisibility()

        result = await self.store.fetch_filter_visibility(deepest.level, deepest.id)
        if not result.success:
            logger.warning(
                "Filter visibility read failed, showing all filters",
                category_id=deepest.id,
                error_code=result.failure.error_code,
            )
            return FilterVisibility()
        return result.unwrap() or FilterVisibility()
