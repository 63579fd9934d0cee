"""Shop service.

Composes the hierarchy resolver, attribute directory, facet calculator and
result assembler into the operations a shop page needs: resolve the page
from its URL path, then build the listing and every facet for a filter
state.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from storefront.catalog.assembler import (
    COLOR_DIMENSION,
    SIZE_DIMENSION,
    ProductPage,
    ResultAssembler,
    active_dimensions,
    attribute_dimension,
)
from storefront.catalog.attributes import AttributeDirectory
from storefront.catalog.context import PageContext
from storefront.catalog.facets import FacetAvailabilityCalculator
from storefront.catalog.filter_state import (
    PRICE_BUCKET_KEYS,
    SORT_KEYS,
    FilterState,
    decode,
    to_query_string,
)
from storefront.catalog.hierarchy import CategoryFacetOption, CategoryGrid, CategoryHierarchyResolver
from storefront.catalog.pipeline import (
    ATTRIBUTE_FACET,
    BRAND_FACET,
    COLOR_FACET,
    PAGE_CONTEXT,
    SELLERS,
    SIZE_FACET,
    FilterSession,
    QueryCache,
    QueryNode,
)
from storefront.catalog.store import CatalogScope, CatalogStore
from storefront.domain.entities import Attribute, Brand, CategoryNode
from storefront.domain.results import CATEGORY_NOT_FOUND, Result

logger = structlog.get_logger()


# ============================================================================
# Views
# ============================================================================


@dataclass(frozen=True)
class AttributeFacet:
    """Available values of one dynamic attribute."""

    attribute: Attribute
    values: tuple[str, ...]


@dataclass(frozen=True)
class FacetSet:
    """Every facet shown on a shop page.

    Hidden filters carry no values.
    """

    categories: tuple[CategoryFacetOption, ...] = ()
    brands: tuple[Brand, ...] = ()
    colors: tuple[str, ...] = ()
    sizes: tuple[str, ...] = ()
    attributes: tuple[AttributeFacet, ...] = ()
    price_buckets: tuple[str, ...] = PRICE_BUCKET_KEYS
    sort_options: tuple[str, ...] = SORT_KEYS


@dataclass(frozen=True)
class ShopView:
    """A rendered shop page: listing, facets and the state behind them."""

    context: PageContext
    state: FilterState
    products: ProductPage
    facets: FacetSet = field(default_factory=FacetSet)

    @property
    def query_string(self) -> str:
        """Canonical serialization of the state."""
        return to_query_string(self.state)


# ============================================================================
# Service
# ============================================================================


class ShopService:
    """Shop page operations over a catalog store.

    Example usage:
        service = ShopService(store)
        result = await service.browse(["shoes"], {"brands": "nike", "sizes": "9"})
        view = result.unwrap()
        print(view.products.total, view.facets.colors)
    """

    def __init__(
        self,
        store: CatalogStore,
        cache: QueryCache | None = None,
        page_size: int | None = None,
    ) -> None:
        """Initialize service.

        Args:
            store: Catalog store to read from.
            cache: Shared query memo; a new one when omitted.
            page_size: Listings per page.
        """
        self.store = store
        self.cache = cache or QueryCache()
        self.hierarchy = CategoryHierarchyResolver(store)
        self.attributes = AttributeDirectory(store)
        self.facets = FacetAvailabilityCalculator(store)
        self.assembler = ResultAssembler(store, self.facets, self.cache, page_size)

    async def _memoized(
        self,
        node: QueryNode,
        key_parts: tuple,
        compute: Callable[[], Awaitable[Result[Any]]],
    ) -> Result[Any]:
        if not node.cacheable:
            return await compute()
        return await self.cache.get_or_compute((node.name, *key_parts), compute)

    # ========================================================================
    # Page Context
    # ========================================================================

    async def resolve_context(self, slugs: Sequence[str]) -> Result[PageContext]:
        """Resolve a shop page from its URL path.

        Args:
            slugs: Category slugs, top level first (empty for the shop root).

        Returns:
            Page context, a CATEGORY_NOT_FOUND failure for unknown paths, or
            the forwarded read failure.
        """
        key = tuple(slug.strip().lower() for slug in slugs)
        return await self._memoized(PAGE_CONTEXT, key, lambda: self._build_context(key))

    async def _build_context(self, slugs: tuple[str, ...]) -> Result[PageContext]:
        resolved = await self.hierarchy.resolve(slugs)
        if not resolved.success:
            return Result.from_failure(resolved.failure)

        path = resolved.unwrap()
        if not path.found:
            return Result.fail(
                CATEGORY_NOT_FOUND,
                f"Category path '{'/'.join(slugs)}' not found",
                details={"slugs": list(slugs), "resolved_ids": list(path.level_ids)},
            )

        top_level = path.top_level
        options, color, size, filterable, visibility = await asyncio.gather(
            self.hierarchy.lowest_level_options(path),
            self.attributes.color_attribute(),
            self.attributes.size_attribute(top_level.name if top_level else None),
            self.attributes.filterable_attributes(path),
            self.attributes.filter_visibility(path),
        )
        for result in (options, color, size, filterable):
            if not result.success:
                return Result.from_failure(result.failure)

        fixed_ids = {attribute.id for attribute in (color.unwrap(), size.unwrap()) if attribute}
        context = PageContext(
            path=path,
            lowest_level_options=tuple(options.unwrap()),
            color_attribute=color.unwrap(),
            size_attribute=size.unwrap(),
            dynamic_attributes=tuple(a for a in filterable.unwrap() if a.id not in fixed_ids),
            visibility=visibility,
        )
        logger.info(
            "Resolved shop page",
            slugs=list(slugs),
            category_ids=[node.id for node in path.nodes],
            dynamic_attributes=len(context.dynamic_attributes),
        )
        return Result.ok(context)

    # ========================================================================
    # Views
    # ========================================================================

    async def build_view(
        self,
        context: PageContext,
        state: FilterState,
        page: int = 0,
    ) -> Result[ShopView]:
        """Build the listing and facets of a page for a filter state.

        Args:
            context: Resolved page.
            state: Filter state.
            page: Zero-based listing page.

        Returns:
            Shop view, or the first read failure.
        """
        sellers = await self._memoized(SELLERS, (), self.store.fetch_active_seller_ids)
        if not sellers.success:
            return Result.from_failure(sellers.failure)
        seller_ids = sellers.unwrap()

        products, facets = await asyncio.gather(
            self.assembler.assemble(context, state, seller_ids, page),
            self.facet_set(context, state, seller_ids),
        )
        if not products.success:
            return Result.from_failure(products.failure)
        if not facets.success:
            return Result.from_failure(facets.failure)

        return Result.ok(
            ShopView(context=context, state=state, products=products.unwrap(), facets=facets.unwrap())
        )

    async def browse(
        self,
        slugs: Sequence[str],
        params: Mapping[str, Any] | None = None,
        page: int = 0,
    ) -> Result[ShopView]:
        """Resolve a page and build its view from URL parameters.

        Args:
            slugs: Category slugs, top level first.
            params: URL parameters holding the serialized filter state.
            page: Zero-based listing page.

        Returns:
            Shop view, or the failure that stopped it.
        """
        context = await self.resolve_context(slugs)
        if not context.success:
            return Result.from_failure(context.failure)
        return await self.build_view(context.unwrap(), decode(params or {}), page)

    async def category_grid(self, category_slug: str) -> Result[CategoryGrid]:
        """Build the grid view of a top-level category.

        Args:
            category_slug: Slug of a level-1 category.

        Returns:
            Category grid, CATEGORY_NOT_FOUND, or the forwarded read failure.
        """
        resolved = await self.hierarchy.resolve([category_slug])
        if not resolved.success:
            return Result.from_failure(resolved.failure)

        path = resolved.unwrap()
        if not path.found or path.top_level is None:
            return Result.fail(
                CATEGORY_NOT_FOUND,
                f"Category '{category_slug}' not found",
                details={"slugs": [category_slug]},
            )
        return await self.hierarchy.category_grid(path.top_level)

    async def search_categories(self, query: str, level: int = 1) -> Result[list[CategoryNode]]:
        """Find active categories of one level by name or synonym.

        Args:
            query: Case-insensitive search text; blank text matches nothing.
            level: Tree level to search.

        Returns:
            Matching categories, or the forwarded read failure.
        """
        result = await self.hierarchy.search(query, level)
        if result.success:
            logger.debug("Searched categories", query=query, level=level, matches=len(result.unwrap()))
        return result

    def open_session(self, context: PageContext, state: FilterState | None = None) -> FilterSession:
        """Start a filter session on a page."""
        return FilterSession(self, context, state)

    # ========================================================================
    # Facets
    # ========================================================================

    async def _narrowing(
        self,
        context: PageContext,
        state: FilterState,
        seller_ids: frozenset[str],
        excluding: str | None,
    ) -> Result[frozenset[str] | None]:
        dimensions = [d for d in active_dimensions(context, state) if d.name != excluding]
        return await self.assembler.collect_candidates(context, state, seller_ids, dimensions)

    async def _values_facet(
        self,
        node: QueryNode,
        context: PageContext,
        state: FilterState,
        seller_ids: frozenset[str],
        attribute: Attribute,
        dimension: str,
    ) -> Result[tuple[str, ...]]:
        async def compute() -> Result[tuple[str, ...]]:
            narrowing = await self._narrowing(context, state, seller_ids, dimension)
            if not narrowing.success:
                return Result.from_failure(narrowing.failure)
            scope = context.scope(state, seller_ids).narrowed(narrowing.unwrap())
            return await self.facets.available_values(attribute.id, scope)

        key = node.cache_key(context.key, state, seller_ids, attribute.id)
        return await self.cache.get_or_compute(key, compute)

    async def _brand_facet(
        self,
        context: PageContext,
        state: FilterState,
        seller_ids: frozenset[str],
    ) -> Result[list[Brand]]:
        async def compute() -> Result[list[Brand]]:
            narrowing = await self._narrowing(context, state, seller_ids, None)
            if not narrowing.success:
                return Result.from_failure(narrowing.failure)
            scope: CatalogScope = context.scope(state, seller_ids, include_brands=False)
            return await self.facets.available_brands(scope.narrowed(narrowing.unwrap()))

        key = BRAND_FACET.cache_key(context.key, state, seller_ids)
        return await self.cache.get_or_compute(key, compute)

    async def facet_set(
        self,
        context: PageContext,
        state: FilterState,
        seller_ids: frozenset[str],
    ) -> Result[FacetSet]:
        """Compute every visible facet of a page.

        Each facet is narrowed by every active filter except its own, so
        a shopper can still switch between values of one filter.

        Args:
            context: Resolved page.
            state: Filter state.
            seller_ids: Seller allowlist.

        Returns:
            Facet set, or the first read failure.
        """
        visibility = context.visibility

        async def nothing() -> Result[Any]:
            return Result.ok(())

        brands_call = (
            self._brand_facet(context, state, seller_ids)
            if visibility.show_brand_filter
            else nothing()
        )
        colors_call = (
            self._values_facet(
                COLOR_FACET, context, state, seller_ids, context.color_attribute, COLOR_DIMENSION
            )
            if visibility.show_color_filter and context.color_attribute is not None
            else nothing()
        )
        sizes_call = (
            self._values_facet(
                SIZE_FACET, context, state, seller_ids, context.size_attribute, SIZE_DIMENSION
            )
            if visibility.show_size_filter and context.size_attribute is not None
            else nothing()
        )
        attribute_calls = [
            self._values_facet(
                ATTRIBUTE_FACET,
                context,
                state,
                seller_ids,
                attribute,
                attribute_dimension(attribute.id),
            )
            for attribute in context.dynamic_attributes
        ]

        brands, colors, sizes, *attribute_values = await asyncio.gather(
            brands_call, colors_call, sizes_call, *attribute_calls
        )
        for result in (brands, colors, sizes, *attribute_values):
            if not result.success:
                return Result.from_failure(result.failure)

        attribute_facets = tuple(
            AttributeFacet(attribute=attribute, values=values.unwrap())
            for attribute, values in zip(context.dynamic_attributes, attribute_values)
            if values.unwrap()
        )
        return Result.ok(
            FacetSet(
                categories=context.lowest_level_options,
                brands=tuple(brands.unwrap()),
                colors=tuple(colors.unwrap()),
                sizes=tuple(sizes.unwrap()),
                attributes=attribute_facets,
                price_buckets=PRICE_BUCKET_KEYS if visibility.show_price_filter else (),
            )
        )
