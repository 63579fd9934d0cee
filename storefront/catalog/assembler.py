"""Result assembler.

Turns a filter state into one page of listings. Each active color, size
and dynamic attribute filter produces a candidate set of product ids; the
sets are computed concurrently, intersected, and the final listing fetch
runs only once all of them are known. An empty candidate set or an empty
intersection ends the pipeline with an empty page and no listing fetch.
"""

import asyncio
from dataclasses import dataclass, field

import structlog

from storefront.catalog.context import PageContext
from storefront.catalog.facets import FacetAvailabilityCalculator
from storefront.catalog.filter_state import FilterState
from storefront.catalog.pipeline import (
    ATTRIBUTE_CANDIDATES,
    COLOR_CANDIDATES,
    SIZE_CANDIDATES,
    QueryCache,
)
from storefront.catalog.store import CatalogStore, ProductQuery, SortKey, price_range_for
from storefront.domain.entities import Product
from storefront.domain.results import Result
from storefront.infrastructure.config import settings

logger = structlog.get_logger()

COLOR_DIMENSION = "colors"
SIZE_DIMENSION = "sizes"


def attribute_dimension(attribute_id: str) -> str:
    """Dimension name of a dynamic attribute filter."""
    return f"attribute:{attribute_id}"


@dataclass(frozen=True)
class Dimension:
    """One active non-category filter.

    Attributes:
        name: Dimension name ("colors", "sizes" or "attribute:<id>").
        attribute_id: Attribute the filter matches on; None if the page has
            no such attribute, in which case nothing matches.
        values: Selected values (OR).
    """

    name: str
    attribute_id: str | None
    values: frozenset[str]


def active_dimensions(context: PageContext, state: FilterState) -> list[Dimension]:
    """List the filters of a state that narrow by product id.

    Args:
        context: Page the state applies to.
        state: Current filter state.

    Returns:
        Active dimensions: colors, sizes, then every selected attribute.
        Attributes the page does not offer still narrow the listing.
    """
    dimensions = []
    if state.colors:
        color = context.color_attribute
        dimensions.append(Dimension(COLOR_DIMENSION, color.id if color else None, state.colors))
    if state.sizes:
        size = context.size_attribute
        dimensions.append(Dimension(SIZE_DIMENSION, size.id if size else None, state.sizes))
    for attribute_id, values in state.attributes:
        dimensions.append(Dimension(attribute_dimension(attribute_id), attribute_id, values))
    return dimensions


@dataclass(frozen=True)
class ProductPage:
    """One page of the filtered listing.

    Attributes:
        items: Listings on this page.
        total: Listings matching the filters.
        has_more: Whether a further page exists.
        page: Zero-based page number.
        page_size: Listings per page.
    """

    items: list[Product] = field(default_factory=list)
    total: int = 0
    has_more: bool = False
    page: int = 0
    page_size: int = 32

    @classmethod
    def empty(cls, page: int, page_size: int) -> "ProductPage":
        return cls(items=[], total=0, has_more=False, page=page, page_size=page_size)


class ResultAssembler:
    """Builds paginated listings from filter states.

    Example usage:
        assembler = ResultAssembler(store, FacetAvailabilityCalculator(store))
        result = await assembler.assemble(context, state, seller_ids, page=0)
    """

    def __init__(
        self,
        store: CatalogStore,
        facets: FacetAvailabilityCalculator,
        cache: QueryCache | None = None,
        page_size: int | None = None,
    ) -> None:
        """Initialize assembler.

        Args:
            store: Catalog store for the final listing fetch.
            facets: Calculator producing candidate sets.
            cache: Memo for candidate sets; a private one when omitted.
            page_size: Listings per page.
        """
        self.store = store
        self.facets = facets
        self.cache = cache or QueryCache()
        self.page_size = page_size or settings.page_size

    async def candidate_set(
        self,
        context: PageContext,
        state: FilterState,
        seller_ids: frozenset[str],
        dimension: Dimension,
    ) -> Result[frozenset[str]]:
        """Get the products matching one dimension on a page.

        Candidate sets ignore the brand selection; brands are applied by
        the scope they are combined with.

        Args:
            context: Current page.
            state: Current filter state.
            seller_ids: Seller allowlist.
            dimension: Active dimension.

        Returns:
            Matching product ids, or the forwarded read failure.
        """
        if dimension.attribute_id is None:
            logger.info("No attribute for active filter", dimension=dimension.name)
            return Result.ok(frozenset())

        if dimension.name == COLOR_DIMENSION:
            node = COLOR_CANDIDATES
        elif dimension.name == SIZE_DIMENSION:
            node = SIZE_CANDIDATES
        else:
            node = ATTRIBUTE_CANDIDATES
        key = node.cache_key(context.key, state, seller_ids, dimension.name, dimension.values)
        scope = context.scope(state, seller_ids, include_brands=False)

        return await self.cache.get_or_compute(
            key,
            lambda: self.facets.product_ids_matching(dimension.attribute_id, dimension.values, scope),
        )

    async def collect_candidates(
        self,
        context: PageContext,
        state: FilterState,
        seller_ids: frozenset[str],
        dimensions: list[Dimension],
    ) -> Result[frozenset[str] | None]:
        """Intersect the candidate sets of several dimensions.

        All sets are computed concurrently. The first failure or the first
        empty intersection cancels the computations still running.

        Args:
            context: Current page.
            state: Current filter state.
            seller_ids: Seller allowlist.
            dimensions: Dimensions to intersect.

        Returns:
            The intersection, None when there are no dimensions, or the
            first read failure.
        """
        if not dimensions:
            return Result.ok(None)

        tasks = [
            asyncio.ensure_future(self.candidate_set(context, state, seller_ids, dimension))
            for dimension in dimensions
        ]
        intersection: frozenset[str] | None = None
        try:
            for next_done in asyncio.as_completed(tasks):
                result = await next_done
                if not result.success:
                    return Result.from_failure(result.failure)

                ids = result.unwrap()
                intersection = ids if intersection is None else intersection & ids
                if not intersection:
                    return Result.ok(frozenset())
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        return Result.ok(intersection)

    async def assemble(
        self,
        context: PageContext,
        state: FilterState,
        seller_ids: frozenset[str],
        page: int = 0,
    ) -> Result[ProductPage]:
        """Build one page of listings for a filter state.

        Args:
            context: Current page.
            state: Current filter state.
            seller_ids: Seller allowlist.
            page: Zero-based page number.

        Returns:
            The page, or the first read failure.
        """
        page = max(page, 0)
        dimensions = active_dimensions(context, state)

        candidates = await self.collect_candidates(context, state, seller_ids, dimensions)
        if not candidates.success:
            return Result.from_failure(candidates.failure)

        candidate_ids = candidates.unwrap()
        if candidate_ids is not None and not candidate_ids:
            logger.debug(
                "Filters match nothing, skipping listing fetch",
                dimensions=[dimension.name for dimension in dimensions],
            )
            return Result.ok(ProductPage.empty(page, self.page_size))

        offset = page * self.page_size
        query = ProductQuery(
            scope=context.scope(state, seller_ids).narrowed(candidate_ids),
            price=price_range_for(state.price),
            sort=SortKey.parse(state.sort),
            offset=offset,
            limit=self.page_size,
        )
        fetched = await self.store.fetch_products(query)
        if not fetched.success:
            return Result.from_failure(fetched.failure)

        products = fetched.unwrap()
        return Result.ok(
            ProductPage(
                items=products.items,
                total=products.total,
                has_more=offset + self.page_size < products.total,
                page=page,
                page_size=self.page_size,
            )
        )
