"""Catalog store protocol and query types.

The filter engine reads the catalog only through `CatalogStore`. Two
implementations exist: `InMemoryCatalogStore` (demo catalog and tests) and
`SqlCatalogStore` (SQLAlchemy). Every method is read-only and returns a
`Result` instead of raising on data-access problems.
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Protocol

from storefront.domain.entities import (
    Attribute,
    AttributeOption,
    AttributeValueRow,
    Brand,
    CategoryGridImage,
    CategoryNode,
    FilterVisibility,
    Product,
    ProductStatus,
)
from storefront.domain.results import Result

MAX_CATEGORY_DEPTH = 4


# ============================================================================
# Scope
# ============================================================================


@dataclass(frozen=True)
class CatalogScope:
    """Constraints shared by facet and listing queries.

    Attributes:
        category_id: Level-1 category of the page.
        subcategory_id: Level-2 category of the page.
        sub_subcategory_id: Level-3 category of the page.
        sub_sub_subcategory_id: Level-4 category of the page.
        lowest_level: Tree level the `lowest_level_ids` belong to.
        lowest_level_ids: Selected lowest-level categories (OR).
        brand_ids: Selected brands (OR); empty means any brand.
        seller_ids: Seller allowlist; None means no seller restriction.
        candidate_ids: Product id narrowing; None means no narrowing and an
            empty set matches nothing.
    """

    category_id: str | None = None
    subcategory_id: str | None = None
    sub_subcategory_id: str | None = None
    sub_sub_subcategory_id: str | None = None
    lowest_level: int | None = None
    lowest_level_ids: frozenset[str] = frozenset()
    brand_ids: frozenset[str] = frozenset()
    seller_ids: frozenset[str] | None = None
    candidate_ids: frozenset[str] | None = None

    @property
    def path_ids(self) -> tuple[str | None, ...]:
        """Page category ids by level, 1 to 4."""
        return (
            self.category_id,
            self.subcategory_id,
            self.sub_subcategory_id,
            self.sub_sub_subcategory_id,
        )

    def narrowed(self, candidate_ids: Iterable[str] | None) -> "CatalogScope":
        """Restrict the scope to a candidate set, intersecting any existing one.

        Args:
            candidate_ids: Candidate product ids, or None for no change.

        Returns:
            Narrowed scope.
        """
        if candidate_ids is None:
            return self
        ids = frozenset(candidate_ids)
        if self.candidate_ids is not None:
            ids = ids & self.candidate_ids
        return replace(self, candidate_ids=ids)

    def matches(self, product: Product) -> bool:
        """Check a listing against the scope.

        Args:
            product: Listing to check.

        Returns:
            True if the listing is visible inside this scope.
        """
        if product.status != ProductStatus.PUBLISHED:
            return False
        if self.seller_ids is not None and product.seller_id not in self.seller_ids:
            return False
        for level, category_id in enumerate(self.path_ids, start=1):
            if category_id is not None and product.category_at(level) != category_id:
                return False
        if self.lowest_level is not None and self.lowest_level_ids:
            if product.category_at(self.lowest_level) not in self.lowest_level_ids:
                return False
        if self.brand_ids and product.brand_id not in self.brand_ids:
            return False
        if self.candidate_ids is not None and product.id not in self.candidate_ids:
            return False
        return True


# ============================================================================
# Listing Query
# ============================================================================


class SortKey(str, Enum):
    """Listing sort order."""

    FEATURED = "featured"
    NEWEST = "newest"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"

    @classmethod
    def parse(cls, value: str | None) -> "SortKey":
        """Parse a sort key, falling back to the default listing order."""
        try:
            return cls(value)
        except ValueError:
            return cls.FEATURED


@dataclass(frozen=True)
class PriceRange:
    """Half-open range on starting price: min inclusive, max exclusive.

    Discounts do not move a listing between buckets; they only affect
    price sorting.
    """

    min_price: Decimal | None = None
    max_price: Decimal | None = None

    def contains(self, price: Decimal) -> bool:
        if self.min_price is not None and price < self.min_price:
            return False
        if self.max_price is not None and price >= self.max_price:
            return False
        return True


PRICE_BUCKETS: dict[str, PriceRange] = {
    "all": PriceRange(),
    "0-50": PriceRange(max_price=Decimal("50")),
    "50-100": PriceRange(min_price=Decimal("50"), max_price=Decimal("100")),
    "100-200": PriceRange(min_price=Decimal("100"), max_price=Decimal("200")),
    "200+": PriceRange(min_price=Decimal("200")),
}


def price_range_for(bucket: str) -> PriceRange:
    """Get the price range of a bucket key; unknown keys mean no price limit."""
    return PRICE_BUCKETS.get(bucket, PRICE_BUCKETS["all"])


@dataclass(frozen=True)
class ProductQuery:
    """Final listing fetch."""

    scope: CatalogScope
    price: PriceRange = PriceRange()
    sort: SortKey = SortKey.FEATURED
    offset: int = 0
    limit: int = 32


@dataclass(frozen=True)
class ProductSlice:
    """One page of listings plus the total match count."""

    items: list[Product]
    total: int


# ============================================================================
# Store Protocol
# ============================================================================


class CatalogStore(Protocol):
    """Read-only access to the catalog."""

    async def fetch_category_nodes(
        self, level: int, parent_id: str | None = None
    ) -> Result[list[CategoryNode]]:
        """Active nodes at a level, optionally under one parent, ordered by name."""
        ...

    async def fetch_category_grid_images(
        self, category_id: str
    ) -> Result[list[CategoryGridImage]]:
        """Grid images of a category, ordered by display order."""
        ...

    async def fetch_attribute_links(
        self, level: int, category_id: str
    ) -> Result[list[Attribute]]:
        """Attributes linked to a category node at the given level."""
        ...

    async def fetch_attribute_options(
        self, attribute_id: str
    ) -> Result[list[AttributeOption]]:
        """Active options of an attribute, ordered by display order."""
        ...

    async def find_attributes_by_name(self, pattern: str) -> Result[list[Attribute]]:
        """Attributes whose name contains a `%`-wildcard pattern, case-insensitively.

        Ordered by display order, then name.
        """
        ...

    async def fetch_active_seller_ids(self) -> Result[frozenset[str]]:
        """Ids of sellers that are not suspended."""
        ...

    async def fetch_attribute_value_rows(
        self, attribute_id: str, scope: CatalogScope, limit: int
    ) -> Result[list[AttributeValueRow]]:
        """Value rows of an attribute for listings inside the scope."""
        ...

    async def fetch_available_brands(self, scope: CatalogScope) -> Result[list[Brand]]:
        """Distinct brands of listings inside the scope, ordered by name."""
        ...

    async def fetch_products(self, query: ProductQuery) -> Result[ProductSlice]:
        """One sorted page of listings plus the total count."""
        ...

    async def fetch_filter_visibility(
        self, level: int, category_id: str
    ) -> Result[FilterVisibility | None]:
        """Filter toggles configured for a category node, if any."""
        ...
