"""In-memory catalog store.

Serves a `CatalogSnapshot` held in process memory. Used for the demo
catalog and in tests; behaves like `SqlCatalogStore` for every query.
"""

import re
from dataclasses import dataclass, field

import structlog

from storefront.catalog.store import CatalogScope, ProductQuery, ProductSlice, SortKey
from storefront.domain.entities import (
    Attribute,
    AttributeOption,
    AttributeScope,
    AttributeValueRow,
    Brand,
    CategoryGridImage,
    CategoryNode,
    FilterVisibility,
    Product,
    Seller,
)
from storefront.domain.results import Result

logger = structlog.get_logger()


@dataclass
class CatalogSnapshot:
    """Complete catalog contents.

    Attributes:
        categories: Category tree nodes.
        grid_images: Category grid tiles.
        attributes: Attribute definitions.
        attribute_options: Allowed attribute values.
        attribute_scopes: Attribute-to-category links.
        sellers: Marketplace sellers.
        brands: Brands.
        products: Listings.
        attribute_values: Per-product attribute payloads.
        filter_visibility: Filter toggles keyed by (level, category id).
    """

    categories: list[CategoryNode] = field(default_factory=list)
    grid_images: list[CategoryGridImage] = field(default_factory=list)
    attributes: list[Attribute] = field(default_factory=list)
    attribute_options: list[AttributeOption] = field(default_factory=list)
    attribute_scopes: list[AttributeScope] = field(default_factory=list)
    sellers: list[Seller] = field(default_factory=list)
    brands: list[Brand] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    attribute_values: list[AttributeValueRow] = field(default_factory=list)
    filter_visibility: dict[tuple[int, str], FilterVisibility] = field(default_factory=dict)


def _name_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a `%`-wildcard pattern into a case-insensitive contains match."""
    return re.compile(".*".join(re.escape(part) for part in pattern.split("%")), re.IGNORECASE)


class InMemoryCatalogStore:
    """Catalog store over an in-memory snapshot.

    Example usage:
        store = InMemoryCatalogStore(generate_catalog(seed=42))
        result = await store.fetch_category_nodes(level=1)
    """

    def __init__(self, snapshot: CatalogSnapshot | None = None) -> None:
        """Initialize store.

        Args:
            snapshot: Catalog contents; an empty catalog when omitted.
        """
        self.snapshot = snapshot or CatalogSnapshot()
        self._products_by_id = {product.id: product for product in self.snapshot.products}
        self._attributes_by_id = {attribute.id: attribute for attribute in self.snapshot.attributes}
        self._brands_by_id = {brand.id: brand for brand in self.snapshot.brands}

    def _visible_products(self, scope: CatalogScope) -> list[Product]:
        return [product for product in self.snapshot.products if scope.matches(product)]

    # ========================================================================
    # Category Tree
    # ========================================================================

    async def fetch_category_nodes(
        self, level: int, parent_id: str | None = None
    ) -> Result[list[CategoryNode]]:
        nodes = [
            node
            for node in self.snapshot.categories
            if node.level == level
            and node.is_active
            and (parent_id is None or node.parent_id == parent_id)
        ]
        return Result.ok(sorted(nodes, key=lambda node: (node.name, node.id)))

    async def fetch_category_grid_images(
        self, category_id: str
    ) -> Result[list[CategoryGridImage]]:
        images = [image for image in self.snapshot.grid_images if image.category_id == category_id]
        return Result.ok(sorted(images, key=lambda image: (image.display_order, image.id)))

    async def fetch_filter_visibility(
        self, level: int, category_id: str
    ) -> Result[FilterVisibility | None]:
        return Result.ok(self.snapshot.filter_visibility.get((level, category_id)))

    # ========================================================================
    # Attributes
    # ========================================================================

    async def fetch_attribute_links(
        self, level: int, category_id: str
    ) -> Result[list[Attribute]]:
        attribute_ids = {
            scope.attribute_id
            for scope in self.snapshot.attribute_scopes
            if scope.level == level and scope.category_id == category_id
        }
        attributes = [
            self._attributes_by_id[attribute_id]
            for attribute_id in attribute_ids
            if attribute_id in self._attributes_by_id
        ]
        return Result.ok(sorted(attributes, key=lambda a: (a.display_order, a.display_label, a.id)))

    async def fetch_attribute_options(
        self, attribute_id: str
    ) -> Result[list[AttributeOption]]:
        options = [
            option
            for option in self.snapshot.attribute_options
            if option.attribute_id == attribute_id and option.is_active
        ]
        return Result.ok(sorted(options, key=lambda o: (o.display_order, o.value)))

    async def find_attributes_by_name(self, pattern: str) -> Result[list[Attribute]]:
        matcher = _name_pattern(pattern)
        attributes = [a for a in self.snapshot.attributes if matcher.search(a.name)]
        return Result.ok(sorted(attributes, key=lambda a: (a.display_order, a.name, a.id)))

    async def fetch_attribute_value_rows(
        self, attribute_id: str, scope: CatalogScope, limit: int
    ) -> Result[list[AttributeValueRow]]:
        rows = []
        for row in self.snapshot.attribute_values:
            if row.attribute_id != attribute_id:
                continue
            product = self._products_by_id.get(row.product_id)
            if product is None or not scope.matches(product):
                continue
            rows.append(row)
            if len(rows) >= limit:
                logger.warning(
                    "Attribute value rows truncated",
                    attribute_id=attribute_id,
                    limit=limit,
                )
                break
        return Result.ok(rows)

    # ========================================================================
    # Listings
    # ========================================================================

    async def fetch_active_seller_ids(self) -> Result[frozenset[str]]:
        return Result.ok(
            frozenset(seller.id for seller in self.snapshot.sellers if not seller.is_suspended)
        )

    async def fetch_available_brands(self, scope: CatalogScope) -> Result[list[Brand]]:
        brand_ids = {
            product.brand_id
            for product in self._visible_products(scope)
            if product.brand_id is not None
        }
        brands = [self._brands_by_id[brand_id] for brand_id in brand_ids if brand_id in self._brands_by_id]
        return Result.ok(sorted(brands, key=lambda brand: (brand.name, brand.id)))

    async def fetch_products(self, query: ProductQuery) -> Result[ProductSlice]:
        matches = [
            product
            for product in self._visible_products(query.scope)
            if query.price.contains(product.starting_price)
        ]

        # Ties always resolve by id ascending
        matches.sort(key=lambda product: product.id)
        if query.sort == SortKey.PRICE_LOW:
            matches.sort(key=lambda product: product.effective_price)
        elif query.sort == SortKey.PRICE_HIGH:
            matches.sort(key=lambda product: product.effective_price, reverse=True)
        else:
            matches.sort(key=lambda product: product.created_at, reverse=True)

        page = matches[query.offset : query.offset + query.limit]
        return Result.ok(ProductSlice(items=page, total=len(matches)))
