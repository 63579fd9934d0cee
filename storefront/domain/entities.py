"""Catalog entities returned by every catalog store.

These are the boundary types between storage and the filter engine. Stores
translate their rows into these records; nothing above the store layer
touches ORM models or raw query results.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum


class ProductStatus(str, Enum):
    """Listing lifecycle status."""

    DRAFT = "draft"
    PUBLISHED = "published"
    PRIVATE = "private"
    OUT_OF_STOCK = "out_of_stock"


class AttributeDataType(str, Enum):
    """Storage type of an attribute's values."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


# ============================================================================
# Category Tree
# ============================================================================


@dataclass(frozen=True)
class CategoryNode:
    """One node of the four-level category tree.

    Attributes:
        id: Node identifier.
        name: Display name.
        slug: URL slug, unique among siblings.
        level: Depth from 1 (top) to 4 (leaf).
        parent_id: Parent node, None only at level 1.
        is_active: Inactive nodes never resolve and never show as facets.
        synonyms: Alternative names used by category search.
        image_url: Tile image for category grids.
        show_in_category_grid: Whether the node is listed in its category grid.
        display_order: Manual ordering hint.
    """

    id: str
    name: str
    slug: str
    level: int
    parent_id: str | None = None
    is_active: bool = True
    synonyms: tuple[str, ...] = ()
    image_url: str | None = None
    show_in_category_grid: bool = False
    display_order: int = 0


@dataclass(frozen=True)
class CategoryGridImage:
    """Promotional tile attached to a top-level category."""

    id: str
    category_id: str
    image_url: str
    button_text: str | None = None
    link: str | None = None
    display_order: int = 0


@dataclass(frozen=True)
class FilterVisibility:
    """Which fixed filters a category page shows."""

    show_brand_filter: bool = True
    show_size_filter: bool = True
    show_color_filter: bool = True
    show_price_filter: bool = True


# ============================================================================
# Attributes
# ============================================================================


@dataclass(frozen=True)
class Attribute:
    """A product attribute definition (e.g. Colour, Material).

    Attributes:
        id: Attribute identifier.
        name: Internal name, matched by color/size discovery.
        display_label: Label shown to shoppers.
        data_type: Storage type of the attribute's values.
        display_order: Ordering among facets.
        show_in_top_line: Shown in the top filter line rather than "more filters".
    """

    id: str
    name: str
    display_label: str
    data_type: AttributeDataType = AttributeDataType.TEXT
    display_order: int = 0
    show_in_top_line: bool = False


@dataclass(frozen=True)
class AttributeOption:
    """An allowed value of an attribute."""

    id: str
    attribute_id: str
    value: str
    display_order: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class AttributeScope:
    """Links an attribute to a category node at a given level."""

    attribute_id: str
    level: int
    category_id: str


@dataclass(frozen=True)
class AttributeValueRow:
    """Raw attribute payload for one product.

    Exactly one of the value columns is expected to be populated.
    `value_text` may hold a JSON array, a comma-delimited list or a scalar.
    """

    product_id: str
    attribute_id: str
    value_text: str | None = None
    value_number: Decimal | None = None
    value_boolean: bool | None = None
    value_date: date | None = None


# ============================================================================
# Listings
# ============================================================================


@dataclass(frozen=True)
class Seller:
    """Marketplace seller; suspended sellers' listings are hidden."""

    id: str
    name: str
    is_suspended: bool = False


@dataclass(frozen=True)
class Brand:
    """Product brand."""

    id: str
    name: str


@dataclass(frozen=True)
class Product:
    """Catalog listing as seen by the filter engine.

    Attributes:
        id: Listing identifier.
        name: Listing title.
        slug: URL slug.
        seller_id: Owning seller.
        brand_id: Brand, if any.
        category_id: Level-1 category.
        subcategory_id: Level-2 category.
        sub_subcategory_id: Level-3 category.
        sub_sub_subcategory_id: Level-4 category.
        status: Lifecycle status; only published listings are visible.
        starting_price: List price.
        discounted_price: Sale price, if any.
        weight: Shipping weight.
        thumbnail: Image URL.
        created_at: Listing creation time.
    """

    id: str
    name: str
    slug: str
    seller_id: str
    starting_price: Decimal
    brand_id: str | None = None
    category_id: str | None = None
    subcategory_id: str | None = None
    sub_subcategory_id: str | None = None
    sub_sub_subcategory_id: str | None = None
    status: ProductStatus = ProductStatus.PUBLISHED
    discounted_price: Decimal | None = None
    weight: Decimal | None = None
    thumbnail: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def effective_price(self) -> Decimal:
        """Price the shopper pays: the discounted price when set."""
        if self.discounted_price is not None:
            return self.discounted_price
        return self.starting_price

    def category_at(self, level: int) -> str | None:
        """Get the category id this listing carries at a tree level.

        Args:
            level: Tree level 1-4.

        Returns:
            Category id, or None when unset or level is out of range.
        """
        return {
            1: self.category_id,
            2: self.subcategory_id,
            3: self.sub_subcategory_id,
            4: self.sub_sub_subcategory_id,
        }.get(level)
