"""API schemas for the storefront catalog API.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | list[Any] = Field(
        default_factory=dict, description="Additional error details"
    )
    request_id: str | None = Field(default=None, description="Request correlation ID")


class PaginatedResponse(BaseModel):
    """Base paginated response."""

    total: int = Field(..., description="Total number of items")
    page: int = Field(..., description="Current page number (zero-based)")
    page_size: int = Field(..., description="Items per page")
    has_more: bool = Field(..., description="Whether there are more pages")


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryRefSchema(BaseModel):
    """Category reference."""

    id: str = Field(..., description="Category ID")
    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="URL slug")
    level: int = Field(..., ge=1, le=4, description="Tree level")


class PageContextSchema(BaseModel):
    """Resolved shop page."""

    slugs: list[str] = Field(default_factory=list, description="Requested slugs")
    category_ids: list[str] = Field(default_factory=list, description="Resolved ids by level")
    breadcrumb: list[str] = Field(default_factory=list, description="Category names by level")
    is_main_page: bool = Field(..., description="Whether this is the unscoped shop page")


class GridCategorySchema(BaseModel):
    """Category tile in a category grid."""

    id: str
    name: str
    slug: str
    parent_slug: str
    image_url: str | None = None


class GridImageSchema(BaseModel):
    """Promotional grid tile."""

    id: str
    image_url: str
    button_text: str | None = None
    link: str | None = None


class CategoryGridResponse(BaseModel):
    """Grid view of a top-level category."""

    category: CategoryRefSchema
    categories: list[GridCategorySchema] = Field(default_factory=list)
    images: list[GridImageSchema] = Field(default_factory=list)


# ============================================================================
# Product Schemas
# ============================================================================


class ProductSummarySchema(BaseModel):
    """Listing as shown in the shop grid."""

    id: str = Field(..., description="Listing ID")
    name: str = Field(..., description="Listing title")
    slug: str = Field(..., description="URL slug")
    brand_id: str | None = Field(default=None, description="Brand ID")
    seller_id: str = Field(..., description="Seller ID")
    starting_price: Decimal = Field(..., description="List price")
    discounted_price: Decimal | None = Field(default=None, description="Sale price")
    price: Decimal = Field(..., description="Effective price")
    thumbnail: str | None = Field(default=None, description="Image URL")
    created_at: datetime = Field(..., description="Listing creation time")


# ============================================================================
# Facet Schemas
# ============================================================================


class BrandFacetSchema(BaseModel):
    """Selectable brand."""

    id: str
    name: str


class AttributeFacetSchema(BaseModel):
    """Selectable values of a dynamic attribute."""

    attribute_id: str = Field(..., description="Attribute ID")
    label: str = Field(..., description="Display label")
    show_in_top_line: bool = Field(..., description="Shown in the top filter line")
    values: list[str] = Field(default_factory=list, description="Available values")


class FacetsSchema(BaseModel):
    """Every facet of a shop page; hidden filters are empty."""

    categories: list[CategoryRefSchema] = Field(default_factory=list)
    brands: list[BrandFacetSchema] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    attributes: list[AttributeFacetSchema] = Field(default_factory=list)
    price_buckets: list[str] = Field(default_factory=list)
    sort_options: list[str] = Field(default_factory=list)


class FilterStateSchema(BaseModel):
    """Decoded filter state."""

    levels: list[str] = Field(default_factory=list)
    brands: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    attributes: dict[str, list[str]] = Field(default_factory=dict)
    price: str = Field(..., description="Price bucket key")
    sort: str = Field(..., description="Sort key")
    query: str = Field(..., description="Canonical query string")
    active_filter_count: int = Field(..., ge=0)
    has_active_filters: bool


class ShopPageResponse(PaginatedResponse):
    """One shop page: listings, facets and the state behind them."""

    items: list[ProductSummarySchema] = Field(default_factory=list)
    facets: FacetsSchema
    context: PageContextSchema
    state: FilterStateSchema


# ============================================================================
# Filter Transition Schemas
# ============================================================================


class FilterTransitionRequest(BaseModel):
    """One selection event applied to a serialized state."""

    query: str = Field(default="", description="Current serialized state (query string)")
    action: str = Field(..., description="Action name, e.g. toggle_color or set_sort")
    value: str | None = Field(default=None, description="Action argument")
    attribute_id: str | None = Field(
        default=None, description="Attribute for toggle_attribute_option"
    )
