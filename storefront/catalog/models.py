"""SQLAlchemy models for the storefront catalog.

Column types are portable (string ids, JSON synonyms) so the same models
run on PostgreSQL and SQLite. Each model converts to and from the domain
entity the catalog store returns.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Self

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.domain.entities import (
    Attribute,
    AttributeDataType,
    AttributeOption,
    AttributeScope,
    AttributeValueRow,
    Brand,
    CategoryGridImage,
    CategoryNode,
    FilterVisibility,
    Product,
    ProductStatus,
    Seller,
)
from storefront.infrastructure.database import Base


# ============================================================================
# Category Tree
# ============================================================================


class CategoryNodeModel(Base):
    """Category tree node (levels 1-4)."""

    __tablename__ = "category_nodes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    level: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    parent_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("category_nodes.id", ondelete="CASCADE"), nullable=True, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    synonyms: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    show_in_category_grid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def to_entity(self) -> CategoryNode:
        return CategoryNode(
            id=self.id,
            name=self.name,
            slug=self.slug,
            level=self.level,
            parent_id=self.parent_id,
            is_active=self.is_active,
            synonyms=tuple(self.synonyms or ()),
            image_url=self.image_url,
            show_in_category_grid=self.show_in_category_grid,
            display_order=self.display_order,
        )

    @classmethod
    def from_entity(cls, node: CategoryNode) -> Self:
        return cls(
            id=node.id,
            name=node.name,
            slug=node.slug,
            level=node.level,
            parent_id=node.parent_id,
            is_active=node.is_active,
            synonyms=list(node.synonyms),
            image_url=node.image_url,
            show_in_category_grid=node.show_in_category_grid,
            display_order=node.display_order,
        )


class CategoryGridImageModel(Base):
    """Promotional tile of a top-level category."""

    __tablename__ = "category_grid_images"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("category_nodes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    button_text: Mapped[str | None] = mapped_column(String(200), nullable=True)
    link: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def to_entity(self) -> CategoryGridImage:
        return CategoryGridImage(
            id=self.id,
            category_id=self.category_id,
            image_url=self.image_url,
            button_text=self.button_text,
            link=self.link,
            display_order=self.display_order,
        )

    @classmethod
    def from_entity(cls, image: CategoryGridImage) -> Self:
        return cls(
            id=image.id,
            category_id=image.category_id,
            image_url=image.image_url,
            button_text=image.button_text,
            link=image.link,
            display_order=image.display_order,
        )


class CategoryFilterSettingsModel(Base):
    """Fixed-filter toggles of one category node."""

    __tablename__ = "category_filter_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("category_nodes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    show_brand_filter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_size_filter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_color_filter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_price_filter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_entity(self) -> FilterVisibility:
        return FilterVisibility(
            show_brand_filter=self.show_brand_filter,
            show_size_filter=self.show_size_filter,
            show_color_filter=self.show_color_filter,
            show_price_filter=self.show_price_filter,
        )

    @classmethod
    def from_entity(cls, level: int, category_id: str, visibility: FilterVisibility) -> Self:
        return cls(
            level=level,
            category_id=category_id,
            show_brand_filter=visibility.show_brand_filter,
            show_size_filter=visibility.show_size_filter,
            show_color_filter=visibility.show_color_filter,
            show_price_filter=visibility.show_price_filter,
        )


# ============================================================================
# Attributes
# ============================================================================


class AttributeModel(Base):
    """Attribute definition."""

    __tablename__ = "attributes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    display_label: Mapped[str] = mapped_column(String(200), nullable=False)
    data_type: Mapped[str] = mapped_column(String(20), nullable=False, default="text")
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    show_in_top_line: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def to_entity(self) -> Attribute:
        return Attribute(
            id=self.id,
            name=self.name,
            display_label=self.display_label,
            data_type=AttributeDataType(self.data_type),
            display_order=self.display_order,
            show_in_top_line=self.show_in_top_line,
        )

    @classmethod
    def from_entity(cls, attribute: Attribute) -> Self:
        return cls(
            id=attribute.id,
            name=attribute.name,
            display_label=attribute.display_label,
            data_type=attribute.data_type.value,
            display_order=attribute.display_order,
            show_in_top_line=attribute.show_in_top_line,
        )


class AttributeOptionModel(Base):
    """Allowed value of an attribute."""

    __tablename__ = "attribute_options"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    attribute_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("attributes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value: Mapped[str] = mapped_column(String(200), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_entity(self) -> AttributeOption:
        return AttributeOption(
            id=self.id,
            attribute_id=self.attribute_id,
            value=self.value,
            display_order=self.display_order,
            is_active=self.is_active,
        )

    @classmethod
    def from_entity(cls, option: AttributeOption) -> Self:
        return cls(
            id=option.id,
            attribute_id=option.attribute_id,
            value=option.value,
            display_order=option.display_order,
            is_active=option.is_active,
        )


class AttributeScopeModel(Base):
    """Link between an attribute and a category node at a level."""

    __tablename__ = "attribute_scopes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    attribute_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("attributes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("category_nodes.id", ondelete="CASCADE"), nullable=False, index=True
    )

    @classmethod
    def from_entity(cls, scope: AttributeScope) -> Self:
        return cls(attribute_id=scope.attribute_id, level=scope.level, category_id=scope.category_id)


# ============================================================================
# Listings
# ============================================================================


class SellerModel(Base):
    """Marketplace seller."""

    __tablename__ = "sellers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_suspended: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    @classmethod
    def from_entity(cls, seller: Seller) -> Self:
        return cls(id=seller.id, name=seller.name, is_suspended=seller.is_suspended)


class BrandModel(Base):
    """Product brand."""

    __tablename__ = "brands"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)

    def to_entity(self) -> Brand:
        return Brand(id=self.id, name=self.name)

    @classmethod
    def from_entity(cls, brand: Brand) -> Self:
        return cls(id=brand.id, name=brand.name)


class ProductModel(Base):
    """Catalog listing.

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
        status: draft, published, private or out_of_stock.
        starting_price: List price.
        discounted_price: Sale price, if any.
        weight: Shipping weight.
        thumbnail: Image URL.
        created_at: Creation timestamp.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(500), nullable=False)
    seller_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sellers.id"), nullable=False, index=True
    )
    brand_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("brands.id"), nullable=True, index=True
    )
    category_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    subcategory_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    sub_subcategory_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    sub_sub_subcategory_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft", index=True)
    starting_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    discounted_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    weight: Mapped[Decimal | None] = mapped_column(Numeric(10, 3), nullable=True)
    thumbnail: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_entity(self) -> Product:
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Product(
            id=self.id,
            name=self.name,
            slug=self.slug,
            seller_id=self.seller_id,
            brand_id=self.brand_id,
            category_id=self.category_id,
            subcategory_id=self.subcategory_id,
            sub_subcategory_id=self.sub_subcategory_id,
            sub_sub_subcategory_id=self.sub_sub_subcategory_id,
            status=ProductStatus(self.status),
            starting_price=Decimal(self.starting_price),
            discounted_price=(
                Decimal(self.discounted_price) if self.discounted_price is not None else None
            ),
            weight=Decimal(self.weight) if self.weight is not None else None,
            thumbnail=self.thumbnail,
            created_at=created_at,
        )

    @classmethod
    def from_entity(cls, product: Product) -> Self:
        return cls(
            id=product.id,
            name=product.name,
            slug=product.slug,
            seller_id=product.seller_id,
            brand_id=product.brand_id,
            category_id=product.category_id,
            subcategory_id=product.subcategory_id,
            sub_subcategory_id=product.sub_subcategory_id,
            sub_sub_subcategory_id=product.sub_sub_subcategory_id,
            status=product.status.value,
            starting_price=product.starting_price,
            discounted_price=product.discounted_price,
            weight=product.weight,
            thumbnail=product.thumbnail,
            created_at=product.created_at,
        )


class ProductAttributeValueModel(Base):
    """Attribute payload of one product."""

    __tablename__ = "product_attribute_values"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    attribute_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("attributes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    value_number: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    value_boolean: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    value_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    @classmethod
    def from_entity(cls, row: AttributeValueRow) -> Self:
        return cls(
            product_id=row.product_id,
            attribute_id=row.attribute_id,
            value_text=row.value_text,
            value_number=row.value_number,
            value_boolean=row.value_boolean,
            value_date=row.value_date,
        )
