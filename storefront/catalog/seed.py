"""Catalog seeding.

Writes a `CatalogSnapshot` (usually from the generator) into the SQL
tables read by `SqlCatalogStore`.
"""

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from storefront.catalog.memory_store import CatalogSnapshot
from storefront.catalog.models import (
    AttributeModel,
    AttributeOptionModel,
    AttributeScopeModel,
    BrandModel,
    CategoryFilterSettingsModel,
    CategoryGridImageModel,
    CategoryNodeModel,
    ProductAttributeValueModel,
    ProductModel,
    SellerModel,
)
from storefront.infrastructure.database import Base

logger = structlog.get_logger()

# Parents before children
TABLE_ORDER = [
    CategoryNodeModel,
    CategoryGridImageModel,
    CategoryFilterSettingsModel,
    AttributeModel,
    AttributeOptionModel,
    AttributeScopeModel,
    SellerModel,
    BrandModel,
    ProductModel,
    ProductAttributeValueModel,
]


async def create_tables(engine: AsyncEngine) -> None:
    """Create catalog tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def write_snapshot(
    session: AsyncSession,
    snapshot: CatalogSnapshot,
    clear_existing: bool = True,
) -> dict[str, int]:
    """Write a snapshot into the catalog tables.

    Rows are flushed table by table in dependency order; the caller owns
    the transaction.

    Args:
        session: Database session.
        snapshot: Catalog contents to write.
        clear_existing: Delete existing catalog rows first.

    Returns:
        Number of rows written per table.
    """
    if clear_existing:
        for model in reversed(TABLE_ORDER):
            await session.execute(delete(model))

    # Level order keeps parents ahead of their children
    categories = sorted(snapshot.categories, key=lambda node: node.level)
    rows: dict[type, list] = {
        CategoryNodeModel: [CategoryNodeModel.from_entity(node) for node in categories],
        CategoryGridImageModel: [
            CategoryGridImageModel.from_entity(image) for image in snapshot.grid_images
        ],
        CategoryFilterSettingsModel: [
            CategoryFilterSettingsModel.from_entity(level, category_id, visibility)
            for (level, category_id), visibility in snapshot.filter_visibility.items()
        ],
        AttributeModel: [AttributeModel.from_entity(a) for a in snapshot.attributes],
        AttributeOptionModel: [
            AttributeOptionModel.from_entity(option) for option in snapshot.attribute_options
        ],
        AttributeScopeModel: [
            AttributeScopeModel.from_entity(scope) for scope in snapshot.attribute_scopes
        ],
        SellerModel: [SellerModel.from_entity(seller) for seller in snapshot.sellers],
        BrandModel: [BrandModel.from_entity(brand) for brand in snapshot.brands],
        ProductModel: [ProductModel.from_entity(product) for product in snapshot.products],
        ProductAttributeValueModel: [
            ProductAttributeValueModel.from_entity(row) for row in snapshot.attribute_values
        ],
    }

    counts: dict[str, int] = {}
    for model in TABLE_ORDER:
        session.add_all(rows[model])
        await session.flush()
        counts[model.__tablename__] = len(rows[model])

    logger.info("Catalog snapshot written", **counts)
    return counts
