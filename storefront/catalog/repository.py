"""SQL catalog store.

Implements `CatalogStore` with SQLAlchemy. Every read opens its own
session, so the engine's concurrent queries never share an `AsyncSession`.
Database errors are logged and returned as DATA_ACCESS_ERROR failures.
"""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from sqlalchemy import String, and_, any_, bindparam, false, func, select
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

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
from storefront.catalog.store import CatalogScope, ProductQuery, ProductSlice, SortKey
from storefront.domain.entities import (
    Attribute,
    AttributeOption,
    AttributeValueRow,
    Brand,
    CategoryGridImage,
    CategoryNode,
    FilterVisibility,
    ProductStatus,
)
from storefront.domain.results import DATA_ACCESS_ERROR, Result

logger = structlog.get_logger()

T = TypeVar("T")

# Product column holding the category id of each tree level
LEVEL_COLUMNS = {
    1: ProductModel.category_id,
    2: ProductModel.subcategory_id,
    3: ProductModel.sub_subcategory_id,
    4: ProductModel.sub_sub_subcategory_id,
}

EFFECTIVE_PRICE = func.coalesce(ProductModel.discounted_price, ProductModel.starting_price)


def dialect_name(session: AsyncSession) -> str:
    """Name of the database dialect a session talks to."""
    return session.bind.dialect.name if session.bind is not None else ""


def candidate_condition(candidate_ids: frozenset[str], dialect: str) -> Any:
    """Restrict products to a non-empty candidate id set.

    PostgreSQL receives the ids as one array parameter, so candidate sets
    larger than the driver's bind parameter limit still work.
    """
    ids = sorted(candidate_ids)
    if dialect == "postgresql":
        return ProductModel.id == any_(
            bindparam("candidate_ids", ids, type_=postgresql.ARRAY(String), unique=True)
        )
    return ProductModel.id.in_(ids)


def scope_conditions(scope: CatalogScope, dialect: str = "") -> list[Any]:
    """Translate a scope into WHERE conditions on `products`.

    Args:
        scope: Catalog scope.
        dialect: Dialect name of the session the conditions run on.

    Returns:
        Conditions to AND together.
    """
    conditions: list[Any] = [ProductModel.status == ProductStatus.PUBLISHED.value]

    if scope.seller_ids is not None:
        if scope.seller_ids:
            conditions.append(ProductModel.seller_id.in_(sorted(scope.seller_ids)))
        else:
            conditions.append(false())

    for level, category_id in enumerate(scope.path_ids, start=1):
        if category_id is not None:
            conditions.append(LEVEL_COLUMNS[level] == category_id)

    if scope.lowest_level in LEVEL_COLUMNS and scope.lowest_level_ids:
        conditions.append(LEVEL_COLUMNS[scope.lowest_level].in_(sorted(scope.lowest_level_ids)))

    if scope.brand_ids:
        conditions.append(ProductModel.brand_id.in_(sorted(scope.brand_ids)))

    if scope.candidate_ids is not None:
        if scope.candidate_ids:
            conditions.append(candidate_condition(scope.candidate_ids, dialect))
        else:
            conditions.append(false())

    return conditions


class SqlCatalogStore:
    """Catalog store backed by a SQL database.

    Example usage:
        store = SqlCatalogStore(get_session_factory())
        result = await store.fetch_products(ProductQuery(scope=CatalogScope()))
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize store.

        Args:
            session_factory: Factory opening one session per read.
        """
        self.session_factory = session_factory

    async def _read(
        self,
        operation: str,
        query: Callable[[AsyncSession], Awaitable[T]],
    ) -> Result[T]:
        """Run one read in its own session.

        Args:
            operation: Operation name for logs and failure details.
            query: Coroutine function receiving the session.

        Returns:
            Query result, or a DATA_ACCESS_ERROR failure.
        """
        try:
            async with self.session_factory() as session:
                return Result.ok(await query(session))
        except SQLAlchemyError as e:
            logger.error("Catalog read failed", operation=operation, error=str(e))
            return Result.fail(
                DATA_ACCESS_ERROR,
                f"Catalog read failed: {operation}",
                details={"operation": operation},
            )

    # ========================================================================
    # Category Tree
    # ========================================================================

    async def fetch_category_nodes(
        self, level: int, parent_id: str | None = None
    ) -> Result[list[CategoryNode]]:
        async def query(session: AsyncSession) -> list[CategoryNode]:
            conditions = [CategoryNodeModel.level == level, CategoryNodeModel.is_active.is_(True)]
            if parent_id is not None:
                conditions.append(CategoryNodeModel.parent_id == parent_id)
            stmt = (
                select(CategoryNodeModel)
                .where(and_(*conditions))
                .order_by(CategoryNodeModel.name, CategoryNodeModel.id)
            )
            result = await session.execute(stmt)
            return [row.to_entity() for row in result.scalars()]

        return await self._read("fetch_category_nodes", query)

    async def fetch_category_grid_images(
        self, category_id: str
    ) -> Result[list[CategoryGridImage]]:
        async def query(session: AsyncSession) -> list[CategoryGridImage]:
            stmt = (
                select(CategoryGridImageModel)
                .where(CategoryGridImageModel.category_id == category_id)
                .order_by(CategoryGridImageModel.display_order, CategoryGridImageModel.id)
            )
            result = await session.execute(stmt)
            return [row.to_entity() for row in result.scalars()]

        return await self._read("fetch_category_grid_images", query)

    async def fetch_filter_visibility(
        self, level: int, category_id: str
    ) -> Result[FilterVisibility | None]:
        async def query(session: AsyncSession) -> FilterVisibility | None:
            stmt = (
                select(CategoryFilterSettingsModel)
                .where(
                    and_(
                        CategoryFilterSettingsModel.level == level,
                        CategoryFilterSettingsModel.category_id == category_id,
                    )
                )
                .limit(1)
            )
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()
            return row.to_entity() if row is not None else None

        return await self._read("fetch_filter_visibility", query)

    # ========================================================================
    # Attributes
    # ========================================================================

    async def fetch_attribute_links(
        self, level: int, category_id: str
    ) -> Result[list[Attribute]]:
        async def query(session: AsyncSession) -> list[Attribute]:
            stmt = (
                select(AttributeModel)
                .join(AttributeScopeModel, AttributeScopeModel.attribute_id == AttributeModel.id)
                .where(
                    and_(
                        AttributeScopeModel.level == level,
                        AttributeScopeModel.category_id == category_id,
                    )
                )
                .distinct()
                .order_by(
                    AttributeModel.display_order,
                    AttributeModel.display_label,
                    AttributeModel.id,
                )
            )
            result = await session.execute(stmt)
            return [row.to_entity() for row in result.scalars()]

        return await self._read("fetch_attribute_links", query)

    async def fetch_attribute_options(
        self, attribute_id: str
    ) -> Result[list[AttributeOption]]:
        async def query(session: AsyncSession) -> list[AttributeOption]:
            stmt = (
                select(AttributeOptionModel)
                .where(
                    and_(
                        AttributeOptionModel.attribute_id == attribute_id,
                        AttributeOptionModel.is_active.is_(True),
                    )
                )
                .order_by(AttributeOptionModel.display_order, AttributeOptionModel.value)
            )
            result = await session.execute(stmt)
            return [row.to_entity() for row in result.scalars()]

        return await self._read("fetch_attribute_options", query)

    async def find_attributes_by_name(self, pattern: str) -> Result[list[Attribute]]:
        async def query(session: AsyncSession) -> list[Attribute]:
            stmt = (
                select(AttributeModel)
                .where(AttributeModel.name.ilike(f"%{pattern}%"))
                .order_by(AttributeModel.display_order, AttributeModel.name, AttributeModel.id)
            )
            result = await session.execute(stmt)
            return [row.to_entity() for row in result.scalars()]

        return await self._read("find_attributes_by_name", query)

    async def fetch_attribute_value_rows(
        self, attribute_id: str, scope: CatalogScope, limit: int
    ) -> Result[list[AttributeValueRow]]:
        async def query(session: AsyncSession) -> list[AttributeValueRow]:
            stmt = (
                select(ProductAttributeValueModel)
                .join(ProductModel, ProductModel.id == ProductAttributeValueModel.product_id)
                .where(
                    and_(
                        ProductAttributeValueModel.attribute_id == attribute_id,
                        *scope_conditions(scope, dialect_name(session)),
                    )
                )
                .order_by(ProductAttributeValueModel.id)
                .limit(limit)
            )
            result = await session.execute(stmt)
            rows = [
                AttributeValueRow(
                    product_id=row.product_id,
                    attribute_id=row.attribute_id,
                    value_text=row.value_text,
                    value_number=row.value_number,
                    value_boolean=row.value_boolean,
                    value_date=row.value_date,
                )
                for row in result.scalars()
            ]
            if len(rows) >= limit:
                logger.warning("Attribute value rows truncated", attribute_id=attribute_id, limit=limit)
            return rows

        return await self._read("fetch_attribute_value_rows", query)

    # ========================================================================
    # Listings
    # ========================================================================

    async def fetch_active_seller_ids(self) -> Result[frozenset[str]]:
        async def query(session: AsyncSession) -> frozenset[str]:
            stmt = select(SellerModel.id).where(SellerModel.is_suspended.is_(False))
            result = await session.execute(stmt)
            return frozenset(result.scalars())

        return await self._read("fetch_active_seller_ids", query)

    async def fetch_available_brands(self, scope: CatalogScope) -> Result[list[Brand]]:
        async def query(session: AsyncSession) -> list[Brand]:
            stmt = (
                select(BrandModel)
                .join(ProductModel, ProductModel.brand_id == BrandModel.id)
                .where(and_(*scope_conditions(scope, dialect_name(session))))
                .distinct()
                .order_by(BrandModel.name, BrandModel.id)
            )
            result = await session.execute(stmt)
            return [row.to_entity() for row in result.scalars()]

        return await self._read("fetch_available_brands", query)

    async def fetch_products(self, query: ProductQuery) -> Result[ProductSlice]:
        async def run(session: AsyncSession) -> ProductSlice:
            conditions = scope_conditions(query.scope, dialect_name(session))
            if query.price.min_price is not None:
                conditions.append(ProductModel.starting_price >= query.price.min_price)
            if query.price.max_price is not None:
                conditions.append(ProductModel.starting_price < query.price.max_price)

            base = select(ProductModel).where(and_(*conditions))

            count_stmt = select(func.count()).select_from(base.subquery())
            total = (await session.execute(count_stmt)).scalar_one()

            stmt = (
                base.order_by(*self._get_sort_columns(query.sort))
                .offset(query.offset)
                .limit(query.limit)
            )
            result = await session.execute(stmt)
            return ProductSlice(items=[row.to_entity() for row in result.scalars()], total=total)

        return await self._read("fetch_products", run)

    def _get_sort_columns(self, sort: SortKey) -> list[Any]:
        """Get ORDER BY columns for a sort key; ties break on id."""
        sort_columns = {
            SortKey.FEATURED: [ProductModel.created_at.desc()],
            SortKey.NEWEST: [ProductModel.created_at.desc()],
            SortKey.PRICE_LOW: [EFFECTIVE_PRICE.asc()],
            SortKey.PRICE_HIGH: [EFFECTIVE_PRICE.desc()],
        }
        return [*sort_columns.get(sort, sort_columns[SortKey.FEATURED]), ProductModel.id.asc()]
