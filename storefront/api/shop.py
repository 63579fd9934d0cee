"""Shop browsing endpoints.

Serves category pages with their filtered listing and facets, the
category grid of a top-level category, category search, and filter state
transitions.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from storefront.api.dependencies import get_shop_service
from storefront.api.schemas import (
    AttributeFacetSchema,
    BrandFacetSchema,
    CategoryGridResponse,
    CategoryRefSchema,
    ErrorResponse,
    FacetsSchema,
    FilterStateSchema,
    FilterTransitionRequest,
    GridCategorySchema,
    GridImageSchema,
    PageContextSchema,
    ProductSummarySchema,
    ShopPageResponse,
)
from storefront.catalog.filter_state import (
    FilterState,
    action_from_payload,
    from_query_string,
    reduce,
    to_query_string,
)
from storefront.catalog.hierarchy import CategoryGrid
from storefront.catalog.service import ShopService, ShopView
from storefront.domain.entities import CategoryNode, Product
from storefront.domain.exceptions import UnknownFilterActionError
from storefront.domain.results import CATEGORY_NOT_FOUND, DATA_ACCESS_ERROR, Failure

logger = structlog.get_logger()

router = APIRouter(prefix="/shop", tags=["Shop"])

# HTTP status per failure code; anything else is a 500
FAILURE_STATUS = {
    CATEGORY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    DATA_ACCESS_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def failure_to_http(failure: Failure) -> HTTPException:
    """Convert a failure value to an HTTP exception."""
    return HTTPException(
        status_code=FAILURE_STATUS.get(failure.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={
            "error_code": failure.error_code,
            "message": failure.message,
            "details": failure.details,
        },
    )


# ============================================================================
# Converters
# ============================================================================


def product_to_schema(product: Product) -> ProductSummarySchema:
    """Convert a listing to its summary schema."""
    return ProductSummarySchema(
        id=product.id,
        name=product.name,
        slug=product.slug,
        brand_id=product.brand_id,
        seller_id=product.seller_id,
        starting_price=product.starting_price,
        discounted_price=product.discounted_price,
        price=product.effective_price,
        thumbnail=product.thumbnail,
        created_at=product.created_at,
    )


def state_to_schema(state: FilterState) -> FilterStateSchema:
    """Convert a filter state to its schema, canonical query included."""
    return FilterStateSchema(
        levels=sorted(state.levels),
        brands=sorted(state.brands),
        colors=sorted(state.colors),
        sizes=sorted(state.sizes),
        attributes={attribute_id: sorted(values) for attribute_id, values in state.attributes},
        price=state.price,
        sort=state.sort,
        query=to_query_string(state),
        active_filter_count=state.active_filter_count,
        has_active_filters=state.has_active_filters,
    )


def view_to_response(view: ShopView) -> ShopPageResponse:
    """Convert a shop view to the page response."""
    facets = view.facets
    path = view.context.path
    return ShopPageResponse(
        total=view.products.total,
        page=view.products.page,
        page_size=view.products.page_size,
        has_more=view.products.has_more,
        items=[product_to_schema(product) for product in view.products.items],
        facets=FacetsSchema(
            categories=[
                CategoryRefSchema(id=o.id, name=o.name, slug=o.slug, level=o.level)
                for o in facets.categories
            ],
            brands=[BrandFacetSchema(id=b.id, name=b.name) for b in facets.brands],
            colors=list(facets.colors),
            sizes=list(facets.sizes),
            attributes=[
                AttributeFacetSchema(
                    attribute_id=f.attribute.id,
                    label=f.attribute.display_label,
                    show_in_top_line=f.attribute.show_in_top_line,
                    values=list(f.values),
                )
                for f in facets.attributes
            ],
            price_buckets=list(facets.price_buckets),
            sort_options=list(facets.sort_options),
        ),
        context=PageContextSchema(
            slugs=list(path.slugs),
            category_ids=[node.id for node in path.nodes],
            breadcrumb=path.breadcrumb,
            is_main_page=path.is_main_page,
        ),
        state=state_to_schema(view.state),
    )


def node_to_schema(node: CategoryNode) -> CategoryRefSchema:
    """Convert a category node to its reference schema."""
    return CategoryRefSchema(id=node.id, name=node.name, slug=node.slug, level=node.level)


def grid_to_response(grid: CategoryGrid) -> CategoryGridResponse:
    """Convert a category grid to its response."""
    return CategoryGridResponse(
        category=node_to_schema(grid.category),
        categories=[
            GridCategorySchema(
                id=c.id,
                name=c.name,
                slug=c.slug,
                parent_slug=c.parent_slug,
                image_url=c.image_url,
            )
            for c in grid.categories
        ],
        images=[
            GridImageSchema(
                id=i.id, image_url=i.image_url, button_text=i.button_text, link=i.link
            )
            for i in grid.images
        ],
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/filters/transition",
    response_model=FilterStateSchema,
    responses={400: {"model": ErrorResponse}},
    summary="Apply a filter action",
    description="Apply one selection event to a serialized filter state and "
    "return the canonical serialization of the next state.",
)
async def transition_filters(request: FilterTransitionRequest) -> FilterStateSchema:
    """Apply a filter action to a serialized state.

    Args:
        request: Current query string and the action to apply.

    Returns:
        Next state with its canonical query string.

    Raises:
        HTTPException: If the action name is unknown.
    """
    try:
        action = action_from_payload(request.action, request.value, request.attribute_id)
    except UnknownFilterActionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error_code": "UNKNOWN_FILTER_ACTION",
                "message": e.message,
                "details": e.details,
            },
        )

    state = reduce(from_query_string(request.query), action)
    return state_to_schema(state)


@router.get(
    "/{category_slug}/grid",
    response_model=CategoryGridResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Get category grid",
    description="Get the level-3 categories and promotional tiles of a top-level category.",
)
async def get_category_grid(
    category_slug: str,
    service: Annotated[ShopService, Depends(get_shop_service)],
) -> CategoryGridResponse:
    """Get the grid view of a top-level category.

    Raises:
        HTTPException: If the category is unknown or the catalog cannot be read.
    """
    result = await service.category_grid(category_slug)
    if not result.success:
        raise failure_to_http(result.failure)
    return grid_to_response(result.unwrap())


@router.get(
    "/categories/search",
    response_model=list[CategoryRefSchema],
    responses={503: {"model": ErrorResponse}},
    summary="Search categories",
    description="Find active categories of one tree level whose name or a synonym "
    "contains the search text.",
)
async def search_categories(
    service: Annotated[ShopService, Depends(get_shop_service)],
    q: str = Query(..., max_length=100, description="Search text"),
    level: int = Query(1, ge=1, le=4, description="Tree level to search"),
) -> list[CategoryRefSchema]:
    """Search categories by name or synonym.

    Registered before the catch-all category path, so a level-2 category
    with the slug `search` under a `categories` top level is shadowed.

    Raises:
        HTTPException: If the catalog cannot be read.
    """
    result = await service.search_categories(q, level)
    if not result.success:
        raise failure_to_http(result.failure)
    return [node_to_schema(node) for node in result.unwrap()]


@router.get(
    "",
    response_model=ShopPageResponse,
    responses={503: {"model": ErrorResponse}},
    summary="Browse all products",
    description="Unscoped shop page with its filtered listing and facets.",
)
async def browse_all(
    request: Request,
    service: Annotated[ShopService, Depends(get_shop_service)],
    page: int = Query(0, ge=0, description="Zero-based page number"),
) -> ShopPageResponse:
    """Browse the unscoped shop page."""
    return await _browse(service, [], request, page)


@router.get(
    "/{slug_path:path}",
    response_model=ShopPageResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Browse a category",
    description="Category page (up to four slugs) with its filtered listing and facets. "
    "Filter state is read from the query string.",
)
async def browse_category(
    slug_path: str,
    request: Request,
    service: Annotated[ShopService, Depends(get_shop_service)],
    page: int = Query(0, ge=0, description="Zero-based page number"),
) -> ShopPageResponse:
    """Browse a category page.

    Args:
        slug_path: Slash-separated category slugs, top level first.
        request: Incoming request; its query string holds the filter state.
        service: Shop service.
        page: Zero-based page number.

    Returns:
        Listing page with facets.

    Raises:
        HTTPException: If the path is unknown or the catalog cannot be read.
    """
    slugs = [slug for slug in slug_path.split("/") if slug]
    return await _browse(service, slugs, request, page)


async def _browse(
    service: ShopService,
    slugs: list[str],
    request: Request,
    page: int,
) -> ShopPageResponse:
    result = await service.browse(slugs, request.query_params, page)
    if not result.success:
        logger.info(
            "Shop page not served",
            slugs=slugs,
            error_code=result.failure.error_code,
        )
        raise failure_to_http(result.failure)
    return view_to_response(result.unwrap())
