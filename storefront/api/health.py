"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from storefront.api.dependencies import get_shop_service
from storefront.catalog.service import ShopService

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    from storefront.infrastructure.config import settings

    return HealthResponse(
        status="healthy",
        service="storefront-catalog",
        version=settings.api_version,
    )


@router.get("/ready")
async def readiness_check(
    service: Annotated[ShopService, Depends(get_shop_service)],
) -> JSONResponse:
    """Check if the catalog store answers reads.

    Returns:
        Readiness status; 503 when the store cannot be read.
    """
    result = await service.store.fetch_active_seller_ids()
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "error_code": result.failure.error_code},
        )
    return JSONResponse(content={"status": "ready"})
