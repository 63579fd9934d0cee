"""FastAPI dependencies.

The shop service is built once per process. The "memory" backend serves a
generated demo catalog; the "sql" backend reads the configured database.
"""

import structlog

from storefront.catalog.generator import generate_catalog
from storefront.catalog.memory_store import InMemoryCatalogStore
from storefront.catalog.pipeline import QueryCache
from storefront.catalog.repository import SqlCatalogStore
from storefront.catalog.service import ShopService
from storefront.catalog.store import CatalogStore
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import get_session_factory

logger = structlog.get_logger()

_shop_service: ShopService | None = None


def build_store() -> CatalogStore:
    """Create the catalog store for the configured backend.

    Returns:
        Catalog store.

    Raises:
        ValueError: If the backend name is unknown.
    """
    backend = settings.catalog_backend.lower()
    if backend == "memory":
        logger.info("Using in-memory demo catalog", seed=settings.demo_seed)
        return InMemoryCatalogStore(generate_catalog(seed=settings.demo_seed))
    if backend == "sql":
        logger.info("Using SQL catalog store")
        return SqlCatalogStore(get_session_factory())
    raise ValueError(f"Unknown catalog backend: {settings.catalog_backend}")


def get_shop_service() -> ShopService:
    """Get the process-wide shop service."""
    global _shop_service
    if _shop_service is None:
        _shop_service = ShopService(
            build_store(),
            cache=QueryCache(
                ttl_seconds=settings.facet_cache_ttl_seconds,
                max_entries=settings.facet_cache_max_entries,
            ),
            page_size=settings.page_size,
        )
    return _shop_service


def reset_shop_service() -> None:
    """Drop the process-wide shop service (and its query cache)."""
    global _shop_service
    _shop_service = None
