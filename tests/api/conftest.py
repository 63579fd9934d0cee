"""Shared fixtures for API tests."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from storefront.api.dependencies import get_shop_service
from storefront.catalog.service import ShopService
from storefront.main import app


@pytest.fixture
def client(service: ShopService) -> Iterator[TestClient]:
    """Create test client serving the fixture catalog."""
    app.dependency_overrides[get_shop_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
