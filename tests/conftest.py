"""Shared fixtures: a small hand-built catalog.

Category tree:
    Shoes > Trainers > Running > Road
    Shoes > Boots
    Men > Clothing
    Archive (inactive)

Listings (hours before the epoch in brackets, so newest first is p1..p8):
    p1 Nike  Road    100.00         Red          8,9   Sole Rubber  [0]
    p2 Nike  Road     60.00 (45.00) Blue         9,10  Sole Foam    [1]
    p3 Acme  Road    120.00         Red, Black   10                 [2]
    p4 Nike  Road     80.00         Red          9     suspended seller
    p5 Nike  Road     70.00         Red          9     draft
    p6 Acme  Boots   210.00         Black        9                  [5]
    p7 Acme  Clothing 30.00         Blue         M     Cotton       [6]
    p8 Nike  Clothing 55.00         Red          S, M  Wool         [7]
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.catalog.memory_store import CatalogSnapshot, InMemoryCatalogStore
from storefront.catalog.pipeline import QueryCache
from storefront.catalog.service import ShopService
from storefront.domain.entities import (
    Attribute,
    AttributeOption,
    AttributeScope,
    AttributeValueRow,
    Brand,
    CategoryGridImage,
    CategoryNode,
    Product,
    ProductStatus,
    Seller,
)

EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)

SHOES_IDS = ("c-shoes", "c-trainers", "c-running", "c-road")


def _product(
    product_id: str,
    brand_id: str,
    seller_id: str,
    path: tuple[str | None, ...],
    price: str,
    hours_old: int,
    discounted: str | None = None,
    status: ProductStatus = ProductStatus.PUBLISHED,
) -> Product:
    ids = list(path) + [None] * (4 - len(path))
    return Product(
        id=product_id,
        name=f"Listing {product_id}",
        slug=f"listing-{product_id}",
        seller_id=seller_id,
        brand_id=brand_id,
        category_id=ids[0],
        subcategory_id=ids[1],
        sub_subcategory_id=ids[2],
        sub_sub_subcategory_id=ids[3],
        status=status,
        starting_price=Decimal(price),
        discounted_price=Decimal(discounted) if discounted else None,
        created_at=EPOCH - timedelta(hours=hours_old),
    )


def build_fixture_snapshot() -> CatalogSnapshot:
    """Build the fixture catalog described in the module docstring."""
    categories = [
        CategoryNode(id="c-shoes", name="Shoes", slug="shoes", level=1, synonyms=("footwear",)),
        CategoryNode(id="c-trainers", name="Trainers", slug="trainers", level=2, parent_id="c-shoes"),
        CategoryNode(
            id="c-running",
            name="Running",
            slug="running",
            level=3,
            parent_id="c-trainers",
            show_in_category_grid=True,
        ),
        CategoryNode(id="c-road", name="Road", slug="road", level=4, parent_id="c-running"),
        CategoryNode(id="c-boots", name="Boots", slug="boots", level=2, parent_id="c-shoes"),
        CategoryNode(id="c-men", name="Men", slug="men", level=1),
        CategoryNode(id="c-men-clothing", name="Clothing", slug="clothing", level=2, parent_id="c-men"),
        CategoryNode(id="c-archive", name="Archive", slug="archive", level=1, is_active=False),
    ]

    attributes = [
        Attribute(id="a-colour", name="Colour", display_label="Colour", display_order=0),
        Attribute(id="a-shoe-size", name="Shoe Size", display_label="Size", display_order=1),
        Attribute(id="a-size-men", name="Size (Men)", display_label="Size", display_order=2),
        Attribute(id="a-size-women", name="Size (Women)", display_label="Size", display_order=3),
        Attribute(id="a-material", name="Material", display_label="Material", display_order=5),
        Attribute(id="a-sole", name="Sole", display_label="Sole", display_order=7),
        Attribute(id="a-waterproof", name="Waterproof", display_label="Waterproof", display_order=8),
    ]

    option_values = {
        "a-colour": ["Red", "Blue", "Black"],
        "a-shoe-size": ["8", "9", "10"],
        "a-size-men": ["S", "M", "L"],
        "a-size-women": ["S", "M"],
        "a-material": ["Cotton", "Wool"],
        "a-sole": ["Rubber", "Foam"],
    }
    options = [
        AttributeOption(id=f"{attribute_id}-{value}", attribute_id=attribute_id, value=value, display_order=i)
        for attribute_id, values in option_values.items()
        for i, value in enumerate(values)
    ]

    scopes = [
        AttributeScope("a-colour", 1, "c-shoes"),
        AttributeScope("a-shoe-size", 1, "c-shoes"),
        AttributeScope("a-waterproof", 1, "c-shoes"),
        AttributeScope("a-sole", 3, "c-running"),
        AttributeScope("a-colour", 1, "c-men"),
        AttributeScope("a-size-men", 1, "c-men"),
        AttributeScope("a-material", 1, "c-men"),
    ]

    road = SHOES_IDS
    boots = ("c-shoes", "c-boots")
    clothing = ("c-men", "c-men-clothing")
    products = [
        _product("p1", "b-nike", "s-1", road, "100.00", 0),
        _product("p2", "b-nike", "s-1", road, "60.00", 1, discounted="45.00"),
        _product("p3", "b-acme", "s-2", road, "120.00", 2),
        _product("p4", "b-nike", "s-x", road, "80.00", 3),
        _product("p5", "b-nike", "s-1", road, "70.00", 4, status=ProductStatus.DRAFT),
        _product("p6", "b-acme", "s-2", boots, "210.00", 5),
        _product("p7", "b-acme", "s-1", clothing, "30.00", 6),
        _product("p8", "b-nike", "s-2", clothing, "55.00", 7),
    ]

    payloads = [
        ("p1", "a-colour", '["Red"]'),
        ("p1", "a-shoe-size", '["8","9"]'),
        ("p1", "a-sole", "Rubber"),
        ("p2", "a-colour", "Blue"),
        ("p2", "a-shoe-size", "9, 10"),
        ("p2", "a-sole", '"Foam"'),
        ("p3", "a-colour", "Red,Black"),
        ("p3", "a-shoe-size", "10"),
        ("p4", "a-colour", "Red"),
        ("p4", "a-shoe-size", "9"),
        ("p5", "a-colour", "Red"),
        ("p5", "a-shoe-size", "9"),
        ("p6", "a-colour", "Black"),
        ("p6", "a-shoe-size", "9"),
        ("p7", "a-colour", "Blue"),
        ("p7", "a-size-men", "M"),
        ("p7", "a-material", "Cotton"),
        ("p8", "a-colour", " red "),
        ("p8", "a-size-men", "S, M"),
        ("p8", "a-material", '["Wool"]'),
    ]
    values = [
        AttributeValueRow(product_id=product_id, attribute_id=attribute_id, value_text=text)
        for product_id, attribute_id, text in payloads
    ]

    return CatalogSnapshot(
        categories=categories,
        grid_images=[
            CategoryGridImage(
                id="g-shoes-sale",
                category_id="c-shoes",
                image_url="https://img.example/sale.png",
                button_text="Shop Sale",
                link="/shop/shoes?price=0-50",
            )
        ],
        attributes=attributes,
        attribute_options=options,
        attribute_scopes=scopes,
        sellers=[
            Seller(id="s-1", name="Harbour Goods"),
            Seller(id="s-2", name="Lantern Supply"),
            Seller(id="s-x", name="Dormant Traders", is_suspended=True),
        ],
        brands=[Brand(id="b-nike", name="Nike"), Brand(id="b-acme", name="Acme")],
        products=products,
        attribute_values=values,
    )


@pytest.fixture
def snapshot() -> CatalogSnapshot:
    """Fixture catalog."""
    return build_fixture_snapshot()


@pytest.fixture
def store(snapshot: CatalogSnapshot) -> InMemoryCatalogStore:
    """In-memory store over the fixture catalog."""
    return InMemoryCatalogStore(snapshot)


@pytest.fixture
def service(store: InMemoryCatalogStore) -> ShopService:
    """Shop service with a private cache."""
    return ShopService(store, cache=QueryCache(ttl_seconds=300, max_entries=256), page_size=32)
