"""Demo catalog generator with deterministic seeding.

Builds a complete storefront catalog: a four-level category tree,
attributes scoped at several levels, brands, sellers (one suspended) and
listings whose attribute payloads use every supported encoding. The same
seed always yields the same catalog.
"""

import hashlib
import json
import random
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from storefront.catalog.memory_store import CatalogSnapshot
from storefront.domain.entities import (
    Attribute,
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


# ============================================================================
# Constants
# ============================================================================

# Level 1 > level 2 > level 3 > level 4 names
CATEGORY_TREE: dict[str, dict[str, dict[str, list[str]]]] = {
    "Men": {
        "Clothing": {
            "Tops": ["T-Shirts", "Shirts"],
            "Bottoms": ["Jeans", "Chinos"],
        },
        "Accessories": {
            "Bags": ["Backpacks", "Wallets"],
        },
    },
    "Women": {
        "Clothing": {
            "Dresses": ["Maxi Dresses", "Midi Dresses"],
            "Tops": ["Blouses", "T-Shirts"],
        },
    },
    "Kids": {
        "Clothing": {
            "Outerwear": ["Coats", "Jackets"],
        },
    },
    "Shoes": {
        "Trainers": {
            "Running": ["Road", "Trail"],
            "Lifestyle": ["Low Top", "High Top"],
        },
        "Boots": {
            "Hiking": ["Waterproof", "Lightweight"],
        },
    },
    "Home": {
        "Kitchen": {
            "Cookware": ["Pans", "Pots"],
        },
    },
}

CATEGORY_SYNONYMS: dict[str, list[str]] = {
    "Shoes": ["footwear", "sneakers"],
    "Home": ["house", "living"],
    "Kids": ["children", "junior"],
}

# Synthetic brand names (fictional companies)
BRANDS = ["Acme", "Contoso", "Northwind", "Fabrikam", "Tailwind", "Globex"]

SELLERS = [
    ("Harbour Goods", False),
    ("Maple Street Co", False),
    ("Lantern Supply", False),
    ("Dormant Traders", True),
]

COLORS = ["Black", "White", "Red", "Blue", "Green", "Navy", "Grey"]
APPAREL_SIZES = ["XS", "S", "M", "L", "XL", "XXL"]
SHOE_SIZES = ["6", "7", "8", "9", "10", "11", "12"]
JUNIOR_SIZES = ["3-4Y", "5-6Y", "7-8Y", "9-10Y"]
MATERIALS = ["Cotton", "Linen", "Wool", "Polyester", "Leather"]
FITS = ["Slim", "Regular", "Relaxed"]
SOLES = ["Rubber", "Foam", "Carbon"]
COOKWARE_MATERIALS = ["Cast Iron", "Stainless Steel", "Non-Stick"]

# name, label, display order, top line, options, scope (level, category path)
ATTRIBUTE_DEFINITIONS: list[tuple[str, str, int, bool, list[str], list[tuple[str, ...]]]] = [
    ("Colour", "Colour", 0, True, COLORS, [("Men",), ("Women",), ("Kids",), ("Shoes",), ("Home",)]),
    ("Shoe Size", "Size", 1, True, SHOE_SIZES, [("Shoes",)]),
    ("Size (Men)", "Size", 2, True, APPAREL_SIZES, [("Men",)]),
    ("Size (Women)", "Size", 3, True, APPAREL_SIZES, [("Women",)]),
    ("Size (Junior)", "Size", 4, True, JUNIOR_SIZES, [("Kids",)]),
    ("Material", "Material", 5, False, MATERIALS, [("Men",), ("Women",), ("Kids",)]),
    ("Fit", "Fit", 6, True, FITS, [("Men", "Clothing")]),
    ("Sole", "Sole", 7, False, SOLES, [("Shoes", "Trainers", "Running")]),
    ("Cookware Material", "Material", 8, False, COOKWARE_MATERIALS, [("Home",)]),
]

# Price ranges by top-level category (whole currency units)
PRICE_RANGES: dict[str, tuple[int, int]] = {
    "Men": (15, 180),
    "Women": (20, 240),
    "Kids": (10, 90),
    "Shoes": (40, 260),
    "Home": (12, 320),
}

ADJECTIVES = ["Classic", "Essential", "Pro", "Ultra", "Prime", "Core", "Nova", "Flex"]

# Filter toggles by category path
FILTER_VISIBILITY: dict[tuple[str, ...], FilterVisibility] = {
    ("Home",): FilterVisibility(show_size_filter=False),
    ("Men", "Accessories"): FilterVisibility(show_size_filter=False),
}

CATALOG_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


def slugify(name: str) -> str:
    """Lowercase URL slug of a display name."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


# ============================================================================
# Generator Configuration
# ============================================================================


@dataclass
class GeneratorConfig:
    """Configuration for catalog generation.

    Attributes:
        seed: Random seed for reproducibility.
        products_per_category: Listings per level-4 category.
        draft_share: Fraction of listings left unpublished.
        discount_share: Fraction of listings with a sale price.
    """

    seed: int = 42
    products_per_category: int = 6
    draft_share: float = 0.1
    discount_share: float = 0.25

    @classmethod
    def small(cls, seed: int = 42) -> "GeneratorConfig":
        """Create config for a small catalog (60 listings)."""
        return cls(seed=seed, products_per_category=3)

    @classmethod
    def full(cls, seed: int = 42) -> "GeneratorConfig":
        """Create config for a full demo catalog (600 listings)."""
        return cls(seed=seed, products_per_category=30)


class CatalogGenerator:
    """Generates storefront catalogs with deterministic seeding.

    Example usage:
        snapshot = CatalogGenerator(GeneratorConfig.small()).generate()
        store = InMemoryCatalogStore(snapshot)
    """

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        """Initialize generator with configuration.

        Args:
            config: Generator configuration.
        """
        self.config = config or GeneratorConfig()

    def _deterministic_seed(self, *args: str | int) -> int:
        """Create deterministic seed from arguments.

        Args:
            args: Values to include in seed.

        Returns:
            Deterministic integer seed.
        """
        data = "|".join(str(a) for a in args)
        hash_bytes = hashlib.md5(data.encode()).digest()
        return int.from_bytes(hash_bytes[:4], "big")

    def _generate_id(self, kind: str, *parts: str | int) -> str:
        """Generate a deterministic 32-character identifier."""
        data = ":".join([kind, str(self.config.seed), *(str(p) for p in parts)])
        return hashlib.md5(data.encode()).hexdigest()

    def _generate_image_url(self, key: str) -> str:
        return f"https://picsum.photos/seed/{self._deterministic_seed(key)}/400/400"

    # ========================================================================
    # Category Tree
    # ========================================================================

    def _generate_categories(self) -> tuple[list[CategoryNode], dict[tuple[str, ...], CategoryNode]]:
        nodes: list[CategoryNode] = []
        by_path: dict[tuple[str, ...], CategoryNode] = {}

        def add(path: tuple[str, ...], parent: CategoryNode | None, order: int) -> CategoryNode:
            name = path[-1]
            node = CategoryNode(
                id=self._generate_id("category", *path),
                name=name,
                slug=slugify(name),
                level=len(path),
                parent_id=parent.id if parent else None,
                synonyms=tuple(CATEGORY_SYNONYMS.get(name, [])) if len(path) == 1 else (),
                image_url=self._generate_image_url("/".join(path)),
                show_in_category_grid=len(path) == 3,
                display_order=order,
            )
            nodes.append(node)
            by_path[path] = node
            return node

        for i, (top, subcategories) in enumerate(CATEGORY_TREE.items()):
            top_node = add((top,), None, i)
            for j, (sub, sub_subcategories) in enumerate(subcategories.items()):
                sub_node = add((top, sub), top_node, j)
                for k, (sub_sub, leaves) in enumerate(sub_subcategories.items()):
                    sub_sub_node = add((top, sub, sub_sub), sub_node, k)
                    for m, leaf in enumerate(leaves):
                        add((top, sub, sub_sub, leaf), sub_sub_node, m)

        return nodes, by_path

    def _generate_grid_images(
        self, by_path: dict[tuple[str, ...], CategoryNode]
    ) -> list[CategoryGridImage]:
        images = []
        for top in ("Men", "Women"):
            category = by_path[(top,)]
            for order, label in enumerate(("New In", "Sale")):
                images.append(
                    CategoryGridImage(
                        id=self._generate_id("grid", top, label),
                        category_id=category.id,
                        image_url=self._generate_image_url(f"grid/{top}/{label}"),
                        button_text=f"Shop {label}",
                        link=f"/shop/{category.slug}?sort=newest",
                        display_order=order,
                    )
                )
        return images

    # ========================================================================
    # Attributes
    # ========================================================================

    def _generate_attributes(
        self, by_path: dict[tuple[str, ...], CategoryNode]
    ) -> tuple[list[Attribute], list[AttributeOption], list[AttributeScope], dict[str, Attribute]]:
        attributes: list[Attribute] = []
        options: list[AttributeOption] = []
        scopes: list[AttributeScope] = []
        by_name: dict[str, Attribute] = {}

        for name, label, order, top_line, values, scope_paths in ATTRIBUTE_DEFINITIONS:
            attribute = Attribute(
                id=self._generate_id("attribute", name),
                name=name,
                display_label=label,
                display_order=order,
                show_in_top_line=top_line,
            )
            attributes.append(attribute)
            by_name[name] = attribute

            for position, value in enumerate(values):
                options.append(
                    AttributeOption(
                        id=self._generate_id("option", name, value),
                        attribute_id=attribute.id,
                        value=value,
                        display_order=position,
                    )
                )
            for path in scope_paths:
                scopes.append(
                    AttributeScope(
                        attribute_id=attribute.id,
                        level=len(path),
                        category_id=by_path[path].id,
                    )
                )

        return attributes, options, scopes, by_name

    def _encode_values(self, values: list[str], rng: random.Random) -> str:
        """Store values in one of the encodings found in real catalogs."""
        style = rng.choice(("json", "comma", "spaced"))
        if len(values) == 1 and style != "json":
            return values[0]
        if style == "json":
            return json.dumps(values)
        if style == "comma":
            return ",".join(values)
        return ", ".join(values)

    def _attribute_payloads(
        self,
        path: tuple[str, ...],
        by_name: dict[str, Attribute],
        rng: random.Random,
    ) -> list[tuple[Attribute, list[str]]]:
        top = path[0]
        payloads: list[tuple[Attribute, list[str]]] = [
            (by_name["Colour"], rng.sample(COLORS, rng.randint(1, 3))),
        ]

        size_values = {
            "Shoes": ("Shoe Size", SHOE_SIZES),
            "Men": ("Size (Men)", APPAREL_SIZES),
            "Women": ("Size (Women)", APPAREL_SIZES),
            "Kids": ("Size (Junior)", JUNIOR_SIZES),
        }
        if top in size_values and path[1] != "Accessories":
            attribute_name, sizes = size_values[top]
            payloads.append((by_name[attribute_name], rng.sample(sizes, rng.randint(2, 4))))

        if top in ("Men", "Women", "Kids"):
            payloads.append((by_name["Material"], [rng.choice(MATERIALS)]))
        if path[:2] == ("Men", "Clothing"):
            payloads.append((by_name["Fit"], [rng.choice(FITS)]))
        if path[:3] == ("Shoes", "Trainers", "Running"):
            payloads.append((by_name["Sole"], [rng.choice(SOLES)]))
        if top == "Home":
            payloads.append((by_name["Cookware Material"], [rng.choice(COOKWARE_MATERIALS)]))

        return payloads

    # ========================================================================
    # Listings
    # ========================================================================

    def _generate_product(
        self,
        path: tuple[str, ...],
        by_path: dict[tuple[str, ...], CategoryNode],
        index: int,
        brands: list[Brand],
        sellers: list[Seller],
    ) -> tuple[Product, random.Random]:
        rng = random.Random(self._deterministic_seed(self.config.seed, "/".join(path), index))

        brand = rng.choice(brands)
        seller = rng.choice(sellers)
        title = f"{brand.name} {rng.choice(ADJECTIVES)} {path[-1]}"

        min_price, max_price = PRICE_RANGES[path[0]]
        starting_price = Decimal(rng.randint(min_price, max_price)) + Decimal("0.99")
        discounted_price = None
        if rng.random() < self.config.discount_share:
            discounted_price = (starting_price * Decimal("0.8")).quantize(Decimal("0.01"))

        status = ProductStatus.PUBLISHED
        if rng.random() < self.config.draft_share:
            status = ProductStatus.DRAFT

        product_id = self._generate_id("product", *path, index)
        ids = [by_path[path[:level]].id for level in range(1, 5)]
        product = Product(
            id=product_id,
            name=title,
            slug=f"{slugify(title)}-{product_id[:6]}",
            seller_id=seller.id,
            brand_id=brand.id,
            category_id=ids[0],
            subcategory_id=ids[1],
            sub_subcategory_id=ids[2],
            sub_sub_subcategory_id=ids[3],
            status=status,
            starting_price=starting_price,
            discounted_price=discounted_price,
            weight=Decimal(rng.randint(100, 2500)) / Decimal(1000),
            thumbnail=self._generate_image_url(product_id),
            created_at=CATALOG_EPOCH - timedelta(hours=rng.randint(0, 24 * 180)),
        )
        return product, rng

    def generate(self) -> CatalogSnapshot:
        """Generate the full catalog.

        Returns:
            Catalog snapshot ready for a store.
        """
        categories, by_path = self._generate_categories()
        attributes, options, scopes, by_name = self._generate_attributes(by_path)

        brands = [Brand(id=self._generate_id("brand", name), name=name) for name in BRANDS]
        sellers = [
            Seller(id=self._generate_id("seller", name), name=name, is_suspended=suspended)
            for name, suspended in SELLERS
        ]

        products: list[Product] = []
        values: list[AttributeValueRow] = []
        leaf_paths = [path for path in by_path if len(path) == 4]
        for path in leaf_paths:
            for index in range(self.config.products_per_category):
                product, rng = self._generate_product(path, by_path, index, brands, sellers)
                products.append(product)
                for attribute, attribute_values in self._attribute_payloads(path, by_name, rng):
                    values.append(
                        AttributeValueRow(
                            product_id=product.id,
                            attribute_id=attribute.id,
                            value_text=self._encode_values(attribute_values, rng),
                        )
                    )

        visibility = {
            (len(path), by_path[path].id): toggles for path, toggles in FILTER_VISIBILITY.items()
        }

        return CatalogSnapshot(
            categories=categories,
            grid_images=self._generate_grid_images(by_path),
            attributes=attributes,
            attribute_options=options,
            attribute_scopes=scopes,
            sellers=sellers,
            brands=brands,
            products=products,
            attribute_values=values,
            filter_visibility=visibility,
        )

    def expected_count(self) -> int:
        """Number of listings `generate` produces."""
        leaves = sum(
            len(leaf_names)
            for subcategories in CATEGORY_TREE.values()
            for sub_subcategories in subcategories.values()
            for leaf_names in sub_subcategories.values()
        )
        return leaves * self.config.products_per_category


def generate_catalog(seed: int = 42, products_per_category: int = 6) -> CatalogSnapshot:
    """Generate the demo catalog for a seed."""
    return CatalogGenerator(
        GeneratorConfig(seed=seed, products_per_category=products_per_category)
    ).generate()
