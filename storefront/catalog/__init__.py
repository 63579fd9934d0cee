"""Storefront catalog filter engine.

Resolves category pages, normalizes attribute payloads, computes facet
availability and assembles paginated, filtered listings.
"""

from storefront.catalog.assembler import ProductPage, ResultAssembler
from storefront.catalog.attributes import AttributeDirectory
from storefront.catalog.codec import parse_attribute_values, serialize_attribute_values
from storefront.catalog.context import PageContext
from storefront.catalog.facets import FacetAvailabilityCalculator, sort_facet_values
from storefront.catalog.filter_state import FilterState, decode, encode, reduce
from storefront.catalog.generator import CatalogGenerator, GeneratorConfig, generate_catalog
from storefront.catalog.hierarchy import CategoryHierarchyResolver, ResolvedPath
from storefront.catalog.memory_store import CatalogSnapshot, InMemoryCatalogStore
from storefront.catalog.pipeline import FilterSession, QueryCache
from storefront.catalog.service import FacetSet, ShopService, ShopView
from storefront.catalog.store import CatalogScope, CatalogStore, ProductQuery, SortKey

__all__ = [
    # Hierarchy
    "CategoryHierarchyResolver",
    "ResolvedPath",
    # Codec
    "parse_attribute_values",
    "serialize_attribute_values",
    # Attributes and facets
    "AttributeDirectory",
    "FacetAvailabilityCalculator",
    "sort_facet_values",
    # Filter state
    "FilterState",
    "decode",
    "encode",
    "reduce",
    # Assembly
    "PageContext",
    "ProductPage",
    "ResultAssembler",
    "FilterSession",
    "QueryCache",
    # Service
    "FacetSet",
    "ShopService",
    "ShopView",
    # Stores
    "CatalogScope",
    "CatalogSnapshot",
    "CatalogStore",
    "InMemoryCatalogStore",
    "ProductQuery",
    "SortKey",
    # Generator
    "CatalogGenerator",
    "GeneratorConfig",
    "generate_catalog",
]
