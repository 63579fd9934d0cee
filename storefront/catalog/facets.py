"""Facet availability calculator.

Answers two questions for a facet dimension inside a `CatalogScope`:
which values are still selectable, and which products carry any of the
selected values. Both run the same pass over the attribute's value rows,
decoded through the attribute value codec.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog

from storefront.catalog.codec import attribute_tokens
from storefront.catalog.store import CatalogScope, CatalogStore
from storefront.domain.entities import AttributeValueRow, Brand
from storefront.domain.results import Result
from storefront.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Value Ordering
# ============================================================================

# Apparel sizes in canonical order
STANDARD_SIZES = ("XXS", "XS", "S", "M", "L", "XL", "XXL", "XXXL", "XXXXL")
_STANDARD_SIZE_RANK = {size: rank for rank, size in enumerate(STANDARD_SIZES)}

_NUMBER_RE = re.compile(r"^-?\d+(?:\.\d+)?$")
_SLASH_NUMBER_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*/\s*(\d+(?:\.\d+)?)$")
_ALPHANUMERIC_RE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)[A-Za-z0-9.\-]+$")
_CHUNK_RE = re.compile(r"(\d+)")

# Tiers
_NUMERIC = 0
_SLASH_NUMERIC = 1
_STANDARD_SIZE = 2
_ALPHANUMERIC = 3
_OTHER = 4


def _natural_chunks(value: str) -> tuple[tuple[int, int, str], ...]:
    chunks = []
    for part in _CHUNK_RE.split(value.casefold()):
        if not part:
            continue
        if part.isdigit():
            chunks.append((0, int(part), ""))
        else:
            chunks.append((1, 0, part))
    return tuple(chunks)


def facet_sort_key(value: str) -> tuple[Any, ...]:
    """Ordering key for facet values.

    Pure numbers come first in numeric order, then slash numbers such as
    "32/34", then standard sizes (XXS to XXXXL), then alphanumeric tokens in
    natural order ("W30" before "W32"), then everything else
    case-insensitively.

    Args:
        value: Facet value.

    Returns:
        Sort key comparable with the key of any other value.
    """
    stripped = value.strip()

    if _NUMBER_RE.match(stripped):
        try:
            return (_NUMERIC, Decimal(stripped), (), value)
        except InvalidOperation:
            pass

    slash = _SLASH_NUMBER_RE.match(stripped)
    if slash:
        first, second = (Decimal(part) for part in slash.groups())
        return (_SLASH_NUMERIC, first, ((0, second, ""),), value)

    rank = _STANDARD_SIZE_RANK.get(stripped.upper())
    if rank is not None:
        return (_STANDARD_SIZE, Decimal(rank), (), value)

    if _ALPHANUMERIC_RE.match(stripped):
        return (_ALPHANUMERIC, Decimal(0), _natural_chunks(stripped), value)

    return (_OTHER, Decimal(0), ((1, 0, stripped.casefold()),), value)


def sort_facet_values(values: set[str] | frozenset[str]) -> tuple[str, ...]:
    """Sort facet values with `facet_sort_key`."""
    return tuple(sorted(values, key=facet_sort_key))


# ============================================================================
# Calculator
# ============================================================================


class FacetAvailabilityCalculator:
    """Computes available facet values and matching product sets.

    Example usage:
        calculator = FacetAvailabilityCalculator(store)
        colors = await calculator.available_values(color_attribute.id, scope)
        red_ids = await calculator.product_ids_matching(
            color_attribute.id, {"Red"}, scope
        )
    """

    def __init__(self, store: CatalogStore, row_limit: int | None = None) -> None:
        """Initialize calculator.

        Args:
            store: Catalog store to read from.
            row_limit: Maximum value rows read per query.
        """
        self.store = store
        self.row_limit = row_limit or settings.attribute_row_limit

    async def _value_rows(
        self, attribute_id: str, scope: CatalogScope
    ) -> Result[list[AttributeValueRow]]:
        if scope.candidate_ids is not None and not scope.candidate_ids:
            return Result.ok([])
        if scope.seller_ids is not None and not scope.seller_ids:
            return Result.ok([])

        result = await self.store.fetch_attribute_value_rows(attribute_id, scope, self.row_limit)
        if not result.success:
            logger.warning(
                "Attribute value read failed",
                attribute_id=attribute_id,
                error_code=result.failure.error_code,
            )
        return result

    async def available_values(
        self, attribute_id: str, scope: CatalogScope
    ) -> Result[tuple[str, ...]]:
        """Get the selectable values of an attribute inside a scope.

        Args:
            attribute_id: Attribute to facet on.
            scope: Category path, brand, seller and candidate constraints.

        Returns:
            Distinct values in facet order, or the forwarded read failure.
        """
        rows = await self._value_rows(attribute_id, scope)
        if not rows.success:
            return Result.from_failure(rows.failure)

        values: set[str] = set()
        for row in rows.unwrap():
            values.update(attribute_tokens(row))
        return Result.ok(sort_facet_values(values))

    async def product_ids_matching(
        self,
        attribute_id: str,
        selected_values: set[str] | frozenset[str],
        scope: CatalogScope,
    ) -> Result[frozenset[str]]:
        """Get the products carrying any of the selected values.

        Values are compared trimmed and case-insensitively.

        Args:
            attribute_id: Attribute to match on.
            selected_values: Selected values (OR).
            scope: Category path, brand, seller and candidate constraints.

        Returns:
            Matching product ids, or the forwarded read failure.
        """
        wanted = {value.strip().casefold() for value in selected_values if value.strip()}
        if not wanted:
            return Result.ok(frozenset())

        rows = await self._value_rows(attribute_id, scope)
        if not rows.success:
            return Result.from_failure(rows.failure)

        matching = frozenset(
            row.product_id
            for row in rows.unwrap()
            if any(token.casefold() in wanted for token in attribute_tokens(row))
        )
        logger.debug(
            "Matched attribute values",
            attribute_id=attribute_id,
            selected=len(wanted),
            matched=len(matching),
        )
        return Result.ok(matching)

    async def available_brands(self, scope: CatalogScope) -> Result[list[Brand]]:
        """Get the brands of listings inside a scope, ordered by name.

        Args:
            scope: Scope to inspect; its own brand selection is applied as given.

        Returns:
            Distinct brands, or the forwarded read failure.
        """
        if scope.candidate_ids is not None and not scope.candidate_ids:
            return Result.ok([])
        return await self.store.fetch_available_brands(scope)
