"""Filter state store and serializer.

`FilterState` is an immutable snapshot of the shopper's selection. It only
changes through `reduce(state, action)`, and it round-trips through the
query-string representation used in shareable URLs:

    levels=<id,id>&brands=<id,id>&colors=<v,v>&sizes=<v,v>
    &attributes=<attrId:v1,v2|attrId2:v3>&price=<bucket>&sort=<key>

Keys holding their default value are omitted. Decoding never fails: a
missing or malformed key falls back to its default.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import parse_qsl, unquote, urlencode

import structlog

from storefront.domain.exceptions import UnknownFilterActionError

logger = structlog.get_logger()


# ============================================================================
# Constants
# ============================================================================

DEFAULT_PRICE_BUCKET = "all"
DEFAULT_SORT = "featured"

PRICE_BUCKET_KEYS = ("all", "0-50", "50-100", "100-200", "200+")
SORT_KEYS = ("featured", "newest", "price-low", "price-high")

# URL parameter names
LEVELS_PARAM = "levels"
BRANDS_PARAM = "brands"
COLORS_PARAM = "colors"
SIZES_PARAM = "sizes"
ATTRIBUTES_PARAM = "attributes"
PRICE_PARAM = "price"
SORT_PARAM = "sort"

STATE_PARAMS = (
    LEVELS_PARAM,
    BRANDS_PARAM,
    COLORS_PARAM,
    SIZES_PARAM,
    ATTRIBUTES_PARAM,
    PRICE_PARAM,
    SORT_PARAM,
)

# Characters with structural meaning inside a parameter value
_ESCAPES = {"%": "%25", ",": "%2C", "|": "%7C", ":": "%3A"}


# ============================================================================
# State
# ============================================================================


@dataclass(frozen=True)
class FilterState:
    """Immutable filter selection.

    Attributes:
        levels: Selected lowest-level category ids.
        brands: Selected brand ids.
        colors: Selected color values.
        sizes: Selected size values.
        attributes: Selected dynamic attribute values as sorted
            (attribute_id, values) pairs; value sets are never empty.
        price: Price bucket key.
        sort: Sort key.
    """

    levels: frozenset[str] = frozenset()
    brands: frozenset[str] = frozenset()
    colors: frozenset[str] = frozenset()
    sizes: frozenset[str] = frozenset()
    attributes: tuple[tuple[str, frozenset[str]], ...] = ()
    price: str = DEFAULT_PRICE_BUCKET
    sort: str = DEFAULT_SORT

    @classmethod
    def build(
        cls,
        levels: Iterable[str] = (),
        brands: Iterable[str] = (),
        colors: Iterable[str] = (),
        sizes: Iterable[str] = (),
        attributes: Mapping[str, Iterable[str]] | None = None,
        price: str = DEFAULT_PRICE_BUCKET,
        sort: str = DEFAULT_SORT,
    ) -> "FilterState":
        """Create a normalized state from plain collections.

        Empty tokens and empty attribute selections are dropped; unknown
        price and sort keys fall back to their defaults.

        Returns:
            Normalized filter state.
        """
        return cls(
            levels=_token_set(levels),
            brands=_token_set(brands),
            colors=_token_set(colors),
            sizes=_token_set(sizes),
            attributes=_attribute_pairs(attributes or {}),
            price=price if price in PRICE_BUCKET_KEYS else DEFAULT_PRICE_BUCKET,
            sort=sort if sort in SORT_KEYS else DEFAULT_SORT,
        )

    @property
    def attribute_map(self) -> dict[str, frozenset[str]]:
        """Selected dynamic attribute values keyed by attribute id."""
        return dict(self.attributes)

    def attribute_values(self, attribute_id: str) -> frozenset[str]:
        """Selected values of one dynamic attribute (empty if none)."""
        return self.attribute_map.get(attribute_id, frozenset())

    @property
    def has_active_filters(self) -> bool:
        """Whether anything besides the sort order is selected."""
        return self.active_filter_count > 0

    @property
    def active_filter_count(self) -> int:
        """Number of selected values across all filters, sort excluded."""
        count = len(self.levels) + len(self.brands) + len(self.colors) + len(self.sizes)
        count += sum(len(values) for _, values in self.attributes)
        if self.price != DEFAULT_PRICE_BUCKET:
            count += 1
        return count

    def project(self, fields: Iterable[str]) -> tuple[Any, ...]:
        """Values of the named fields, in the given order.

        Args:
            fields: FilterState field names.

        Returns:
            Hashable tuple usable as part of a cache key.
        """
        return tuple(getattr(self, name) for name in fields)


def _token_set(values: Iterable[str]) -> frozenset[str]:
    return frozenset(value for value in values if value)


def _attribute_pairs(
    attributes: Mapping[str, Iterable[str]],
) -> tuple[tuple[str, frozenset[str]], ...]:
    pairs = []
    for attribute_id, values in attributes.items():
        value_set = _token_set(values)
        if attribute_id and value_set:
            pairs.append((attribute_id, value_set))
    return tuple(sorted(pairs, key=lambda pair: pair[0]))


# ============================================================================
# Actions
# ============================================================================


@dataclass(frozen=True)
class ToggleCategory:
    """Toggle a lowest-level category."""

    category_id: str


@dataclass(frozen=True)
class ToggleBrand:
    """Toggle a brand."""

    brand_id: str


@dataclass(frozen=True)
class ToggleColor:
    """Toggle a color value."""

    color: str


@dataclass(frozen=True)
class ToggleSize:
    """Toggle a size value."""

    size: str


@dataclass(frozen=True)
class ToggleAttributeOption:
    """Toggle one value of a dynamic attribute."""

    attribute_id: str
    value: str


@dataclass(frozen=True)
class SetPriceBucket:
    """Replace the price bucket."""

    bucket: str


@dataclass(frozen=True)
class SetSort:
    """Replace the sort key."""

    sort: str


@dataclass(frozen=True)
class ClearFilters:
    """Drop every selection; the sort order is kept."""


FilterAction = (
    ToggleCategory
    | ToggleBrand
    | ToggleColor
    | ToggleSize
    | ToggleAttributeOption
    | SetPriceBucket
    | SetSort
    | ClearFilters
)

# Action names accepted by `action_from_payload`, mapped to (class, payload field)
ACTION_TYPES: dict[str, tuple[type, str | None]] = {
    "toggle_category": (ToggleCategory, "category_id"),
    "toggle_brand": (ToggleBrand, "brand_id"),
    "toggle_color": (ToggleColor, "color"),
    "toggle_size": (ToggleSize, "size"),
    "toggle_attribute_option": (ToggleAttributeOption, "value"),
    "set_price_bucket": (SetPriceBucket, "bucket"),
    "set_sort": (SetSort, "sort"),
    "clear_filters": (ClearFilters, None),
}


def action_from_payload(
    action_type: str,
    value: str | None = None,
    attribute_id: str | None = None,
) -> FilterAction:
    """Build an action from its wire name.

    Args:
        action_type: One of `ACTION_TYPES`.
        value: Action argument (id, value or key).
        attribute_id: Attribute for `toggle_attribute_option`.

    Returns:
        The action.

    Raises:
        UnknownFilterActionError: If the action name is not supported.
    """
    if action_type not in ACTION_TYPES:
        raise UnknownFilterActionError(action_type, sorted(ACTION_TYPES))

    action_cls, field_name = ACTION_TYPES[action_type]
    if field_name is None:
        return action_cls()
    if action_cls is ToggleAttributeOption:
        return ToggleAttributeOption(attribute_id=attribute_id or "", value=value or "")
    return action_cls(value or "")


def _toggle(values: frozenset[str], value: str) -> frozenset[str]:
    if value in values:
        return values - {value}
    return values | {value}


def reduce(state: FilterState, action: FilterAction) -> FilterState:
    """Apply one selection event to a state.

    Toggles add a value when absent and remove it when present; scalar
    actions replace the value. A transition that changes nothing returns
    the same state object.

    Args:
        state: Current state.
        action: Selection event.

    Returns:
        Next state.
    """
    if isinstance(action, ToggleCategory):
        if not action.category_id:
            return state
        return replace(state, levels=_toggle(state.levels, action.category_id))

    if isinstance(action, ToggleBrand):
        if not action.brand_id:
            return state
        return replace(state, brands=_toggle(state.brands, action.brand_id))

    if isinstance(action, ToggleColor):
        if not action.color:
            return state
        return replace(state, colors=_toggle(state.colors, action.color))

    if isinstance(action, ToggleSize):
        if not action.size:
            return state
        return replace(state, sizes=_toggle(state.sizes, action.size))

    if isinstance(action, ToggleAttributeOption):
        if not action.attribute_id or not action.value:
            return state
        selected = state.attribute_map
        values = _toggle(selected.get(action.attribute_id, frozenset()), action.value)
        if values:
            selected[action.attribute_id] = values
        else:
            selected.pop(action.attribute_id, None)
        return replace(state, attributes=_attribute_pairs(selected))

    if isinstance(action, SetPriceBucket):
        bucket = action.bucket if action.bucket in PRICE_BUCKET_KEYS else DEFAULT_PRICE_BUCKET
        if bucket == state.price:
            return state
        return replace(state, price=bucket)

    if isinstance(action, SetSort):
        sort = action.sort if action.sort in SORT_KEYS else DEFAULT_SORT
        if sort == state.sort:
            return state
        return replace(state, sort=sort)

    if isinstance(action, ClearFilters):
        cleared = FilterState(sort=state.sort)
        return state if cleared == state else cleared

    raise UnknownFilterActionError(type(action).__name__, sorted(ACTION_TYPES))


# ============================================================================
# Serialization
# ============================================================================


def _escape(token: str) -> str:
    return "".join(_ESCAPES.get(char, char) for char in token)


def _join_tokens(values: Iterable[str]) -> str:
    return ",".join(_escape(value) for value in sorted(values))


def _split_tokens(raw: str) -> frozenset[str]:
    return frozenset(unquote(part) for part in raw.split(",") if part)


def encode(state: FilterState) -> dict[str, str]:
    """Serialize a state into URL parameters.

    Args:
        state: State to serialize.

    Returns:
        Parameters in canonical key order, defaults omitted.
    """
    params: dict[str, str] = {}
    if state.levels:
        params[LEVELS_PARAM] = _join_tokens(state.levels)
    if state.brands:
        params[BRANDS_PARAM] = _join_tokens(state.brands)
    if state.colors:
        params[COLORS_PARAM] = _join_tokens(state.colors)
    if state.sizes:
        params[SIZES_PARAM] = _join_tokens(state.sizes)
    if state.attributes:
        params[ATTRIBUTES_PARAM] = "|".join(
            f"{_escape(attribute_id)}:{_join_tokens(values)}"
            for attribute_id, values in state.attributes
        )
    if state.price != DEFAULT_PRICE_BUCKET:
        params[PRICE_PARAM] = state.price
    if state.sort != DEFAULT_SORT:
        params[SORT_PARAM] = state.sort
    return params


def _decode_attributes(raw: str) -> dict[str, frozenset[str]]:
    attributes: dict[str, frozenset[str]] = {}
    for pair in raw.split("|"):
        attribute_id, separator, values = pair.partition(":")
        if not separator or not attribute_id or not values:
            continue
        value_set = _split_tokens(values)
        if value_set:
            attributes[unquote(attribute_id)] = value_set
    return attributes


def decode(params: Mapping[str, Any]) -> FilterState:
    """Restore a state from URL parameters.

    Each key is decoded independently; a missing or malformed key takes its
    default value. Unrelated keys are ignored.

    Args:
        params: URL parameters (e.g. a request's query params).

    Returns:
        Decoded state.
    """
    values: dict[str, Any] = {}
    for name in (LEVELS_PARAM, BRANDS_PARAM, COLORS_PARAM, SIZES_PARAM):
        raw = params.get(name)
        values[name] = _split_tokens(raw) if isinstance(raw, str) else frozenset()

    raw_attributes = params.get(ATTRIBUTES_PARAM)
    attributes = _decode_attributes(raw_attributes) if isinstance(raw_attributes, str) else {}

    price = params.get(PRICE_PARAM)
    sort = params.get(SORT_PARAM)
    if isinstance(price, str) and price and price not in PRICE_BUCKET_KEYS:
        logger.debug("Ignoring unknown price bucket", price=price)
    if isinstance(sort, str) and sort and sort not in SORT_KEYS:
        logger.debug("Ignoring unknown sort key", sort=sort)

    return FilterState.build(
        levels=values[LEVELS_PARAM],
        brands=values[BRANDS_PARAM],
        colors=values[COLORS_PARAM],
        sizes=values[SIZES_PARAM],
        attributes=attributes,
        price=price if isinstance(price, str) else DEFAULT_PRICE_BUCKET,
        sort=sort if isinstance(sort, str) else DEFAULT_SORT,
    )


def to_query_string(state: FilterState) -> str:
    """Serialize a state into a query string (without the leading '?')."""
    return urlencode(encode(state))


def from_query_string(query: str) -> FilterState:
    """Restore a state from a query string; the last occurrence of a key wins."""
    return decode(dict(parse_qsl(query.lstrip("?"), keep_blank_values=True)))
