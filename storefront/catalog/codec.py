"""Attribute value codec.

Product attribute payloads arrive in several encodings: a JSON array
(`["Red", "Blue"]`), a comma-delimited string (`"Red, Blue"`) or a plain
scalar (`"Red"`). The codec turns any of them into a tuple of trimmed,
non-empty strings and never raises.
"""

import json
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from storefront.domain.entities import AttributeValueRow
from storefront.domain.value_objects import (
    AttributeValue,
    BoolValue,
    DateValue,
    NumberValue,
    TextValue,
    format_number,
)


def _decode_bytes(raw: bytes | bytearray | memoryview) -> str:
    return bytes(raw).decode("utf-8", errors="replace")


def _element_to_string(element: Any) -> str | None:
    """Render one decoded JSON element as a facet string.

    Args:
        element: Decoded JSON element.

    Returns:
        String form, or None for JSON null.
    """
    if element is None:
        return None
    if isinstance(element, bool):
        return "true" if element else "false"
    if isinstance(element, (int, float, Decimal)):
        return format_number(element)
    if isinstance(element, str):
        return element
    if isinstance(element, (bytes, bytearray, memoryview)):
        return _decode_bytes(element)
    try:
        return json.dumps(element, separators=(",", ":"), sort_keys=True, default=str)
    except (TypeError, ValueError):
        return str(element)


def _clean(values: Iterable[str | None]) -> tuple[str, ...]:
    cleaned = []
    for value in values:
        if value is None:
            continue
        value = value.strip()
        if value:
            cleaned.append(value)
    return tuple(cleaned)


def parse_attribute_values(raw: Any) -> tuple[str, ...]:
    """Parse a stored attribute payload into discrete values.

    Rules, applied in order:
        1. None or an empty string yields an empty tuple.
        2. A JSON array (or an already-decoded list/tuple) yields each element
           as a string.
        3. Otherwise a value containing a comma is split on commas.
        4. Otherwise the value is a single element.
    Byte payloads are decoded as UTF-8 first, replacing invalid sequences.
    Every element is trimmed and empty elements are dropped. A JSON string
    scalar is unquoted before rules 3 and 4 apply.

    Args:
        raw: Stored payload in any supported encoding.

    Returns:
        Parsed values in stored order.
    """
    if raw is None:
        return ()
    if isinstance(raw, (bytes, bytearray, memoryview)):
        raw = _decode_bytes(raw)
    if isinstance(raw, (list, tuple)):
        return _clean(_element_to_string(element) for element in raw)
    if not isinstance(raw, str):
        return _clean([_element_to_string(raw)])

    text = raw.strip()
    if not text:
        return ()

    try:
        decoded = json.loads(text)
    except (ValueError, RecursionError):
        decoded = None
    else:
        if isinstance(decoded, list):
            return _clean(_element_to_string(element) for element in decoded)
        if isinstance(decoded, str):
            text = decoded

    if "," in text:
        return _clean(text.split(","))
    return _clean([text])


def serialize_attribute_values(values: Iterable[str]) -> str:
    """Write values in the canonical JSON array encoding.

    Args:
        values: Values to store.

    Returns:
        JSON array text that parses back to the cleaned values.
    """
    return json.dumps(list(_clean(values)), ensure_ascii=False)


def decode_attribute_value(row: AttributeValueRow) -> AttributeValue | None:
    """Map a stored row onto its tagged attribute value.

    The first populated column wins, in the order text, number, boolean, date.

    Args:
        row: Stored attribute payload.

    Returns:
        Tagged value, or None when the row carries nothing usable.
    """
    if row.value_text is not None:
        values = parse_attribute_values(row.value_text)
        return TextValue(values) if values else None
    if row.value_number is not None:
        return NumberValue(Decimal(str(row.value_number)))
    if row.value_boolean is not None:
        return BoolValue(bool(row.value_boolean))
    if row.value_date is not None:
        return DateValue(row.value_date)
    return None


def attribute_tokens(row: AttributeValueRow) -> tuple[str, ...]:
    """Get the facet strings a stored row contributes.

    Args:
        row: Stored attribute payload.

    Returns:
        Discrete facet strings, empty if the row carries nothing usable.
    """
    value = decode_attribute_value(row)
    return value.tokens() if value is not None else ()
