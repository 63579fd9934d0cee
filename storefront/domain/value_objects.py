"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. This module holds the tagged attribute values a
product can carry: exactly one of `TextValue`, `NumberValue`, `BoolValue`
or `DateValue`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class ValueObject(ABC):
    """Base class for value objects.

    Value objects are immutable and compared by their attributes,
    not by identity.
    """

    pass


def format_number(value: Decimal | int | float) -> str:
    """Render a number the way shoppers see it, without exponent or trailing zeros.

    Args:
        value: Number to render.

    Returns:
        Plain decimal string, e.g. "9.5" or "100".
    """
    number = value if isinstance(value, Decimal) else Decimal(str(value))
    if not number.is_finite():
        return str(number)
    rendered = format(number.normalize(), "f")
    return "0" if rendered in ("-0", "") else rendered


# ============================================================================
# Attribute Values
# ============================================================================


@dataclass(frozen=True)
class AttributeValueBase(ValueObject):
    """Common interface of the attribute value variants."""

    @abstractmethod
    def tokens(self) -> tuple[str, ...]:
        """Discrete strings this value contributes to a facet."""


@dataclass(frozen=True)
class TextValue(AttributeValueBase):
    """Text attribute, possibly multi-valued.

    Attributes:
        values: Parsed, trimmed, non-empty strings in stored order.
    """

    values: tuple[str, ...]

    @property
    def is_multi(self) -> bool:
        """Whether the product carries more than one value."""
        return len(self.values) > 1

    def tokens(self) -> tuple[str, ...]:
        return self.values


@dataclass(frozen=True)
class NumberValue(AttributeValueBase):
    """Numeric attribute."""

    value: Decimal

    def tokens(self) -> tuple[str, ...]:
        return (format_number(self.value),)


@dataclass(frozen=True)
class BoolValue(AttributeValueBase):
    """Boolean attribute."""

    value: bool

    def tokens(self) -> tuple[str, ...]:
        return ("true" if self.value else "false",)


@dataclass(frozen=True)
class DateValue(AttributeValueBase):
    """Date attribute."""

    value: date

    def tokens(self) -> tuple[str, ...]:
        return (self.value.isoformat(),)


AttributeValue = TextValue | NumberValue | BoolValue | DateValue
