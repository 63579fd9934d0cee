"""Domain layer - catalog entities, tagged attribute values, results, errors.

- **Entities**: records every catalog store returns (CategoryNode, Product, ...)
- **Value Objects**: tagged attribute values (TextValue, NumberValue, ...)
- **Results**: `Result` / `Failure` returned by every catalog read
- **Exceptions**: programming errors such as unwrapping a failed result
"""

from storefront.domain.entities import (
    Attribute,
    AttributeDataType,
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
from storefront.domain.exceptions import DomainError, ResultUnwrapError, UnknownFilterActionError
from storefront.domain.results import CATEGORY_NOT_FOUND, DATA_ACCESS_ERROR, Failure, Result
from storefront.domain.value_objects import (
    AttributeValue,
    BoolValue,
    DateValue,
    NumberValue,
    TextValue,
    format_number,
)

__all__ = [
    # Entities
    "Attribute",
    "AttributeDataType",
    "AttributeOption",
    "AttributeScope",
    "AttributeValueRow",
    "Brand",
    "CategoryGridImage",
    "CategoryNode",
    "FilterVisibility",
    "Product",
    "ProductStatus",
    "Seller",
    # Value objects
    "AttributeValue",
    "BoolValue",
    "DateValue",
    "NumberValue",
    "TextValue",
    "format_number",
    # Results
    "CATEGORY_NOT_FOUND",
    "DATA_ACCESS_ERROR",
    "Failure",
    "Result",
    # Exceptions
    "DomainError",
    "ResultUnwrapError",
    "UnknownFilterActionError",
]
