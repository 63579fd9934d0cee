"""Typed results for catalog reads.

Every store read returns a `Result`: either the data, or a `Failure`
describing what went wrong. Components recover with a documented default
or hand the failure back to their caller unchanged.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from storefront.domain.exceptions import ResultUnwrapError

T = TypeVar("T")

# Failure codes
DATA_ACCESS_ERROR = "DATA_ACCESS_ERROR"
CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"


@dataclass(frozen=True)
class Failure:
    """Description of a failed read."""

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a catalog operation.

    Attributes:
        data: Payload when the operation succeeded.
        failure: Failure description when it did not.
    """

    data: T | None = None
    failure: Failure | None = None

    @property
    def success(self) -> bool:
        """Whether the operation succeeded."""
        return self.failure is None

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        """Build a successful result.

        Args:
            data: Result payload.

        Returns:
            Successful result.
        """
        return cls(data=data)

    @classmethod
    def fail(
        cls,
        error_code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "Result[T]":
        """Build a failed result.

        Args:
            error_code: Machine-readable failure code.
            message: Human-readable message.
            details: Optional failure context.

        Returns:
            Failed result.
        """
        return cls(failure=Failure(error_code, message, details or {}))

    @classmethod
    def from_failure(cls, failure: Failure) -> "Result[T]":
        """Forward an existing failure under a different payload type."""
        return cls(failure=failure)

    def unwrap(self) -> T:
        """Get the payload of a successful result.

        Returns:
            The payload.

        Raises:
            ResultUnwrapError: If the result is a failure.
        """
        if self.failure is not None:
            raise ResultUnwrapError(self.failure.error_code, self.failure.message)
        return self.data  # type: ignore[return-value]
