"""Domain exceptions.

The catalog engine reports expected problems (missing categories, failed
reads) as typed failure values. These exceptions cover the cases where
calling code misuses an API, such as unwrapping a failed result.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Result Errors
# ============================================================================


class ResultUnwrapError(DomainError):
    """Raised when the value of a failed result is requested."""

    def __init__(self, error_code: str, message: str) -> None:
        """Initialize unwrap error.

        Args:
            error_code: Code of the failure that was unwrapped.
            message: Message of the failure that was unwrapped.
        """
        super().__init__(
            f"Cannot unwrap failed result: [{error_code}] {message}",
            details={"error_code": error_code},
        )
        self.error_code = error_code


# ============================================================================
# Filter Errors
# ============================================================================


class UnknownFilterActionError(DomainError):
    """Raised when a filter transition names an action that does not exist."""

    def __init__(self, action_type: str, allowed: list[str]) -> None:
        """Initialize unknown action error.

        Args:
            action_type: Name of the requested action.
            allowed: Names of the supported actions.
        """
        super().__init__(
            f"Unknown filter action '{action_type}'",
            details={"action_type": action_type, "allowed_actions": allowed},
        )
        self.action_type = action_type
