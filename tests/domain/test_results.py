"""Tests for typed results and domain exceptions."""

import pytest

from storefront.domain.exceptions import DomainError, ResultUnwrapError, UnknownFilterActionError
from storefront.domain.results import CATEGORY_NOT_FOUND, DATA_ACCESS_ERROR, Result


class TestResult:
    """Tests for Result."""

    def test_ok(self) -> None:
        """Successful results carry their payload."""
        result = Result.ok([1, 2])
        assert result.success
        assert result.failure is None
        assert result.unwrap() == [1, 2]

    def test_ok_with_none_payload(self) -> None:
        """None is a valid payload."""
        result = Result.ok(None)
        assert result.success
        assert result.unwrap() is None

    def test_fail(self) -> None:
        """Failed results carry code, message and details."""
        result = Result.fail(DATA_ACCESS_ERROR, "read failed", details={"operation": "x"})
        assert not result.success
        assert result.failure.error_code == DATA_ACCESS_ERROR
        assert result.failure.message == "read failed"
        assert result.failure.details == {"operation": "x"}

    def test_fail_default_details(self) -> None:
        """Details default to an empty dict."""
        assert Result.fail(CATEGORY_NOT_FOUND, "missing").failure.details == {}

    def test_unwrap_failure_raises(self) -> None:
        """Unwrapping a failure raises ResultUnwrapError."""
        result = Result.fail(CATEGORY_NOT_FOUND, "missing")
        with pytest.raises(ResultUnwrapError) as exc_info:
            result.unwrap()
        assert exc_info.value.error_code == CATEGORY_NOT_FOUND
        assert isinstance(exc_info.value, DomainError)

    def test_from_failure_forwards_unchanged(self) -> None:
        """Forwarded failures keep their identity."""
        original = Result.fail(DATA_ACCESS_ERROR, "down")
        forwarded: Result[str] = Result.from_failure(original.failure)
        assert forwarded.failure is original.failure


class TestUnknownFilterActionError:
    """Tests for UnknownFilterActionError."""

    def test_details(self) -> None:
        """The error names the action and the allowed ones."""
        error = UnknownFilterActionError("explode", ["set_sort"])
        assert error.action_type == "explode"
        assert error.details == {"action_type": "explode", "allowed_actions": ["set_sort"]}
        assert "explode" in str(error)
