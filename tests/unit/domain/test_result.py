"""Unit tests for the `Result` type."""

import re

import pytest

from urithi.domain.errors import ResultUnwrapError
from urithi.domain.result import MESSAGE_SEPARATOR, Result

# pylint: disable=magic-value-comparison,too-few-public-methods


class TestConstruction:
    """Tests for the construction paths."""

    @staticmethod
    def test_ok_carries_value():
        """A successful result exposes its value and no error."""
        result = Result.ok(42)
        assert result.is_success
        assert not result.is_failure
        assert result.value == 42
        assert result.error is None

    @staticmethod
    def test_ok_without_value():
        """`ok()` with no argument is a success carrying None."""
        result = Result.ok()
        assert result.is_success
        assert result.value is None

    @staticmethod
    def test_fail_carries_error():
        """A failed result exposes its message and no value."""
        result = Result.fail("Estate is frozen")
        assert result.is_failure
        assert result.error == "Estate is frozen"
        assert result.value is None

    @staticmethod
    @pytest.mark.parametrize("blank", ["", "   ", "\n"])
    def test_blank_error_rejected(blank):
        """A failure needs a message the user can read."""
        with pytest.raises(ValueError, match="non-empty error message"):
            Result.fail(blank)


class TestCombine:
    """Tests for `Result.combine`."""

    @staticmethod
    def test_all_success():
        """Combining successes gives a success."""
        assert Result.combine([Result.ok(1), Result.ok(2)]).is_success

    @staticmethod
    def test_empty_is_success():
        """Nothing to combine is a success."""
        assert Result.combine([]).is_success

    @staticmethod
    def test_errors_joined_in_order():
        """All failure messages are kept, in input order."""
        combined = Result.combine(
            [Result.fail("first"), Result.ok(), Result.fail("second")]
        )
        assert combined.is_failure
        assert combined.error == f"first{MESSAGE_SEPARATOR}second"


class TestAccessors:
    """Tests for `and_return` and `unwrap`."""

    @staticmethod
    def test_and_return_replaces_value_on_success():
        """A success is re-labelled with the new value."""
        assert Result.ok().and_return("asset-1").value == "asset-1"

    @staticmethod
    def test_and_return_keeps_failure():
        """A failure passes through untouched."""
        result = Result.fail("nope").and_return("asset-1")
        assert result.is_failure
        assert result.error == "nope"
        assert result.value is None

    @staticmethod
    def test_unwrap_success():
        """Unwrapping a success returns its value."""
        assert Result.ok("x").unwrap() == "x"

    @staticmethod
    def test_unwrap_failure_raises():
        """Unwrapping a failure raises with the original message."""
        with pytest.raises(
            ResultUnwrapError,
            match=re.escape("Cannot unwrap a failed result: Debt is not disputed"),
        ) as excinfo:
            Result.fail("Debt is not disputed").unwrap()
        assert excinfo.value.error == "Debt is not disputed"

    @staticmethod
    def test_results_are_immutable():
        """Results are frozen value objects."""
        result = Result.ok(1)
        with pytest.raises(AttributeError):
            result.value = 2  # type: ignore[misc]
