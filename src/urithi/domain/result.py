"""Success/failure result type returned by every business operation.

Entities and aggregates never raise for expected rule violations (a frozen
estate, an invalid transition, a missing field). They return a failed
`Result` carrying a human-readable message and leave their state untouched.
Callers branch on `is_success` / `is_failure`.

Example:
    ```python
    result = estate.freeze("Court injunction")
    if result.is_failure:
        logger.warning("freeze rejected: %s", result.error)
    ```
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from urithi.domain.errors import ResultUnwrapError

T = TypeVar("T")
U = TypeVar("U")

MESSAGE_SEPARATOR = "; "  # pragma: no mutate


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Outcome of a business operation: a value, or an error message."""

    value: T | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.error is not None and not self.error.strip():
            raise ValueError("A failed result needs a non-empty error message.")

    # --- Construction Paths ---

    @classmethod
    def ok(cls, value: T | None = None) -> Result[T]:
        """Build a successful result."""
        return cls(value=value)

    @classmethod
    def fail(cls, error: str) -> Result[T]:
        """Build a failed result carrying *error*."""
        return cls(error=error)

    @classmethod
    def combine(cls, results: Iterable[Result[Any]]) -> Result[None]:
        """Fold several results into one.

        Succeeds when every input succeeded. Otherwise fails with all error
        messages joined in input order.
        """
        errors = [r.error for r in results if r.error is not None]
        if errors:
            return cls(error=MESSAGE_SEPARATOR.join(errors))
        return cls()

    # --- Queries ---

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    def and_return(self, value: U) -> Result[U]:
        """Return a success carrying *value*, or this failure unchanged."""
        if self.error is not None:
            return Result(error=self.error)
        return Result(value=value)

    def unwrap(self) -> T:
        """Return the value of a successful result.

        Raises:
            ResultUnwrapError: If the result is a failure.
        """
        if self.error is not None:
            raise ResultUnwrapError(self.error)
        return self.value  # type: ignore[return-value]
