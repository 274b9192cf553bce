"""Domain-layer error definitions.

Only invariant violations are raised. Expected business-rule failures
(invalid transitions, missing fields, frozen estates, ...) are returned as
`Result.fail(...)` values instead; see `urithi.domain.result`.
"""

# ============================================================================
#                           General domain errors
# ============================================================================


class DomainError(Exception):
    """Base class for domain-layer errors."""


class AggregateIdMismatchError(DomainError):
    """Raised when an event targets a different aggregate_id than the receiver."""

    def __init__(self, aggregate_id: str, event_aggregate_id: str) -> None:
        super().__init__(
            f"Event aggregate ID '{event_aggregate_id}' does not match "
            f"aggregate ID '{aggregate_id}'."
        )
        self.aggregate_id = aggregate_id
        self.event_aggregate_id = event_aggregate_id


class ResultUnwrapError(DomainError):
    """Raised when the value of a failed result is requested."""

    def __init__(self, error: str) -> None:
        super().__init__(f"Cannot unwrap a failed result: {error}")
        self.error = error


# ============================================================================
#                           Money related errors
# ============================================================================


class InvalidMoneyError(DomainError):
    """Raised when a monetary amount is not a finite decimal number."""


class CurrencyMismatchError(DomainError):
    """Raised when arithmetic or comparison mixes two currencies."""

    def __init__(self, left: str, right: str) -> None:
        super().__init__(
            f"Currency mismatch: cannot combine {left} with {right}. "
            "No implicit conversion is performed."
        )
        self.left = left
        self.right = right


class InvalidPercentageError(DomainError):
    """Raised when a percentage is constructed outside the range 0..100."""


class StatuteScheduleError(DomainError):
    """Raised when a statutory schedule table is malformed."""


# ============================================================================
#                   Aggregate consistency errors
# ============================================================================


class InvalidEntityError(DomainError):
    """Raised when an entity is reconstructed from malformed data."""


class EstateInvariantError(DomainError):
    """Raised when an estate's stored state breaks its financial invariants."""

    def __init__(self, estate_id: str, reason: str) -> None:
        super().__init__(f"Estate {estate_id} is inconsistent: {reason}")
        self.estate_id = estate_id
        self.reason = reason


class EstateLinkageError(DomainError):
    """Raised when a child entity is linked to a different estate."""

    def __init__(self, estate_id: str, entity_estate_id: str, entity_id: str) -> None:
        super().__init__(
            f"Entity {entity_id} belongs to estate '{entity_estate_id}', "
            f"not estate '{estate_id}'."
        )
        self.estate_id = estate_id
        self.entity_estate_id = entity_estate_id
        self.entity_id = entity_id


class WillLinkageError(DomainError):
    """Raised when an executor, witness or bequest is linked to a different will."""

    def __init__(self, will_id: str, entity_will_id: str, entity_id: str) -> None:
        super().__init__(
            f"Entity {entity_id} belongs to will '{entity_will_id}', "
            f"not will '{will_id}'."
        )
        self.will_id = will_id
        self.entity_will_id = entity_will_id
        self.entity_id = entity_id


class WillInvariantError(DomainError):
    """Raised when a will's stored state breaks its invariants."""

    def __init__(self, will_id: str, reason: str) -> None:
        super().__init__(f"Will {will_id} is inconsistent: {reason}")
        self.will_id = will_id
        self.reason = reason
