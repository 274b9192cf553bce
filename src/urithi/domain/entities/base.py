"""Base class for entities owned by an aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.errors import InvalidEntityError
from urithi.domain.result import MESSAGE_SEPARATOR

#: Marks dataclass fields that are runtime collaborators, not persisted state.
TRANSIENT = "transient"


@dataclass(eq=False, kw_only=True)
class Entity:
    """Identity-bearing, mutable domain object.

    Entities compare equal by type and ``id``. Mutators return `Result` values
    and call `_touch` so ``updated_at`` reflects the injected clock.
    """

    id: str
    created_at: datetime
    updated_at: datetime
    clock: Clock = field(
        default=SYSTEM_CLOCK, repr=False, metadata={TRANSIENT: True}
    )

    def _touch(self) -> None:
        self.updated_at = self.clock.now()

    def validation_errors(self) -> list[str]:
        """Return every broken creation rule; empty when the entity is valid."""
        return [] if self.id.strip() else ["Entity id must be non-empty"]

    def ensure_valid(self) -> None:
        """Raise if the entity's state breaks its creation rules.

        Used when rebuilding entities from storage, where invalid data is a
        bug rather than user input.

        Raises:
            InvalidEntityError: Listing every broken rule.
        """
        if errors := self.validation_errors():
            raise InvalidEntityError(
                f"{type(self).__name__} {self.id}: {MESSAGE_SEPARATOR.join(errors)}"
            )

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.id == self.id  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))


def add_years(start: date, years: int) -> date:
    """Return *start* moved by whole *years*; 29 February maps to 28 February."""
    try:
        return start.replace(year=start.year + years)
    except ValueError:
        return start.replace(year=start.year + years, day=28)


def whole_years_between(start: date, end: date) -> int:
    """Completed years from *start* to *end* (an age calculation)."""
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return years
