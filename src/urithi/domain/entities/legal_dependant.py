"""Legal dependant entity (Section 29 LSA)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.result import MESSAGE_SEPARATOR, Result
from urithi.domain.value_objects import Money

from .base import Entity, whole_years_between

MONTHS_PER_YEAR = 12
DEFAULT_AGE_OF_MAJORITY = 18


class DependantRelationship(Enum):
    """Relationship to the deceased that grounds a dependency claim."""

    SPOUSE = "spouse"
    FORMER_SPOUSE = "former_spouse"
    CHILD = "child"
    STEP_CHILD = "step_child"
    GRANDCHILD = "grandchild"
    PARENT = "parent"
    SIBLING = "sibling"
    OTHER_MAINTAINED = "other_maintained"


@dataclass(eq=False, kw_only=True)
class LegalDependant(Entity):
    """A person the deceased was maintaining, with a claim for reasonable provision."""

    estate_id: str
    person_id: str
    full_name: str
    relationship: DependantRelationship
    monthly_needs: Money
    date_of_birth: date | None = None
    is_incapacitated: bool = False
    is_verified: bool = False
    verified_by: str | None = None
    verified_at: datetime | None = None

    @classmethod
    def create(  # pylint: disable=too-many-arguments
        cls,
        *,
        dependant_id: str,
        estate_id: str,
        person_id: str,
        full_name: str,
        relationship: DependantRelationship,
        monthly_needs: Money,
        date_of_birth: date | None = None,
        is_incapacitated: bool = False,
        clock: Clock = SYSTEM_CLOCK,
    ) -> Result[LegalDependant]:
        now = clock.now()
        dependant = cls(
            id=dependant_id,
            created_at=now,
            updated_at=now,
            clock=clock,
            estate_id=estate_id,
            person_id=person_id,
            full_name=full_name.strip(),
            relationship=relationship,
            monthly_needs=monthly_needs,
            date_of_birth=date_of_birth,
            is_incapacitated=is_incapacitated,
        )
        errors = dependant.validation_errors()
        if date_of_birth is not None and date_of_birth > clock.today():
            errors.append("Date of birth cannot be in the future")
        if errors:
            return Result.fail(MESSAGE_SEPARATOR.join(errors))
        return Result.ok(dependant)

    def validation_errors(self) -> list[str]:
        errors = super().validation_errors()
        if not self.estate_id.strip():
            errors.append("Dependant must be linked to an estate")
        if not self.person_id.strip():
            errors.append("Dependant person id is required")
        if len(self.full_name.strip()) < 2:  # pylint: disable=magic-value-comparison
            errors.append("Dependant name must be at least 2 characters")
        if self.monthly_needs.is_negative:
            errors.append("Monthly needs cannot be negative")
        return errors

    @property
    def annual_provision(self) -> Money:
        """Yearly maintenance need derived from the monthly figure."""
        return self.monthly_needs * MONTHS_PER_YEAR

    def age_on(self, as_of: date | None = None) -> int | None:
        if self.date_of_birth is None:
            return None
        return whole_years_between(self.date_of_birth, as_of or self.clock.today())

    def is_minor(
        self, as_of: date | None = None, age_of_majority: int = DEFAULT_AGE_OF_MAJORITY
    ) -> bool:
        age = self.age_on(as_of)
        return age is not None and age < age_of_majority

    def verify(self, verified_by: str) -> Result[None]:
        if self.is_verified:
            return Result.fail("Dependant is already verified")
        if not verified_by.strip():
            return Result.fail("Verifier is required")
        self.is_verified = True
        self.verified_by = verified_by
        self.verified_at = self.clock.now()
        self._touch()
        return Result.ok()

    def revoke_verification(self) -> Result[None]:
        if not self.is_verified:
            return Result.fail("Dependant is not verified")
        self.is_verified = False
        self.verified_by = None
        self.verified_at = None
        self._touch()
        return Result.ok()

    def update_monthly_needs(self, monthly_needs: Money) -> Result[None]:
        if monthly_needs.currency is not self.monthly_needs.currency:
            return Result.fail("Monthly needs must stay in the same currency")
        if monthly_needs.is_negative:
            return Result.fail("Monthly needs cannot be negative")
        self.monthly_needs = monthly_needs
        self._touch()
        return Result.ok()
