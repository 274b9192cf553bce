"""Gift inter vivos entity (Section 35(3) LSA hotchpot)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.result import MESSAGE_SEPARATOR, Result
from urithi.domain.value_objects import Money

from .base import Entity

DAYS_PER_YEAR = Decimal("365.25")


@dataclass(eq=False, kw_only=True)
class GiftInterVivos(Entity):
    """A gift the deceased made during their lifetime.

    Gifts to a child that are subject to hotchpot are notionally added back to
    the estate before that child's share is computed.
    """

    estate_id: str
    recipient_id: str
    description: str
    value_at_gift_time: Money
    date_of_gift: date
    is_subject_to_hotchpot: bool = True
    is_verified: bool = False
    verified_by: str | None = None
    verified_at: datetime | None = None
    inflation_adjusted_value: Money | None = None
    exclusion_reason: str | None = None

    @classmethod
    def create(  # pylint: disable=too-many-arguments
        cls,
        *,
        gift_id: str,
        estate_id: str,
        recipient_id: str,
        description: str,
        value_at_gift_time: Money,
        date_of_gift: date,
        is_subject_to_hotchpot: bool = True,
        clock: Clock = SYSTEM_CLOCK,
    ) -> Result[GiftInterVivos]:
        now = clock.now()
        gift = cls(
            id=gift_id,
            created_at=now,
            updated_at=now,
            clock=clock,
            estate_id=estate_id,
            recipient_id=recipient_id,
            description=description.strip(),
            value_at_gift_time=value_at_gift_time,
            date_of_gift=date_of_gift,
            is_subject_to_hotchpot=is_subject_to_hotchpot,
        )
        errors = gift.validation_errors()
        if date_of_gift > clock.today():
            errors.append("Gift date cannot be in the future")
        if errors:
            return Result.fail(MESSAGE_SEPARATOR.join(errors))
        return Result.ok(gift)

    def validation_errors(self) -> list[str]:
        errors = super().validation_errors()
        if not self.estate_id.strip():
            errors.append("Gift must be linked to an estate")
        if not self.recipient_id.strip():
            errors.append("Gift recipient is required")
        if not self.description.strip():
            errors.append("Gift description is required")
        if not self.value_at_gift_time.is_positive:
            errors.append("Gift value must be greater than zero")
        return errors

    @property
    def hotchpot_value(self) -> Money:
        """Value brought into hotchpot: the adjusted value if one was computed."""
        return self.inflation_adjusted_value or self.value_at_gift_time

    @property
    def counts_toward_hotchpot(self) -> bool:
        return self.is_subject_to_hotchpot and self.is_verified

    def verify(self, verified_by: str) -> Result[None]:
        if self.is_verified:
            return Result.fail("Gift is already verified")
        if not verified_by.strip():
            return Result.fail("Verifier is required")
        self.is_verified = True
        self.verified_by = verified_by
        self.verified_at = self.clock.now()
        self._touch()
        return Result.ok()

    def exclude_from_hotchpot(self, reason: str) -> Result[None]:
        if not self.is_subject_to_hotchpot:
            return Result.fail("Gift is already excluded from hotchpot")
        if not reason.strip():
            return Result.fail("An exclusion reason is required")
        self.is_subject_to_hotchpot = False
        self.exclusion_reason = reason.strip()
        self._touch()
        return Result.ok()

    def include_in_hotchpot(self) -> Result[None]:
        if self.is_subject_to_hotchpot:
            return Result.fail("Gift is already subject to hotchpot")
        self.is_subject_to_hotchpot = True
        self.exclusion_reason = None
        self._touch()
        return Result.ok()

    def calculate_inflation_adjusted_value(
        self, date_of_death: date, annual_rate: Decimal
    ) -> Result[Money]:
        """Compound the gift value from the gift date to the date of death.

        ``value × (1 + rate) ** years`` with fractional years. The result is
        stored and used as the hotchpot value from then on.
        """
        if date_of_death <= self.date_of_gift:
            return Result.fail("Date of death must be after the date of the gift")
        if annual_rate < 0:
            return Result.fail("Inflation rate cannot be negative")
        years = Decimal((date_of_death - self.date_of_gift).days) / DAYS_PER_YEAR
        factor = (Decimal(1) + annual_rate) ** years
        self.inflation_adjusted_value = self.value_at_gift_time * factor
        self._touch()
        return Result.ok(self.inflation_adjusted_value)
