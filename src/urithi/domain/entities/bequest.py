"""Bequest entity: a gift made by a will."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.result import MESSAGE_SEPARATOR, Result
from urithi.domain.value_objects import Money, Percentage

from .base import Entity

# pylint: disable=too-many-instance-attributes


class BequestType(Enum):
    """Kinds of testamentary gift."""

    SPECIFIC_ASSET = "specific_asset"
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    RESIDUARY = "residuary"


@dataclass(eq=False, kw_only=True)
class Bequest(Entity):
    """A single gift to a beneficiary under a will."""

    will_id: str
    beneficiary_id: str
    bequest_type: BequestType
    description: str
    asset_id: str | None = None
    share: Percentage | None = None
    amount: Money | None = None
    priority: int = 1
    conditions: str | None = None

    @classmethod
    def create(  # pylint: disable=too-many-arguments
        cls,
        *,
        bequest_id: str,
        will_id: str,
        beneficiary_id: str,
        bequest_type: BequestType,
        description: str,
        asset_id: str | None = None,
        share: Percentage | None = None,
        amount: Money | None = None,
        priority: int = 1,
        conditions: str | None = None,
        clock: Clock = SYSTEM_CLOCK,
    ) -> Result[Bequest]:
        now = clock.now()
        bequest = cls(
            id=bequest_id,
            created_at=now,
            updated_at=now,
            clock=clock,
            will_id=will_id,
            beneficiary_id=beneficiary_id,
            bequest_type=bequest_type,
            description=description.strip(),
            asset_id=asset_id,
            share=share,
            amount=amount,
            priority=priority,
            conditions=conditions,
        )
        if errors := bequest.validation_errors():
            return Result.fail(MESSAGE_SEPARATOR.join(errors))
        return Result.ok(bequest)

    def validation_errors(self) -> list[str]:
        errors = super().validation_errors()
        if not self.will_id.strip():
            errors.append("Bequest must be linked to a will")
        if not self.beneficiary_id.strip():
            errors.append("Bequest beneficiary is required")
        if self.priority < 1:
            errors.append("Bequest priority must be at least 1")
        match self.bequest_type:
            case BequestType.SPECIFIC_ASSET if not self.asset_id:
                errors.append("A specific bequest must name an asset")
            case BequestType.PERCENTAGE if self.share is None:
                errors.append("A percentage bequest requires a share")
            case BequestType.FIXED_AMOUNT if self.amount is None or not self.amount.is_positive:
                errors.append("A fixed bequest requires a positive amount")
        return errors

    @property
    def is_residuary(self) -> bool:
        return self.bequest_type is BequestType.RESIDUARY

    @property
    def allocated_percentage(self) -> Percentage | None:
        """Share of the estate this bequest claims, if it is a percentage gift."""
        return self.share if self.bequest_type is BequestType.PERCENTAGE else None
