"""Estate debt entity.

Debts carry a `DebtPriority` derived from the statutory schedule, which
encodes the Section 45 LSA payment order: funeral and testamentary expenses,
then secured creditors, then preferential claims (taxes, rates, wages), then
ordinary unsecured creditors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.result import MESSAGE_SEPARATOR, Result
from urithi.domain.statutes import DEFAULT_STATUTE_SCHEDULE, StatuteSchedule
from urithi.domain.value_objects import Currency, DebtPriority, LiabilityTier, Money

from .base import Entity, add_years

# pylint: disable=too-many-instance-attributes

MIN_REASON_LENGTH = 10
MIN_CREDITOR_NAME_LENGTH = 2


class DebtType(Enum):
    """Kinds of liability an estate may owe."""

    MORTGAGE = "mortgage"
    PERSONAL_LOAN = "personal_loan"
    CREDIT_CARD = "credit_card"
    BUSINESS_DEBT = "business_debt"
    TAX_OBLIGATION = "tax_obligation"
    FUNERAL_EXPENSE = "funeral_expense"
    MEDICAL_BILL = "medical_bill"
    LAND_RATES = "land_rates"
    UTILITY_BILLS = "utility_bills"
    EMPLOYEE_WAGES = "employee_wages"
    COURT_FINES = "court_fines"
    OTHER = "other"


class DebtStatus(Enum):
    """Settlement status of a debt."""

    OUTSTANDING = "outstanding"
    PARTIALLY_PAID = "partially_paid"
    SETTLED = "settled"
    WRITTEN_OFF = "written_off"
    DISPUTED = "disputed"
    STATUTE_BARRED = "statute_barred"


#: Statuses under which a debt no longer counts as a liability.
CLOSED_STATUSES = frozenset(
    {DebtStatus.SETTLED, DebtStatus.WRITTEN_OFF, DebtStatus.STATUTE_BARRED}
)

#: Debts that the law does not allow an administrator to forgive.
NON_WRITABLE_TYPES = frozenset({DebtType.FUNERAL_EXPENSE, DebtType.TAX_OBLIGATION})

_DEFAULT_TIERS = {
    DebtType.FUNERAL_EXPENSE: LiabilityTier.FUNERAL_EXPENSES,
    DebtType.MORTGAGE: LiabilityTier.SECURED_DEBTS,
    DebtType.TAX_OBLIGATION: LiabilityTier.TAXES_RATES_WAGES,
    DebtType.LAND_RATES: LiabilityTier.TAXES_RATES_WAGES,
    DebtType.EMPLOYEE_WAGES: LiabilityTier.TAXES_RATES_WAGES,
}


def default_tier_for(debt_type: DebtType, secured: bool = False) -> LiabilityTier:
    """Statutory tier for a debt type; any debt secured on an asset is secured."""
    if tier := _DEFAULT_TIERS.get(debt_type):
        return tier
    return LiabilityTier.SECURED_DEBTS if secured else LiabilityTier.UNSECURED_GENERAL


@dataclass(eq=False, kw_only=True)
class Debt(Entity):
    """A liability of the estate."""

    estate_id: str
    debt_type: DebtType
    creditor_name: str
    description: str
    principal_amount: Money
    outstanding_balance: Money
    total_paid: Money
    priority: DebtPriority
    status: DebtStatus = DebtStatus.OUTSTANDING
    secured_asset_id: str | None = None
    incurred_date: date | None = None
    due_date: date | None = None
    is_statute_barred: bool = False
    dispute_reason: str | None = None
    write_off_reason: str | None = None
    last_payment_at: datetime | None = None
    settled_at: datetime | None = None

    # --- Construction Paths ---

    @classmethod
    def create(  # pylint: disable=too-many-arguments,too-many-locals
        cls,
        *,
        debt_id: str,
        estate_id: str,
        debt_type: DebtType,
        creditor_name: str,
        description: str,
        principal_amount: Money,
        outstanding_balance: Money | None = None,
        tier: LiabilityTier | None = None,
        secured_asset_id: str | None = None,
        incurred_date: date | None = None,
        due_date: date | None = None,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
        clock: Clock = SYSTEM_CLOCK,
    ) -> Result[Debt]:
        """Record a new debt.

        The tier defaults from the debt type (see `default_tier_for`); an
        explicit *tier* overrides it. The outstanding balance defaults to the
        principal.
        """
        now = clock.now()
        tier = tier or default_tier_for(debt_type, secured=secured_asset_id is not None)
        debt = cls(
            id=debt_id,
            created_at=now,
            updated_at=now,
            clock=clock,
            estate_id=estate_id,
            debt_type=debt_type,
            creditor_name=creditor_name.strip(),
            description=description.strip(),
            principal_amount=principal_amount,
            outstanding_balance=outstanding_balance or principal_amount,
            total_paid=Money.zero(principal_amount.currency),
            priority=schedule.priority_for(tier),
            secured_asset_id=secured_asset_id,
            incurred_date=incurred_date,
            due_date=due_date,
        )
        errors = debt.validation_errors()
        if incurred_date is not None and incurred_date > clock.today():
            errors.append("Debt cannot be incurred in the future")
        if errors:
            return Result.fail(MESSAGE_SEPARATOR.join(errors))
        return Result.ok(debt)

    def validation_errors(self) -> list[str]:
        errors = super().validation_errors()
        if not self.estate_id.strip():
            errors.append("Debt must be linked to an estate")
        if len(self.creditor_name.strip()) < MIN_CREDITOR_NAME_LENGTH:
            errors.append("Creditor name must be at least 2 characters")
        if not self.description.strip():
            errors.append("Debt description is required")
        currency = self.principal_amount.currency
        if not self.principal_amount.is_positive:
            errors.append("Principal amount must be greater than zero")
        if (
            self.outstanding_balance.currency is not currency
            or self.total_paid.currency is not currency
        ):
            errors.append("All debt amounts must share one currency")
        elif self.outstanding_balance.is_negative:
            errors.append("Outstanding balance cannot be negative")
        if self.due_date and self.incurred_date and self.due_date < self.incurred_date:
            errors.append("Due date cannot precede the date incurred")
        return errors

    # --- Queries ---

    @property
    def currency(self) -> Currency:
        return self.principal_amount.currency

    @property
    def tier(self) -> LiabilityTier:
        return self.priority.tier

    @property
    def is_secured(self) -> bool:
        return self.secured_asset_id is not None

    @property
    def is_settled(self) -> bool:
        return self.status is DebtStatus.SETTLED

    @property
    def is_outstanding(self) -> bool:
        """True while the debt still counts toward the estate's liabilities."""
        return self.status not in CLOSED_STATUSES and not self.is_statute_barred

    def blocks_distribution(self) -> bool:
        """A critical debt that is still outstanding must be paid before distribution."""
        return self.priority.critical and self.is_outstanding

    def is_high_priority(self) -> bool:
        return self.priority.tier in (
            LiabilityTier.FUNERAL_EXPENSES,
            LiabilityTier.SECURED_DEBTS,
        )

    # --- Payments ---

    def record_payment(self, amount: Money) -> Result[None]:
        if not self.is_outstanding:
            return Result.fail(f"Cannot pay a debt that is {self.status.value}")
        if self.status is DebtStatus.DISPUTED:
            return Result.fail("Cannot pay a disputed debt until the dispute is resolved")
        if amount.currency is not self.currency:
            return Result.fail(
                f"Payment must be in {self.currency.value}, got {amount.currency.value}"
            )
        if not amount.is_positive:
            return Result.fail("Payment amount must be greater than zero")
        if amount > self.outstanding_balance:
            return Result.fail(
                f"Payment of {amount} exceeds outstanding balance of {self.outstanding_balance}"
            )
        now = self.clock.now()
        self.outstanding_balance = self.outstanding_balance - amount
        self.total_paid = self.total_paid + amount
        self.last_payment_at = now
        if self.outstanding_balance.is_zero:
            self.status = DebtStatus.SETTLED
            self.settled_at = now
        else:
            self.status = DebtStatus.PARTIALLY_PAID
        self._touch()
        return Result.ok()

    def write_off(self, reason: str) -> Result[None]:
        if len(reason.strip()) < MIN_REASON_LENGTH:
            return Result.fail("Write-off reason must be at least 10 characters")
        if self.debt_type in NON_WRITABLE_TYPES:
            return Result.fail(
                f"{self.debt_type.value.replace('_', ' ').capitalize()} cannot be written off"
            )
        if not self.is_outstanding:
            return Result.fail(f"Cannot write off a debt that is {self.status.value}")
        self.status = DebtStatus.WRITTEN_OFF
        self.write_off_reason = reason.strip()
        self.outstanding_balance = Money.zero(self.currency)
        self._touch()
        return Result.ok()

    # --- Disputes ---

    def dispute(self, reason: str) -> Result[None]:
        if len(reason.strip()) < MIN_REASON_LENGTH:
            return Result.fail("Dispute reason must be at least 10 characters")
        if self.status is DebtStatus.DISPUTED:
            return Result.fail("Debt is already disputed")
        if not self.is_outstanding:
            return Result.fail(f"Cannot dispute a debt that is {self.status.value}")
        self.status = DebtStatus.DISPUTED
        self.dispute_reason = reason.strip()
        self._touch()
        return Result.ok()

    def resolve_dispute(self, adjusted_balance: Money | None = None) -> Result[None]:
        """Close a dispute, optionally agreeing a new balance."""
        if self.status is not DebtStatus.DISPUTED:
            return Result.fail("Debt is not disputed")
        if adjusted_balance is not None:
            if adjusted_balance.currency is not self.currency:
                return Result.fail("Adjusted balance must be in the debt's currency")
            if adjusted_balance.is_negative:
                return Result.fail("Adjusted balance cannot be negative")
            self.outstanding_balance = adjusted_balance
        self.dispute_reason = None
        if self.outstanding_balance.is_zero:
            self.status = DebtStatus.SETTLED
            self.settled_at = self.clock.now()
        elif self.total_paid.is_positive:
            self.status = DebtStatus.PARTIALLY_PAID
        else:
            self.status = DebtStatus.OUTSTANDING
        self._touch()
        return Result.ok()

    # --- Limitation ---

    def limitation_expiry(
        self, schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE
    ) -> date | None:
        """Date after which the claim is time-barred (None if undated)."""
        if self.incurred_date is None:
            return None
        years = (
            schedule.limitation_years_secured
            if self.is_secured or self.tier is LiabilityTier.SECURED_DEBTS
            else schedule.limitation_years_unsecured
        )
        return add_years(self.incurred_date, years)

    def check_statute_barred(
        self,
        as_of: date | None = None,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> bool:
        """Mark the debt statute-barred if its limitation period has run.

        Returns:
            True if the debt is (now) statute-barred.
        """
        if self.is_statute_barred:
            return True
        expiry = self.limitation_expiry(schedule)
        if expiry is None or not self.is_outstanding:
            return False
        if (as_of or self.clock.today()) >= expiry:
            self.is_statute_barred = True
            self.status = DebtStatus.STATUTE_BARRED
            self._touch()
            return True
        return False
