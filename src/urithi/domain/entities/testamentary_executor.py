"""Testamentary executor entity.

An executor is nominated in a will and moves through a guarded status
machine::

    NOMINATED --accept--> ACTIVE --remove--> REMOVED
        |                   |  \\--complete--> COMPLETED
        |--decline--> DECLINED
        \\--renounce--> RENUNCIATED  (also from ACTIVE)

Accepting requires a prior eligibility check that came back ELIGIBLE. The
eligibility check collects every disqualification it finds rather than
stopping at the first one; the reported status is the highest-precedence
failure and `ineligibility_reasons` holds the full list.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.result import MESSAGE_SEPARATOR, Result
from urithi.domain.statutes import DEFAULT_STATUTE_SCHEDULE, StatuteSchedule
from urithi.domain.value_objects import (
    ExternalPerson,
    Money,
    PersonIdentity,
    RegisteredUser,
)

from .base import Entity

# pylint: disable=too-many-instance-attributes,too-many-public-methods


class ExecutorAppointmentType(Enum):
    """How the executor came to be appointed."""

    TESTAMENTARY = "testamentary"
    COURT_APPOINTED = "court_appointed"
    ADMINISTRATOR = "administrator"
    SPECIAL_EXECUTOR = "special_executor"


class ExecutorStatus(Enum):
    """Status of an executor's appointment."""

    NOMINATED = "nominated"
    ACTIVE = "active"
    DECLINED = "declined"
    RENUNCIATED = "renunciated"
    REMOVED = "removed"
    COMPLETED = "completed"


class ExecutorEligibilityStatus(Enum):
    """Outcome of an executor eligibility check.

    Declaration order of the ``INELIGIBLE_*`` members is their precedence.
    """

    PENDING_VERIFICATION = "pending_verification"
    ELIGIBLE = "eligible"
    INELIGIBLE_MINOR = "ineligible_minor"
    INELIGIBLE_NON_RESIDENT = "ineligible_non_resident"
    INELIGIBLE_BANKRUPT = "ineligible_bankrupt"
    INELIGIBLE_CRIMINAL_RECORD = "ineligible_criminal_record"


class CompensationType(Enum):
    """Basis on which an executor is paid."""

    FIXED_AMOUNT = "fixed_amount"
    PERCENTAGE_OF_ESTATE = "percentage_of_estate"
    HOURLY_RATE = "hourly_rate"
    STATUTORY_SCALE = "statutory_scale"
    NONE = "none"


class ExecutorAction(Enum):
    """Acts of administration that may be limited by the will or the court."""

    SELL_ASSETS = "sell_assets"
    BORROW_MONEY = "borrow_money"
    LITIGATE = "litigate"
    DISTRIBUTE = "distribute"


@dataclass(frozen=True, slots=True)
class ExecutorCompensation:
    """Compensation policy for an executor."""

    compensation_type: CompensationType = CompensationType.STATUTORY_SCALE
    fixed_amount: Money | None = None
    percentage: Decimal | None = None
    hourly_rate: Money | None = None
    estimated_hours: Decimal | None = None
    court_approved: bool = False
    court_approval_date: date | None = None

    def validation_errors(self) -> list[str]:
        errors: list[str] = []
        match self.compensation_type:
            case CompensationType.FIXED_AMOUNT if self.fixed_amount is None:
                errors.append("Fixed compensation requires an amount")
            case CompensationType.HOURLY_RATE if self.hourly_rate is None:
                errors.append("Hourly compensation requires a rate")
            case CompensationType.PERCENTAGE_OF_ESTATE if self.percentage is None:
                errors.append("Percentage compensation requires a percentage")
        if self.percentage is not None and not Decimal(0) <= self.percentage <= Decimal(100):
            errors.append("Compensation percentage must be between 0 and 100")
        for amount in (self.fixed_amount, self.hourly_rate):
            if amount is not None and amount.is_negative:
                errors.append("Compensation amounts cannot be negative")
        if self.estimated_hours is not None and self.estimated_hours < 0:
            errors.append("Estimated hours cannot be negative")
        return errors


@dataclass(frozen=True, slots=True)
class ExecutorBond:
    """Security bond an executor may be required to post."""

    required: bool = False
    amount: Money | None = None
    provided: bool = False
    provider: str | None = None
    policy_number: str | None = None
    expires_on: date | None = None

    def validation_errors(self) -> list[str]:
        errors: list[str] = []
        if self.provided and not (self.provider and self.provider.strip()):
            errors.append("Bond provider is required when bond is marked as provided")
        if self.amount is not None and not self.amount.is_positive:
            errors.append("Bond amount must be greater than zero")
        return errors


@dataclass(frozen=True, slots=True)
class ExecutorPowers:
    """Administrative powers conferred on the executor."""

    can_sell_assets: bool = True
    can_borrow_money: bool = False
    can_litigate: bool = True
    can_distribute: bool = True

    def allows(self, action: ExecutorAction) -> bool:
        match action:
            case ExecutorAction.SELL_ASSETS:
                return self.can_sell_assets
            case ExecutorAction.BORROW_MONEY:
                return self.can_borrow_money
            case ExecutorAction.LITIGATE:
                return self.can_litigate
            case ExecutorAction.DISTRIBUTE:
                return self.can_distribute


def limitation_code(action: ExecutorAction) -> str:
    """Limitation string that forbids *action*, e.g. ``CANNOT_SELL_ASSETS``."""
    return f"CANNOT_{action.name}"


@dataclass(eq=False, kw_only=True)
class TestamentaryExecutor(Entity):
    """A person appointed to administer the estate under a will."""

    __test__ = False  # not a pytest test class

    will_id: str
    identity: PersonIdentity
    age: int
    appointment_type: ExecutorAppointmentType = ExecutorAppointmentType.TESTAMENTARY
    order_of_priority: int = 1
    is_primary: bool = False
    is_professional: bool = False
    professional_qualification: str | None = None
    practicing_certificate_number: str | None = None
    professional_firm: str | None = None
    is_resident: bool = True
    is_bankrupt: bool = False
    has_criminal_record: bool = False
    criminal_record_details: str | None = None
    eligibility_status: ExecutorEligibilityStatus = (
        ExecutorEligibilityStatus.PENDING_VERIFICATION
    )
    ineligibility_reasons: list[ExecutorEligibilityStatus] = field(default_factory=list)
    eligibility_verified_at: datetime | None = None
    eligibility_verified_by: str | None = None
    status: ExecutorStatus = ExecutorStatus.NOMINATED
    nominated_at: datetime | None = None
    accepted_at: datetime | None = None
    declined_at: datetime | None = None
    decline_reason: str | None = None
    renunciated_at: datetime | None = None
    renunciation_reason: str | None = None
    removed_at: datetime | None = None
    removal_reason: str | None = None
    completed_at: datetime | None = None
    compensation: ExecutorCompensation = field(default_factory=ExecutorCompensation)
    bond: ExecutorBond = field(default_factory=ExecutorBond)
    powers: ExecutorPowers = field(default_factory=ExecutorPowers)
    limitations: list[str] = field(default_factory=list)

    # --- Construction Paths ---

    @classmethod
    def create(  # pylint: disable=too-many-arguments,too-many-locals
        cls,
        *,
        executor_id: str,
        will_id: str,
        identity: PersonIdentity,
        age: int,
        appointment_type: ExecutorAppointmentType = ExecutorAppointmentType.TESTAMENTARY,
        order_of_priority: int = 1,
        is_primary: bool = False,
        is_resident: bool = True,
        is_bankrupt: bool = False,
        has_criminal_record: bool = False,
        criminal_record_details: str | None = None,
        compensation: ExecutorCompensation | None = None,
        bond: ExecutorBond | None = None,
        powers: ExecutorPowers | None = None,
        clock: Clock = SYSTEM_CLOCK,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> Result[TestamentaryExecutor]:
        """Nominate an executor. Eligibility starts as pending verification."""
        now = clock.now()
        executor = cls(
            id=executor_id,
            created_at=now,
            updated_at=now,
            clock=clock,
            will_id=will_id,
            identity=identity,
            age=age,
            appointment_type=appointment_type,
            order_of_priority=order_of_priority,
            is_primary=is_primary,
            is_resident=is_resident,
            is_bankrupt=is_bankrupt,
            has_criminal_record=has_criminal_record,
            criminal_record_details=criminal_record_details,
            nominated_at=now,
            compensation=compensation or ExecutorCompensation(),
            bond=bond or ExecutorBond(),
            powers=powers or ExecutorPowers(),
        )
        if errors := executor.validation_errors(schedule):
            return Result.fail(MESSAGE_SEPARATOR.join(errors))
        return Result.ok(executor)

    def validation_errors(  # pylint: disable=arguments-differ
        self, schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE
    ) -> list[str]:
        errors = super().validation_errors()
        if not self.will_id.strip():
            errors.append("Executor must be linked to a will")
        if not isinstance(self.identity, (RegisteredUser, ExternalPerson)):
            errors.append("Executor must have either a user id or external executor details")
        if self.age < schedule.age_of_majority:
            errors.append(f"Executor must be at least {schedule.age_of_majority} years old")
        if self.order_of_priority < 1:
            errors.append("Order of priority must be at least 1")
        errors.extend(self.compensation.validation_errors())
        errors.extend(self.bond.validation_errors())
        return errors

    # --- Queries ---

    @property
    def display_name(self) -> str:
        return self.identity.label

    @property
    def user_id(self) -> str | None:
        return self.identity.user_id if isinstance(self.identity, RegisteredUser) else None

    @property
    def is_eligible(self) -> bool:
        return self.eligibility_status is ExecutorEligibilityStatus.ELIGIBLE

    def is_active_and_eligible(self) -> bool:
        return (
            self.status is ExecutorStatus.ACTIVE
            and self.is_eligible
            and (not self.bond.required or self.bond.provided)
        )

    def is_bond_expired(self, as_of: date | None = None) -> bool:
        if not self.bond.provided or self.bond.expires_on is None:
            return False
        return self.bond.expires_on < (as_of or self.clock.today())

    # --- Eligibility ---

    def check_eligibility(
        self,
        verified_by: str,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> ExecutorEligibilityStatus:
        """Evaluate every disqualifying condition and record the outcome.

        Returns:
            ``ELIGIBLE`` if nothing disqualifies the executor, otherwise the
            highest-precedence disqualification.
        """
        reasons: list[ExecutorEligibilityStatus] = []
        if self.age < schedule.age_of_majority:
            reasons.append(ExecutorEligibilityStatus.INELIGIBLE_MINOR)
        if not self.is_resident:
            reasons.append(ExecutorEligibilityStatus.INELIGIBLE_NON_RESIDENT)
        if self.is_bankrupt:
            reasons.append(ExecutorEligibilityStatus.INELIGIBLE_BANKRUPT)
        if self.has_criminal_record and schedule.matches_disqualifying_offence(
            self.criminal_record_details
        ):
            reasons.append(ExecutorEligibilityStatus.INELIGIBLE_CRIMINAL_RECORD)

        self.ineligibility_reasons = reasons
        self.eligibility_status = reasons[0] if reasons else ExecutorEligibilityStatus.ELIGIBLE
        self.eligibility_verified_at = self.clock.now()
        self.eligibility_verified_by = verified_by
        self._touch()
        return self.eligibility_status

    # --- Status transitions ---

    def _require_status(self, action: str, *allowed: ExecutorStatus) -> Result[None]:
        if self.status in allowed:
            return Result.ok()
        expected = " or ".join(s.value.upper() for s in allowed)
        return Result.fail(
            f"Cannot {action} from status {self.status.value.upper()} (expected {expected})"
        )

    def accept_appointment(self) -> Result[None]:
        check = self._require_status("accept appointment", ExecutorStatus.NOMINATED)
        if check.is_failure:
            return check
        if not self.is_eligible:
            return Result.fail(
                "Executor must be ELIGIBLE to accept appointment "
                f"(eligibility: {self.eligibility_status.value.upper()})"
            )
        self.status = ExecutorStatus.ACTIVE
        self.accepted_at = self.clock.now()
        self._touch()
        return Result.ok()

    def decline_appointment(self, reason: str) -> Result[None]:
        check = self._require_status("decline appointment", ExecutorStatus.NOMINATED)
        if check.is_failure:
            return check
        if not reason.strip():
            return Result.fail("A reason for declining is required")
        self.status = ExecutorStatus.DECLINED
        self.declined_at = self.clock.now()
        self.decline_reason = reason.strip()
        self._touch()
        return Result.ok()

    def renounce_appointment(self, reason: str) -> Result[None]:
        check = self._require_status(
            "renounce appointment", ExecutorStatus.NOMINATED, ExecutorStatus.ACTIVE
        )
        if check.is_failure:
            return check
        if not reason.strip():
            return Result.fail("A reason for renunciation is required")
        self.status = ExecutorStatus.RENUNCIATED
        self.renunciated_at = self.clock.now()
        self.renunciation_reason = reason.strip()
        self._touch()
        return Result.ok()

    def remove(self, reason: str) -> Result[None]:
        """Remove an active executor from office."""
        check = self._require_status("remove executor", ExecutorStatus.ACTIVE)
        if check.is_failure:
            return check
        if not reason.strip():
            return Result.fail("A reason for removal is required")
        self.status = ExecutorStatus.REMOVED
        self.removed_at = self.clock.now()
        self.removal_reason = reason.strip()
        self._touch()
        return Result.ok()

    def complete_duties(self) -> Result[None]:
        check = self._require_status("complete duties", ExecutorStatus.ACTIVE)
        if check.is_failure:
            return check
        self.status = ExecutorStatus.COMPLETED
        self.completed_at = self.clock.now()
        self._touch()
        return Result.ok()

    # --- Compensation ---

    def set_compensation(self, compensation: ExecutorCompensation) -> Result[None]:
        check = self._require_status(
            "change compensation", ExecutorStatus.NOMINATED, ExecutorStatus.ACTIVE
        )
        if check.is_failure:
            return check
        if errors := compensation.validation_errors():
            return Result.fail(MESSAGE_SEPARATOR.join(errors))
        self.compensation = compensation
        self._touch()
        return Result.ok()

    def calculate_statutory_scale(
        self,
        estate_net_value: Money,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> Money:
        """Marginal-band statutory fee for *estate_net_value*."""
        return schedule.statutory_fee(estate_net_value)

    def calculate_compensation(
        self,
        estate_net_value: Money,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> Money | None:
        """Compensation due under the configured policy.

        Returns:
            The amount, or ``None`` when the policy lacks a required input or
            the statutory scale does not cover the estate's currency.
        """
        policy = self.compensation
        match policy.compensation_type:
            case CompensationType.FIXED_AMOUNT:
                return policy.fixed_amount
            case CompensationType.PERCENTAGE_OF_ESTATE:
                if policy.percentage is None:
                    return None
                return estate_net_value.percentage(policy.percentage)
            case CompensationType.HOURLY_RATE:
                if policy.hourly_rate is None or policy.estimated_hours is None:
                    return None
                return policy.hourly_rate * policy.estimated_hours
            case CompensationType.STATUTORY_SCALE:
                if estate_net_value.currency is not schedule.currency:
                    return None
                return self.calculate_statutory_scale(estate_net_value, schedule)
            case CompensationType.NONE:
                return Money.zero(estate_net_value.currency)

    # --- Bond ---

    def require_bond(self, amount: Money) -> Result[None]:
        if self.bond.provided:
            return Result.fail("Bond has already been provided")
        if not amount.is_positive:
            return Result.fail("Bond amount must be greater than zero")
        self.bond = replace(self.bond, required=True, amount=amount)
        self._touch()
        return Result.ok()

    def provide_bond(
        self,
        provider: str,
        policy_number: str,
        amount: Money,
        expires_on: date,
    ) -> Result[None]:
        if not self.bond.required:
            return Result.fail("No bond is required for this executor")
        if self.bond.provided:
            return Result.fail("Bond has already been provided")
        if not provider.strip():
            return Result.fail("Bond provider is required")
        if not amount.is_positive:
            return Result.fail("Bond amount must be greater than zero")
        if self.bond.amount is not None and amount < self.bond.amount:
            return Result.fail(f"Bond amount must be at least {self.bond.amount}")
        if expires_on <= self.clock.today():
            return Result.fail("Bond expiry date must be in the future")
        self.bond = replace(
            self.bond,
            provided=True,
            provider=provider.strip(),
            policy_number=policy_number,
            amount=amount,
            expires_on=expires_on,
        )
        self._touch()
        return Result.ok()

    # --- Professional executors ---

    def mark_as_professional(
        self,
        qualification: str,
        certificate_number: str,
        bond_amount: Money,
        firm: str | None = None,
    ) -> Result[None]:
        """Record professional credentials; professionals must post a bond."""
        if self.is_professional:
            return Result.fail("Executor is already marked as professional")
        if not qualification.strip() or not certificate_number.strip():
            return Result.fail("Qualification and practising certificate are required")
        if (result := self.require_bond(bond_amount)).is_failure:
            return result
        self.is_professional = True
        self.professional_qualification = qualification.strip()
        self.practicing_certificate_number = certificate_number.strip()
        self.professional_firm = firm
        self._touch()
        return Result.ok()

    # --- Powers ---

    def add_limitation(self, action: ExecutorAction) -> Result[None]:
        code = limitation_code(action)
        if code in self.limitations:
            return Result.fail(f"Limitation {code} already applies")
        self.limitations.append(code)
        self._touch()
        return Result.ok()

    def can_perform_action(self, action: ExecutorAction) -> bool:
        if not self.is_active_and_eligible():
            return False
        if limitation_code(action) in self.limitations:
            return False
        return self.powers.allows(action)

    # --- Contact details ---

    def update_contact_info(
        self, email: str | None = None, phone: str | None = None
    ) -> Result[None]:
        if self.status in (ExecutorStatus.COMPLETED, ExecutorStatus.REMOVED):
            return Result.fail(
                f"Cannot update contact details of a {self.status.value} executor"
            )
        if not isinstance(self.identity, ExternalPerson):
            return Result.fail("Registered users manage contact details on their account")
        self.identity = replace(
            self.identity,
            email=email if email is not None else self.identity.email,
            phone=phone if phone is not None else self.identity.phone,
        )
        self._touch()
        return Result.ok()

    # --- Reporting ---

    def summary(self) -> dict[str, Any]:
        """Plain-data description for court filings and logs."""
        return {
            "id": self.id,
            "name": self.display_name,
            "kind": self.identity.kind,
            "appointment_type": self.appointment_type.value,
            "order_of_priority": self.order_of_priority,
            "is_primary": self.is_primary,
            "status": self.status.value,
            "eligibility": self.eligibility_status.value,
            "ineligibility_reasons": [r.value for r in self.ineligibility_reasons],
            "is_professional": self.is_professional,
            "compensation_type": self.compensation.compensation_type.value,
            "bond_required": self.bond.required,
            "bond_provided": self.bond.provided,
            "limitations": list(self.limitations),
        }
