"""Will witness entity (Section 11 LSA).

A witness is invited, accepts (which re-runs the eligibility check), signs
and is finally verified::

    PENDING --accept--> ACCEPTED --sign--> SIGNED --verify--> VERIFIED
       \\--decline--> DECLINED           \\--reject--> REJECTED

A beneficiary or executor can never witness the will (Section 11(4) LSA);
that is refused at creation, not merely reported by the eligibility check.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any

from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.result import MESSAGE_SEPARATOR, Result
from urithi.domain.statutes import DEFAULT_STATUTE_SCHEDULE, StatuteSchedule
from urithi.domain.value_objects import (
    ExternalPerson,
    PersonIdentity,
    RegisteredUser,
    SignatureStatus,
    WitnessSignature,
)

from .base import Entity

# pylint: disable=too-many-instance-attributes,too-many-public-methods

MIN_NAME_LENGTH = 3

BENEFICIARY_WITNESS_MESSAGE = "A beneficiary cannot witness a will (Section 11(4)(a) LSA)"
EXECUTOR_WITNESS_MESSAGE = "An executor cannot witness a will (Section 11(4)(b) LSA)"


class WitnessType(Enum):
    """Capacity in which a witness attests."""

    REGISTERED_USER = "registered_user"
    EXTERNAL_INDIVIDUAL = "external_individual"
    PROFESSIONAL_WITNESS = "professional_witness"
    COURT_OFFICER = "court_officer"
    NOTARY_PUBLIC = "notary_public"


class WitnessStatus(Enum):
    """Status of a witness in the attestation process."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    SIGNED = "signed"
    VERIFIED = "verified"
    REJECTED = "rejected"


class WitnessEligibilityStatus(Enum):
    """Outcome of a witness eligibility check (declaration order is precedence)."""

    PENDING_ELIGIBILITY_CHECK = "pending_eligibility_check"
    ELIGIBLE = "eligible"
    INELIGIBLE_MINOR = "ineligible_minor"
    INELIGIBLE_BENEFICIARY = "ineligible_beneficiary"
    INELIGIBLE_EXECUTOR = "ineligible_executor"
    INELIGIBLE_RELATIONSHIP = "ineligible_relationship"


class InvitationMethod(Enum):
    """Channel through which a witness was invited."""

    EMAIL = "email"
    SMS = "sms"
    IN_PERSON = "in_person"
    POSTAL = "postal"


@dataclass(eq=False, kw_only=True)
class WillWitness(Entity):
    """A person attesting the testator's signature on a will."""

    will_id: str
    identity: PersonIdentity
    full_name: str
    relationship_to_testator: str
    age: int
    witness_type: WitnessType = WitnessType.EXTERNAL_INDIVIDUAL
    is_beneficiary: bool = False
    is_executor: bool = False
    has_conflict_of_interest: bool = False
    conflict_details: str | None = None
    status: WitnessStatus = WitnessStatus.PENDING
    eligibility_status: WitnessEligibilityStatus = (
        WitnessEligibilityStatus.PENDING_ELIGIBILITY_CHECK
    )
    ineligibility_reasons: list[WitnessEligibilityStatus] = field(default_factory=list)
    signature: WitnessSignature | None = None
    signed_at: datetime | None = None
    verified_at: datetime | None = None
    verified_by: str | None = None
    verification_method: str | None = None
    verification_notes: str | None = None
    rejection_reason: str | None = None
    understands_obligation: bool = False
    obligation_acknowledged_at: datetime | None = None
    is_sworn_in: bool = False
    sworn_in_at: datetime | None = None
    invitation_method: InvitationMethod | None = None
    invitation_sent_at: datetime | None = None
    reminders_sent: int = 0
    last_reminder_at: datetime | None = None
    response_received_at: datetime | None = None
    decline_reason: str | None = None

    # --- Construction Paths ---

    @classmethod
    def create(  # pylint: disable=too-many-arguments
        cls,
        *,
        witness_id: str,
        will_id: str,
        identity: PersonIdentity,
        full_name: str,
        relationship_to_testator: str,
        age: int,
        witness_type: WitnessType | None = None,
        is_beneficiary: bool = False,
        is_executor: bool = False,
        clock: Clock = SYSTEM_CLOCK,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> Result[WillWitness]:
        """Register a prospective witness.

        Fails if the witness is under age, is a beneficiary or executor, or
        lacks a name or relationship. All problems are reported together.
        """
        if witness_type is None:
            witness_type = (
                WitnessType.REGISTERED_USER
                if isinstance(identity, RegisteredUser)
                else WitnessType.EXTERNAL_INDIVIDUAL
            )
        now = clock.now()
        witness = cls(
            id=witness_id,
            created_at=now,
            updated_at=now,
            clock=clock,
            will_id=will_id,
            identity=identity,
            full_name=full_name.strip(),
            relationship_to_testator=relationship_to_testator.strip(),
            age=age,
            witness_type=witness_type,
            is_beneficiary=is_beneficiary,
            is_executor=is_executor,
        )
        if errors := witness.validation_errors(schedule):
            return Result.fail(MESSAGE_SEPARATOR.join(errors))
        return Result.ok(witness)

    def validation_errors(  # pylint: disable=arguments-differ
        self, schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE
    ) -> list[str]:
        errors = super().validation_errors()
        if not self.will_id.strip():
            errors.append("Witness must be linked to a will")
        if not isinstance(self.identity, (RegisteredUser, ExternalPerson)):
            errors.append("Witness must have either a user id or external details")
        if len(self.full_name.strip()) < MIN_NAME_LENGTH:
            errors.append("Witness full name must be at least 3 characters")
        if self.age < schedule.age_of_majority:
            errors.append(
                f"Witness must be at least {schedule.age_of_majority} years old"
                " (Section 11(3) LSA)"
            )
        if not self.relationship_to_testator.strip():
            errors.append("Relationship to testator is required")
        if self.is_beneficiary:
            errors.append(BENEFICIARY_WITNESS_MESSAGE)
        if self.is_executor:
            errors.append(EXECUTOR_WITNESS_MESSAGE)
        return errors

    # --- Queries ---

    @property
    def user_id(self) -> str | None:
        return self.identity.user_id if isinstance(self.identity, RegisteredUser) else None

    @property
    def is_eligible(self) -> bool:
        return self.eligibility_status is WitnessEligibilityStatus.ELIGIBLE

    @property
    def has_signed(self) -> bool:
        return self.status in (WitnessStatus.SIGNED, WitnessStatus.VERIFIED)

    def is_valid_for_probate(
        self, minimum_age: int = DEFAULT_STATUTE_SCHEDULE.age_of_majority
    ) -> bool:
        """The gate a will relies on before treating itself as properly executed."""
        return (
            self.status is WitnessStatus.VERIFIED
            and self.is_eligible
            and self.age >= minimum_age
            and not self.is_beneficiary
            and not self.is_executor
            and self.signature is not None
            and self.signature.is_legally_valid()
            and self.understands_obligation
        )

    def is_complete(self) -> bool:
        return self.status is WitnessStatus.VERIFIED and self.signature is not None

    def days_since_invitation(self, as_of: date | None = None) -> int | None:
        if self.invitation_sent_at is None:
            return None
        return ((as_of or self.clock.today()) - self.invitation_sent_at.date()).days

    # --- Eligibility ---

    def check_eligibility(
        self, schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE
    ) -> WitnessEligibilityStatus:
        """Evaluate every disqualifying condition and record the outcome."""
        reasons: list[WitnessEligibilityStatus] = []
        if self.age < schedule.age_of_majority:
            reasons.append(WitnessEligibilityStatus.INELIGIBLE_MINOR)
        if self.is_beneficiary:
            reasons.append(WitnessEligibilityStatus.INELIGIBLE_BENEFICIARY)
        if self.is_executor:
            reasons.append(WitnessEligibilityStatus.INELIGIBLE_EXECUTOR)
        if self.has_conflict_of_interest:
            reasons.append(WitnessEligibilityStatus.INELIGIBLE_RELATIONSHIP)

        self.ineligibility_reasons = reasons
        self.eligibility_status = (
            reasons[0] if reasons else WitnessEligibilityStatus.ELIGIBLE
        )
        self._touch()
        return self.eligibility_status

    def flag_conflict_of_interest(
        self, details: str, schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE
    ) -> Result[None]:
        if self.has_conflict_of_interest:
            return Result.fail("Conflict of interest is already flagged")
        if not details.strip():
            return Result.fail("Conflict details are required")
        self.has_conflict_of_interest = True
        self.conflict_details = details.strip()
        self.check_eligibility(schedule)
        return Result.ok()

    # --- Invitation ---

    def send_invitation(self, method: InvitationMethod) -> Result[None]:
        if self.status is not WitnessStatus.PENDING:
            return Result.fail(f"Cannot invite a witness who is {self.status.value}")
        if self.invitation_sent_at is not None:
            return Result.fail("Invitation already sent; send a reminder instead")
        self.invitation_method = method
        self.invitation_sent_at = self.clock.now()
        self._touch()
        return Result.ok()

    def send_reminder(self) -> Result[None]:
        if self.status is not WitnessStatus.PENDING:
            return Result.fail("Reminders are only sent to pending witnesses")
        if self.invitation_sent_at is None:
            return Result.fail("No invitation has been sent yet")
        self.reminders_sent += 1
        self.last_reminder_at = self.clock.now()
        self._touch()
        return Result.ok()

    def accept_invitation(
        self, schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE
    ) -> Result[None]:
        if self.status is not WitnessStatus.PENDING:
            return Result.fail(
                f"Cannot accept from status {self.status.value.upper()} (expected PENDING)"
            )
        if self.check_eligibility(schedule) is not WitnessEligibilityStatus.ELIGIBLE:
            reasons = ", ".join(r.value.upper() for r in self.ineligibility_reasons)
            return Result.fail(f"Witness is not eligible to attest: {reasons}")
        self.status = WitnessStatus.ACCEPTED
        self.response_received_at = self.clock.now()
        self._touch()
        return Result.ok()

    def decline_invitation(self, reason: str) -> Result[None]:
        if self.status is not WitnessStatus.PENDING:
            return Result.fail(
                f"Cannot decline from status {self.status.value.upper()} (expected PENDING)"
            )
        if not reason.strip():
            return Result.fail("A reason for declining is required")
        self.status = WitnessStatus.DECLINED
        self.decline_reason = reason.strip()
        self.response_received_at = self.clock.now()
        self._touch()
        return Result.ok()

    # --- Attestation ---

    def acknowledge_obligation(self) -> Result[None]:
        if self.understands_obligation:
            return Result.fail("Obligation has already been acknowledged")
        if self.status in (WitnessStatus.DECLINED, WitnessStatus.REJECTED):
            return Result.fail(f"Witness is {self.status.value}")
        self.understands_obligation = True
        self.obligation_acknowledged_at = self.clock.now()
        self._touch()
        return Result.ok()

    def swear_in(self) -> Result[None]:
        if self.is_sworn_in:
            return Result.fail("Witness is already sworn in")
        if not self.understands_obligation:
            return Result.fail("Witness must acknowledge the obligation before oath")
        self.is_sworn_in = True
        self.sworn_in_at = self.clock.now()
        self._touch()
        return Result.ok()

    def add_signature(self, signature: WitnessSignature) -> Result[None]:
        if self.status is not WitnessStatus.ACCEPTED:
            return Result.fail(
                f"Cannot sign from status {self.status.value.upper()} (expected ACCEPTED)"
            )
        if not self.is_eligible:
            return Result.fail("Only eligible witnesses may sign")
        if not self.understands_obligation:
            return Result.fail("Witness must acknowledge the obligation before signing")
        if signature.status is not SignatureStatus.CAPTURED:
            return Result.fail("Signature must be freshly captured")
        self.signature = signature
        self.signed_at = signature.signed_at
        self.status = WitnessStatus.SIGNED
        self._touch()
        return Result.ok()

    def verify_witness(
        self, verified_by: str, method: str, notes: str | None = None
    ) -> Result[None]:
        if self.status is not WitnessStatus.SIGNED or self.signature is None:
            return Result.fail(
                f"Cannot verify from status {self.status.value.upper()} (expected SIGNED)"
            )
        now = self.clock.now()
        verified = self.signature.verify_identity(verified_by, method, now)
        if verified.is_failure:
            return Result.fail(verified.error or "Signature verification failed")
        self.signature = verified.value
        self.status = WitnessStatus.VERIFIED
        self.verified_at = now
        self.verified_by = verified_by
        self.verification_method = method
        self.verification_notes = notes
        self._touch()
        return Result.ok()

    def reject(self, reason: str) -> Result[None]:
        if self.status not in (WitnessStatus.ACCEPTED, WitnessStatus.SIGNED):
            return Result.fail(f"Cannot reject a witness who is {self.status.value}")
        if not reason.strip():
            return Result.fail("A rejection reason is required")
        if self.signature is not None:
            rejected = self.signature.reject(reason)
            if rejected.is_success:
                self.signature = rejected.value
        self.status = WitnessStatus.REJECTED
        self.rejection_reason = reason.strip()
        self._touch()
        return Result.ok()

    # --- Contact details ---

    def update_contact_info(
        self, email: str | None = None, phone: str | None = None
    ) -> Result[None]:
        if self.has_signed:
            return Result.fail("Contact details cannot change after signing")
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
        return {
            "id": self.id,
            "name": self.full_name,
            "kind": self.identity.kind,
            "witness_type": self.witness_type.value,
            "relationship": self.relationship_to_testator,
            "status": self.status.value,
            "eligibility": self.eligibility_status.value,
            "ineligibility_reasons": [r.value for r in self.ineligibility_reasons],
            "signed_at": self.signed_at.isoformat() if self.signed_at else None,
            "valid_for_probate": self.is_valid_for_probate(),
        }
