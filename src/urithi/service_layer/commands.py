"""Module defining Commands.

Amounts are plain decimals; handlers turn them into `Money` in the estate's
currency unless the command names another one, in which case the domain
rejects the mismatch.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from urithi.domain.entities import (
    AssetType,
    BequestType,
    DebtType,
    DependantRelationship,
    ExecutorCompensation,
    OwnershipType,
)
from urithi.domain.value_objects import LiabilityTier, PersonIdentity, SignatureType

# pylint: disable=too-many-instance-attributes


@dataclass(frozen=True)
class Command:
    """Base class for all commands."""


@dataclass(frozen=True)
class EstateCommand(Command):
    """A command addressed to an existing estate."""

    estate_id: str


@dataclass(frozen=True)
class WillCommand(Command):
    """A command addressed to an existing will."""

    will_id: str


# ============================================================================
#                              Estate lifecycle
# ============================================================================


@dataclass(frozen=True)
class CreateEstate(Command):
    """Open an estate for a deceased person. The id defaults to the deceased's."""

    deceased_id: str
    deceased_name: str
    date_of_death: date
    currency: str = "KES"
    kra_pin: str | None = None
    estate_id: str | None = None


@dataclass(frozen=True)
class FreezeEstate(EstateCommand):
    reason: str
    frozen_by: str | None = None


@dataclass(frozen=True)
class UnfreezeEstate(EstateCommand):
    reason: str
    unfrozen_by: str | None = None


@dataclass(frozen=True)
class MarkEstateTestate(EstateCommand):
    will_id: str | None = None


@dataclass(frozen=True)
class MarkEstateIntestate(EstateCommand):
    pass


@dataclass(frozen=True)
class DeleteEstate(EstateCommand):
    reason: str


# ============================================================================
#                                   Assets
# ============================================================================


@dataclass(frozen=True)
class AddAsset(EstateCommand):
    """Register an asset. Returns the new asset id."""

    name: str
    asset_type: AssetType
    value: Decimal
    currency: str | None = None
    ownership_type: OwnershipType = OwnershipType.SOLE
    ownership_share: Decimal | None = None
    encumbrance: Decimal | None = None
    title_deed_number: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class VerifyAsset(EstateCommand):
    asset_id: str
    verified_by: str


@dataclass(frozen=True)
class RejectAssetVerification(EstateCommand):
    asset_id: str
    rejected_by: str
    reason: str


@dataclass(frozen=True)
class RevalueAsset(EstateCommand):
    asset_id: str
    new_value: Decimal


@dataclass(frozen=True)
class RemoveAsset(EstateCommand):
    asset_id: str


@dataclass(frozen=True)
class DisputeAsset(EstateCommand):
    asset_id: str
    reason: str


@dataclass(frozen=True)
class SetAssetEncumbrance(EstateCommand):
    """Record a charge over an asset; ``amount=None`` clears it."""

    asset_id: str
    amount: Decimal | None


@dataclass(frozen=True)
class DeactivateAsset(EstateCommand):
    asset_id: str


@dataclass(frozen=True)
class ReactivateAsset(EstateCommand):
    asset_id: str


@dataclass(frozen=True)
class SoftDeleteAsset(EstateCommand):
    asset_id: str
    reason: str


@dataclass(frozen=True)
class RestoreAsset(EstateCommand):
    asset_id: str


# ============================================================================
#                                   Debts
# ============================================================================


@dataclass(frozen=True)
class AddDebt(EstateCommand):
    """Record a debt. The tier defaults from the debt type. Returns the debt id."""

    debt_type: DebtType
    creditor_name: str
    description: str
    principal_amount: Decimal
    outstanding_balance: Decimal | None = None
    currency: str | None = None
    tier: LiabilityTier | None = None
    secured_asset_id: str | None = None
    incurred_date: date | None = None
    due_date: date | None = None


@dataclass(frozen=True)
class RecordDebtPayment(EstateCommand):
    debt_id: str
    amount: Decimal


@dataclass(frozen=True)
class WriteOffDebt(EstateCommand):
    debt_id: str
    reason: str


@dataclass(frozen=True)
class RemoveDebt(EstateCommand):
    debt_id: str


@dataclass(frozen=True)
class DisputeDebt(EstateCommand):
    debt_id: str
    reason: str


@dataclass(frozen=True)
class ResolveDebtDispute(EstateCommand):
    debt_id: str
    adjusted_balance: Decimal | None = None


@dataclass(frozen=True)
class CheckLimitationPeriods(EstateCommand):
    """Mark time-barred debts. Returns the ids that became statute-barred."""

    as_of: date | None = None


# ============================================================================
#                         Dependants and lifetime gifts
# ============================================================================


@dataclass(frozen=True)
class AddLegalDependant(EstateCommand):
    person_id: str
    full_name: str
    relationship: DependantRelationship
    monthly_needs: Decimal
    date_of_birth: date | None = None
    is_incapacitated: bool = False


@dataclass(frozen=True)
class VerifyLegalDependant(EstateCommand):
    dependant_id: str
    verified_by: str


@dataclass(frozen=True)
class RemoveLegalDependant(EstateCommand):
    dependant_id: str


@dataclass(frozen=True)
class AddGiftInterVivos(EstateCommand):
    recipient_id: str
    description: str
    value: Decimal
    date_of_gift: date
    is_subject_to_hotchpot: bool = True


@dataclass(frozen=True)
class VerifyGiftInterVivos(EstateCommand):
    gift_id: str
    verified_by: str


@dataclass(frozen=True)
class AdjustGiftForInflation(EstateCommand):
    gift_id: str
    annual_rate: Decimal | None = None


@dataclass(frozen=True)
class RemoveGiftInterVivos(EstateCommand):
    gift_id: str


@dataclass(frozen=True)
class ExcludeGiftFromHotchpot(EstateCommand):
    gift_id: str
    reason: str


@dataclass(frozen=True)
class IncludeGiftInHotchpot(EstateCommand):
    gift_id: str


# ============================================================================
#                                   Wills
# ============================================================================


@dataclass(frozen=True)
class CreateWill(Command):
    testator_id: str
    title: str
    will_id: str | None = None


@dataclass(frozen=True)
class NominateExecutor(WillCommand):
    """Nominate an executor, run the eligibility check and appoint them.

    Returns the executor id.
    """

    identity: PersonIdentity
    age: int
    checked_by: str
    order_of_priority: int = 1
    is_primary: bool = False
    is_resident: bool = True
    is_bankrupt: bool = False
    has_criminal_record: bool = False
    criminal_record_details: str | None = None
    compensation: ExecutorCompensation | None = None


@dataclass(frozen=True)
class AcceptExecutorAppointment(WillCommand):
    executor_id: str


@dataclass(frozen=True)
class RemoveExecutor(WillCommand):
    executor_id: str


@dataclass(frozen=True)
class AddBequest(WillCommand):
    beneficiary_id: str
    bequest_type: BequestType
    description: str
    asset_id: str | None = None
    share: Decimal | None = None
    amount: Decimal | None = None
    currency: str = "KES"
    priority: int = 1
    conditions: str | None = None


@dataclass(frozen=True)
class AddWitness(WillCommand):
    """Register a witness. Returns the witness id."""

    identity: PersonIdentity
    full_name: str
    relationship_to_testator: str
    age: int


@dataclass(frozen=True)
class AcceptWitnessInvitation(WillCommand):
    witness_id: str


@dataclass(frozen=True)
class ExecuteWill(WillCommand):
    executed_at: datetime | None = None


@dataclass(frozen=True)
class RecordWitnessSignature(WillCommand):
    witness_id: str
    signature_type: SignatureType
    attestation: str
    co_witness_present: bool
    signed_at: datetime | None = None
    co_witness_id: str | None = None
    signature_hash: str | None = None


@dataclass(frozen=True)
class VerifyWitness(WillCommand):
    witness_id: str
    verified_by: str
    method: str
    notes: str | None = None


@dataclass(frozen=True)
class ActivateWill(WillCommand):
    pass


@dataclass(frozen=True)
class RevokeWill(WillCommand):
    reason: str
