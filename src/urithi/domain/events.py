"""Domain events emitted by the Estate and Will aggregates.

Events are flat, JSON-friendly records: money travels as a decimal string
plus an ISO currency code, dates and datetimes as ISO 8601 strings. They are
what consumers outside the engine subscribe to.
"""

import abc
from dataclasses import dataclass

# pylint: disable=too-many-instance-attributes


@dataclass(frozen=True, slots=True)
class DomainEvent(abc.ABC):
    """Base class for all domain events.
    Requires a way to determine the owning aggregate ID.
    """

    @property
    @abc.abstractmethod
    def aggregate_id(self) -> str:
        """Return the ID of the aggregate this event belongs to."""


@dataclass(frozen=True, slots=True)
class EstateEvent(DomainEvent):
    """Base for events owned by an estate."""

    estate_id: str

    @property
    def aggregate_id(self) -> str:
        return self.estate_id


@dataclass(frozen=True, slots=True)
class WillEvent(DomainEvent):
    """Base for events owned by a will."""

    will_id: str

    @property
    def aggregate_id(self) -> str:
        return self.will_id


# ============================================================================
#                               Estate lifecycle
# ============================================================================


@dataclass(frozen=True, slots=True)
class EstateCreated(EstateEvent):
    """An estate was opened following a confirmed death."""

    deceased_id: str
    deceased_name: str
    date_of_death: str
    currency: str


@dataclass(frozen=True, slots=True)
class EstateFrozen(EstateEvent):
    """All mutations on the estate are suspended."""

    reason: str
    frozen_by: str | None
    frozen_at: str


@dataclass(frozen=True, slots=True)
class EstateUnfrozen(EstateEvent):
    """A freeze was lifted."""

    reason: str
    unfrozen_by: str | None
    previous_freeze_reason: str | None


@dataclass(frozen=True, slots=True)
class EstateMarkedTestate(EstateEvent):
    """The deceased left a valid will."""

    will_id: str | None


@dataclass(frozen=True, slots=True)
class EstateMarkedIntestate(EstateEvent):
    """The deceased left no valid will."""


@dataclass(frozen=True, slots=True)
class EstateDeleted(EstateEvent):
    """The estate was soft-deleted."""

    reason: str


# ============================================================================
#                                    Assets
# ============================================================================


@dataclass(frozen=True, slots=True)
class AssetAddedToEstate(EstateEvent):
    asset_id: str
    asset_type: str
    name: str
    value: str
    currency: str


@dataclass(frozen=True, slots=True)
class AssetRemovedFromEstate(EstateEvent):
    asset_id: str


@dataclass(frozen=True, slots=True)
class AssetVerified(EstateEvent):
    asset_id: str
    verified_by: str


@dataclass(frozen=True, slots=True)
class AssetVerificationRejected(EstateEvent):
    asset_id: str
    rejected_by: str
    reason: str


@dataclass(frozen=True, slots=True)
class AssetRevalued(EstateEvent):
    asset_id: str
    previous_value: str
    new_value: str
    currency: str


@dataclass(frozen=True, slots=True)
class AssetDisputed(EstateEvent):
    asset_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class AssetEncumbranceSet(EstateEvent):
    """A charge over the asset was recorded, or cleared when ``amount`` is None."""

    asset_id: str
    amount: str | None
    currency: str


@dataclass(frozen=True, slots=True)
class AssetDeactivated(EstateEvent):
    asset_id: str


@dataclass(frozen=True, slots=True)
class AssetReactivated(EstateEvent):
    asset_id: str


@dataclass(frozen=True, slots=True)
class AssetDeleted(EstateEvent):
    asset_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class AssetRestored(EstateEvent):
    asset_id: str


# ============================================================================
#                                    Debts
# ============================================================================


@dataclass(frozen=True, slots=True)
class DebtAddedToEstate(EstateEvent):
    debt_id: str
    debt_type: str
    creditor_name: str
    amount: str
    currency: str
    tier: str
    priority_rank: int


@dataclass(frozen=True, slots=True)
class DebtRemovedFromEstate(EstateEvent):
    debt_id: str


@dataclass(frozen=True, slots=True)
class DebtPaymentRecorded(EstateEvent):
    debt_id: str
    amount: str
    outstanding_balance: str
    currency: str
    settled: bool


@dataclass(frozen=True, slots=True)
class DebtWrittenOff(EstateEvent):
    debt_id: str
    reason: str
    amount: str
    currency: str


@dataclass(frozen=True, slots=True)
class DebtDisputed(EstateEvent):
    debt_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class DebtDisputeResolved(EstateEvent):
    debt_id: str
    outstanding_balance: str
    currency: str
    status: str


@dataclass(frozen=True, slots=True)
class DebtStatuteBarred(EstateEvent):
    """The limitation period on a debt ran out; it no longer counts as a liability."""

    debt_id: str
    barred_amount: str
    currency: str
    limitation_expiry: str


# ============================================================================
#                           Dependants and lifetime gifts
# ============================================================================


@dataclass(frozen=True, slots=True)
class LegalDependantAdded(EstateEvent):
    dependant_id: str
    person_id: str
    relationship: str


@dataclass(frozen=True, slots=True)
class LegalDependantRemoved(EstateEvent):
    dependant_id: str


@dataclass(frozen=True, slots=True)
class LegalDependantVerified(EstateEvent):
    dependant_id: str
    verified_by: str


@dataclass(frozen=True, slots=True)
class GiftInterVivosAdded(EstateEvent):
    gift_id: str
    recipient_id: str
    value: str
    currency: str
    is_subject_to_hotchpot: bool


@dataclass(frozen=True, slots=True)
class GiftInterVivosRemoved(EstateEvent):
    gift_id: str


@dataclass(frozen=True, slots=True)
class GiftInterVivosVerified(EstateEvent):
    gift_id: str
    verified_by: str


@dataclass(frozen=True, slots=True)
class GiftInflationAdjusted(EstateEvent):
    gift_id: str
    adjusted_value: str
    currency: str


@dataclass(frozen=True, slots=True)
class GiftExcludedFromHotchpot(EstateEvent):
    gift_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class GiftIncludedInHotchpot(EstateEvent):
    gift_id: str


# ============================================================================
#                               Financial position
# ============================================================================


@dataclass(frozen=True, slots=True)
class EstateValueRecalculated(EstateEvent):
    """Cached totals after a mutation."""

    gross_value: str
    total_liabilities: str
    net_value: str
    hotchpot_adjusted_value: str | None
    currency: str


@dataclass(frozen=True, slots=True)
class EstateInsolvencyDetected(EstateEvent):
    """Liabilities began to exceed the gross value of the estate."""

    gross_value: str
    total_liabilities: str
    shortfall: str
    currency: str


# ============================================================================
#                                     Wills
# ============================================================================


@dataclass(frozen=True, slots=True)
class WillCreated(WillEvent):
    testator_id: str
    title: str


@dataclass(frozen=True, slots=True)
class ExecutorAppointed(WillEvent):
    executor_id: str
    name: str
    order_of_priority: int


@dataclass(frozen=True, slots=True)
class ExecutorAccepted(WillEvent):
    executor_id: str


@dataclass(frozen=True, slots=True)
class ExecutorRemoved(WillEvent):
    executor_id: str


@dataclass(frozen=True, slots=True)
class WitnessAdded(WillEvent):
    witness_id: str
    name: str


@dataclass(frozen=True, slots=True)
class WitnessAccepted(WillEvent):
    witness_id: str


@dataclass(frozen=True, slots=True)
class WitnessSigned(WillEvent):
    witness_id: str
    signed_at: str


@dataclass(frozen=True, slots=True)
class WitnessVerified(WillEvent):
    witness_id: str
    verified_by: str


@dataclass(frozen=True, slots=True)
class BequestAdded(WillEvent):
    bequest_id: str
    beneficiary_id: str
    bequest_type: str


@dataclass(frozen=True, slots=True)
class WillExecuted(WillEvent):
    """The testator signed the will; it now awaits witnesses."""

    executed_at: str


@dataclass(frozen=True, slots=True)
class WillWitnessed(WillEvent):
    witness_count: int


@dataclass(frozen=True, slots=True)
class WillActivated(WillEvent):
    activated_at: str


@dataclass(frozen=True, slots=True)
class WillRevoked(WillEvent):
    reason: str


# Registry of domain event types for deserialization
DOMAIN_EVENT_REGISTRY: dict[str, type[DomainEvent]] = {
    cls.__name__: cls
    for cls in (
        EstateCreated,
        EstateFrozen,
        EstateUnfrozen,
        EstateMarkedTestate,
        EstateMarkedIntestate,
        EstateDeleted,
        AssetAddedToEstate,
        AssetRemovedFromEstate,
        AssetVerified,
        AssetVerificationRejected,
        AssetRevalued,
        AssetDisputed,
        AssetEncumbranceSet,
        AssetDeactivated,
        AssetReactivated,
        AssetDeleted,
        AssetRestored,
        DebtAddedToEstate,
        DebtRemovedFromEstate,
        DebtPaymentRecorded,
        DebtWrittenOff,
        DebtDisputed,
        DebtDisputeResolved,
        DebtStatuteBarred,
        LegalDependantAdded,
        LegalDependantRemoved,
        LegalDependantVerified,
        GiftInterVivosAdded,
        GiftInterVivosRemoved,
        GiftInterVivosVerified,
        GiftInflationAdjusted,
        GiftExcludedFromHotchpot,
        GiftIncludedInHotchpot,
        EstateValueRecalculated,
        EstateInsolvencyDetected,
        WillCreated,
        ExecutorAppointed,
        ExecutorAccepted,
        ExecutorRemoved,
        WitnessAdded,
        WitnessAccepted,
        WitnessSigned,
        WitnessVerified,
        BequestAdded,
        WillExecuted,
        WillWitnessed,
        WillActivated,
        WillRevoked,
    )
}
