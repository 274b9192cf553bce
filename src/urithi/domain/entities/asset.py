"""Estate asset entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.result import MESSAGE_SEPARATOR, Result
from urithi.domain.value_objects import Currency, Money, Percentage

from .base import Entity

# pylint: disable=too-many-instance-attributes

MIN_NAME_LENGTH = 2


class AssetType(Enum):
    """Kinds of property an estate can hold."""

    LAND_PARCEL = "land_parcel"
    PROPERTY = "property"
    VEHICLE = "vehicle"
    FINANCIAL_ASSET = "financial_asset"
    BUSINESS_INTEREST = "business_interest"
    DIGITAL_ASSET = "digital_asset"
    PERSONAL_EFFECTS = "personal_effects"
    OTHER = "other"


class OwnershipType(Enum):
    """How the deceased held the asset."""

    SOLE = "sole"
    JOINT_TENANCY = "joint_tenancy"
    TENANCY_IN_COMMON = "tenancy_in_common"
    COMMUNITY_PROPERTY = "community_property"


class AssetVerificationStatus(Enum):
    """Where an asset is in the verification process."""

    UNVERIFIED = "unverified"
    PENDING_VERIFICATION = "pending_verification"
    VERIFIED = "verified"
    REJECTED = "rejected"
    DISPUTED = "disputed"


@dataclass(eq=False, kw_only=True)
class Asset(Entity):
    """An asset owned (wholly or in part) by the deceased."""

    estate_id: str
    name: str
    asset_type: AssetType
    current_value: Money
    ownership_type: OwnershipType = OwnershipType.SOLE
    ownership_share: Percentage = field(default_factory=Percentage.full)
    encumbrance: Money | None = None
    title_deed_number: str | None = None
    description: str | None = None
    verification_status: AssetVerificationStatus = AssetVerificationStatus.UNVERIFIED
    verified_by: str | None = None
    verified_at: datetime | None = None
    rejection_reason: str | None = None
    is_active: bool = True
    deleted_at: datetime | None = None
    deletion_reason: str | None = None

    # --- Construction Paths ---

    @classmethod
    def create(  # pylint: disable=too-many-arguments
        cls,
        *,
        asset_id: str,
        estate_id: str,
        name: str,
        asset_type: AssetType,
        current_value: Money,
        ownership_type: OwnershipType = OwnershipType.SOLE,
        ownership_share: Percentage | None = None,
        encumbrance: Money | None = None,
        title_deed_number: str | None = None,
        description: str | None = None,
        clock: Clock = SYSTEM_CLOCK,
    ) -> Result[Asset]:
        """Register a new, unverified asset."""
        now = clock.now()
        asset = cls(
            id=asset_id,
            created_at=now,
            updated_at=now,
            clock=clock,
            estate_id=estate_id,
            name=name.strip(),
            asset_type=asset_type,
            current_value=current_value,
            ownership_type=ownership_type,
            ownership_share=ownership_share or Percentage.full(),
            encumbrance=encumbrance,
            title_deed_number=title_deed_number,
            description=description,
        )
        if errors := asset.validation_errors():
            return Result.fail(MESSAGE_SEPARATOR.join(errors))
        return Result.ok(asset)

    def validation_errors(self) -> list[str]:
        errors = super().validation_errors()
        if not self.estate_id.strip():
            errors.append("Asset must be linked to an estate")
        if len(self.name.strip()) < MIN_NAME_LENGTH:
            errors.append("Asset name must be at least 2 characters")
        if self.current_value.is_negative:
            errors.append("Asset value cannot be negative")
        if self.encumbrance is not None:
            if self.encumbrance.currency is not self.current_value.currency:
                errors.append("Encumbrance must be in the asset's currency")
            elif self.encumbrance.is_negative:
                errors.append("Encumbrance cannot be negative")
        if (
            self.ownership_type is OwnershipType.SOLE
            and self.ownership_share != Percentage.full()
        ):
            errors.append("Sole ownership implies a 100% share")
        if self.ownership_share.value == 0:
            errors.append("Ownership share must be greater than 0%")
        return errors

    # --- Queries ---

    @property
    def currency(self) -> Currency:
        return self.current_value.currency

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_verified(self) -> bool:
        return self.verification_status is AssetVerificationStatus.VERIFIED

    @property
    def is_encumbered(self) -> bool:
        return self.encumbrance is not None and self.encumbrance.is_positive

    @property
    def net_value(self) -> Money:
        """The deceased's share of the value, less any encumbrance, floored at zero."""
        share = self.ownership_share.of(self.current_value)
        if self.encumbrance is not None:
            share = share - self.encumbrance
        return share.clamp_at_zero()

    @property
    def passes_by_survivorship(self) -> bool:
        """Joint-tenancy property passes to the surviving owner, not the estate."""
        return self.ownership_type is OwnershipType.JOINT_TENANCY

    @property
    def is_eligible_for_distribution(self) -> bool:
        return (
            self.is_active
            and not self.is_deleted
            and self.is_verified
            and not self.passes_by_survivorship
        )

    @property
    def distributable_value(self) -> Money:
        """Value this asset contributes to the gross estate."""
        if not self.is_eligible_for_distribution:
            return Money.zero(self.currency)
        return self.net_value

    # --- Verification ---

    def request_verification(self) -> Result[None]:
        if self.verification_status not in (
            AssetVerificationStatus.UNVERIFIED,
            AssetVerificationStatus.REJECTED,
        ):
            return Result.fail(
                f"Cannot request verification while {self.verification_status.value}"
            )
        self.verification_status = AssetVerificationStatus.PENDING_VERIFICATION
        self._touch()
        return Result.ok()

    def mark_as_verified(self, verified_by: str) -> Result[None]:
        if self.is_deleted:
            return Result.fail("Cannot verify a deleted asset")
        if self.is_verified:
            return Result.fail("Asset is already verified")
        if not verified_by.strip():
            return Result.fail("Verifier is required")
        if self.asset_type is AssetType.LAND_PARCEL and not self.title_deed_number:
            return Result.fail("Land parcels require a title deed number to be verified")
        self.verification_status = AssetVerificationStatus.VERIFIED
        self.verified_by = verified_by
        self.verified_at = self.clock.now()
        self.rejection_reason = None
        self._touch()
        return Result.ok()

    def reject_verification(self, rejected_by: str, reason: str) -> Result[None]:
        if not reason.strip():
            return Result.fail("A rejection reason is required")
        if self.verification_status is AssetVerificationStatus.REJECTED:
            return Result.fail("Asset verification is already rejected")
        self.verification_status = AssetVerificationStatus.REJECTED
        self.verified_by = rejected_by
        self.verified_at = None
        self.rejection_reason = reason
        self._touch()
        return Result.ok()

    def dispute(self, reason: str) -> Result[None]:
        if not reason.strip():
            return Result.fail("A dispute reason is required")
        if self.verification_status is AssetVerificationStatus.DISPUTED:
            return Result.fail("Asset is already disputed")
        self.verification_status = AssetVerificationStatus.DISPUTED
        self.rejection_reason = reason
        self._touch()
        return Result.ok()

    # --- Valuation ---

    def update_valuation(self, new_value: Money) -> Result[None]:
        if self.is_deleted:
            return Result.fail("Cannot revalue a deleted asset")
        if new_value.currency is not self.currency:
            return Result.fail(
                f"Valuation must be in {self.currency.value}, got {new_value.currency.value}"
            )
        if new_value.is_negative:
            return Result.fail("Asset value cannot be negative")
        self.current_value = new_value
        self._touch()
        return Result.ok()

    def set_encumbrance(self, amount: Money | None) -> Result[None]:
        """Record (or with ``None`` clear) a charge over the asset."""
        if amount is not None:
            if amount.currency is not self.currency:
                return Result.fail("Encumbrance must be in the asset's currency")
            if amount.is_negative:
                return Result.fail("Encumbrance cannot be negative")
        self.encumbrance = amount
        self._touch()
        return Result.ok()

    # --- Lifecycle ---

    def deactivate(self) -> Result[None]:
        if not self.is_active:
            return Result.fail("Asset is already inactive")
        self.is_active = False
        self._touch()
        return Result.ok()

    def reactivate(self) -> Result[None]:
        if self.is_active:
            return Result.fail("Asset is already active")
        self.is_active = True
        self._touch()
        return Result.ok()

    def soft_delete(self, reason: str) -> Result[None]:
        if self.is_deleted:
            return Result.fail("Asset is already deleted")
        if not reason.strip():
            return Result.fail("A deletion reason is required")
        if self.is_encumbered:
            return Result.fail("Cannot delete an encumbered asset")
        self.deleted_at = self.clock.now()
        self.deletion_reason = reason
        self.is_active = False
        self._touch()
        return Result.ok()

    def restore(self) -> Result[None]:
        if not self.is_deleted:
            return Result.fail("Asset is not deleted")
        self.deleted_at = None
        self.deletion_reason = None
        self.is_active = True
        self._touch()
        return Result.ok()
