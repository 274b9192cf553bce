"""Entities owned by the Estate and Will aggregates.

They are re-exported here to provide a single, convenient import path.
"""

from .asset import Asset, AssetType, AssetVerificationStatus, OwnershipType
from .base import Entity
from .bequest import Bequest, BequestType
from .debt import Debt, DebtStatus, DebtType, default_tier_for
from .gift_inter_vivos import GiftInterVivos
from .legal_dependant import DependantRelationship, LegalDependant
from .testamentary_executor import (
    CompensationType,
    ExecutorAction,
    ExecutorAppointmentType,
    ExecutorBond,
    ExecutorCompensation,
    ExecutorEligibilityStatus,
    ExecutorPowers,
    ExecutorStatus,
    TestamentaryExecutor,
)
from .will_witness import (
    InvitationMethod,
    WillWitness,
    WitnessEligibilityStatus,
    WitnessStatus,
    WitnessType,
)

__all__ = [
    "Asset",
    "AssetType",
    "AssetVerificationStatus",
    "Bequest",
    "BequestType",
    "CompensationType",
    "Debt",
    "DebtStatus",
    "DebtType",
    "DependantRelationship",
    "Entity",
    "ExecutorAction",
    "ExecutorAppointmentType",
    "ExecutorBond",
    "ExecutorCompensation",
    "ExecutorEligibilityStatus",
    "ExecutorPowers",
    "ExecutorStatus",
    "GiftInterVivos",
    "InvitationMethod",
    "LegalDependant",
    "OwnershipType",
    "TestamentaryExecutor",
    "WillWitness",
    "WitnessEligibilityStatus",
    "WitnessStatus",
    "WitnessType",
    "default_tier_for",
]
