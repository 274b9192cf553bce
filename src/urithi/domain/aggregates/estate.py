"""Estate aggregate.

The estate owns the deceased's assets, debts, legal dependants and lifetime
gifts, and keeps its cached financial position consistent with them. Every
accepted mutation recalculates the totals synchronously, so after any public
method returns::

    net_estate_value == max(0, gross_value - total_liabilities)

Business-rule violations (a frozen estate, an unknown id, a duplicate child)
come back as failed `Result` values and leave the estate untouched. Broken
structural invariants (a child linked to another estate, a cached net value
that does not match the children) raise `DomainError` subclasses.

Children are changed only through the estate. It keeps its own copy of every
child it admits, and its accessors hand out detached copies, so changing a
returned child has no effect on the estate.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Protocol, TypeVar

from urithi.domain import events
from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.entities import Asset, Debt, GiftInterVivos, LegalDependant
from urithi.domain.errors import EstateInvariantError, EstateLinkageError
from urithi.domain.result import Result
from urithi.domain.statutes import DEFAULT_STATUTE_SCHEDULE, StatuteSchedule
from urithi.domain.value_objects import Currency, Money

from .base import Aggregate

# pylint: disable=too-many-instance-attributes,too-many-public-methods
# pylint: disable=too-many-lines

logger = logging.getLogger(__name__)


class _EstateChild(Protocol):
    id: str
    estate_id: str


C = TypeVar("C", bound=_EstateChild)


def _detached(child: C) -> C:
    # Entity fields are immutable values, so a shallow copy shares no state.
    return copy.copy(child)


def _detached_all(children: Iterable[C]) -> tuple[C, ...]:
    return tuple(_detached(child) for child in children)


@dataclass(frozen=True, slots=True)
class FinancialTotals:
    """Cached money values derived from the estate's children."""

    gross_value: Money
    total_liabilities: Money
    net_estate_value: Money
    hotchpot_adjusted_value: Money | None


@dataclass(frozen=True, slots=True)
class EstateFinancialSummary:  # pylint: disable=too-many-instance-attributes
    """Read-only snapshot of an estate's position, for reporting."""

    estate_id: str
    deceased_name: str
    currency: Currency
    gross_value: Money
    total_liabilities: Money
    net_estate_value: Money
    hotchpot_adjusted_value: Money | None
    is_solvent: bool
    insolvency_shortfall: Money
    asset_count: int
    verified_asset_count: int
    debt_count: int
    outstanding_debt_count: int
    critical_debt_count: int
    dependant_count: int
    annual_dependant_provision: Money
    gift_count: int
    is_frozen: bool
    is_ready_for_distribution: bool
    blockers: tuple[str, ...]


def _amount(money: Money) -> str:
    return str(money.amount)


class Estate(Aggregate):
    """Aggregate root for a deceased person's estate."""

    STREAM_TYPE = "Estate"

    def __init__(  # pylint: disable=too-many-arguments
        self,
        aggregate_id: str,
        *,
        deceased_id: str,
        deceased_name: str,
        date_of_death: date,
        currency: Currency = Currency.KES,
        kra_pin: str | None = None,
        created_at: datetime | None = None,
        clock: Clock = SYSTEM_CLOCK,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
        version: int = 0,
    ) -> None:
        super().__init__(aggregate_id, clock=clock, version=version)
        self.schedule = schedule
        self.deceased_id = deceased_id
        self.deceased_name = deceased_name
        self.date_of_death = date_of_death
        self.currency = currency
        self.kra_pin = kra_pin

        self.is_testate = False
        self.is_intestate = False
        self.will_id: str | None = None

        self.is_frozen = False
        self.freeze_reason: str | None = None
        self.frozen_at: datetime | None = None
        self.frozen_by: str | None = None

        self.gross_value = Money.zero(currency)
        self.total_liabilities = Money.zero(currency)
        self.net_estate_value = Money.zero(currency)
        self.hotchpot_adjusted_value: Money | None = None

        self.metadata: dict[str, Any] = {}
        self.created_at = created_at or clock.now()
        self.updated_at = self.created_at
        self.deleted_at: datetime | None = None
        self.deletion_reason: str | None = None

        self._assets: dict[str, Asset] = {}
        self._debts: dict[str, Debt] = {}
        self._dependants: dict[str, LegalDependant] = {}
        self._gifts: dict[str, GiftInterVivos] = {}

    # --- Construction Paths ---

    @classmethod
    def create(  # pylint: disable=too-many-arguments
        cls,
        *,
        deceased_id: str,
        deceased_name: str,
        date_of_death: date,
        estate_id: str | None = None,
        currency: Currency = Currency.KES,
        kra_pin: str | None = None,
        clock: Clock = SYSTEM_CLOCK,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> Estate:
        """Open an estate for a confirmed death.

        The estate id defaults to the deceased's id.

        Raises:
            EstateInvariantError: If the deceased's id or name is empty, or
                the date of death lies in the future.
        """
        estate = cls(
            estate_id or deceased_id,
            deceased_id=deceased_id,
            deceased_name=deceased_name.strip(),
            date_of_death=date_of_death,
            currency=currency,
            kra_pin=kra_pin,
            clock=clock,
            schedule=schedule,
        )
        if date_of_death > clock.today():
            raise EstateInvariantError(
                estate.aggregate_id, "date of death cannot be in the future"
            )
        estate.validate()
        estate._record(
            events.EstateCreated(
                estate_id=estate.aggregate_id,
                deceased_id=deceased_id,
                deceased_name=estate.deceased_name,
                date_of_death=date_of_death.isoformat(),
                currency=currency.value,
            )
        )
        return estate

    @classmethod
    def reconstitute(  # pylint: disable=too-many-arguments,too-many-locals
        cls,
        *,
        estate_id: str,
        deceased_id: str,
        deceased_name: str,
        date_of_death: date,
        currency: Currency,
        totals: FinancialTotals,
        assets: Iterable[Asset] = (),
        debts: Iterable[Debt] = (),
        dependants: Iterable[LegalDependant] = (),
        gifts: Iterable[GiftInterVivos] = (),
        state: dict[str, Any] | None = None,
        version: int = 0,
        clock: Clock = SYSTEM_CLOCK,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> Estate:
        """Rebuild an estate from persisted state without emitting events.

        *state* carries the remaining scalar attributes (flags, freeze
        details, timestamps, metadata) by attribute name.

        Raises:
            EstateInvariantError: If the stored totals disagree with the children.
            EstateLinkageError: If a child belongs to a different estate.
        """
        estate = cls(
            estate_id,
            deceased_id=deceased_id,
            deceased_name=deceased_name,
            date_of_death=date_of_death,
            currency=currency,
            clock=clock,
            schedule=schedule,
            version=version,
        )
        for name, value in (state or {}).items():
            if name.startswith("_") or not hasattr(estate, name):
                raise EstateInvariantError(estate_id, f"unknown attribute {name!r}")
            setattr(estate, name, value)
        estate._assets = {a.id: _detached(a) for a in assets}
        estate._debts = {d.id: _detached(d) for d in debts}
        estate._dependants = {d.id: _detached(d) for d in dependants}
        estate._gifts = {g.id: _detached(g) for g in gifts}
        estate.gross_value = totals.gross_value
        estate.total_liabilities = totals.total_liabilities
        estate.net_estate_value = totals.net_estate_value
        estate.hotchpot_adjusted_value = totals.hotchpot_adjusted_value
        estate.validate()
        return estate

    # --- Invariants ---

    def validate(self) -> None:
        """Check identity, linkage and cached totals.

        Raises:
            EstateInvariantError: On missing identity data or a net value
                that does not match a recalculation from the children.
            EstateLinkageError: If a child carries another estate's id.
        """
        if not self.deceased_id.strip():
            raise EstateInvariantError(self.aggregate_id, "deceased id is required")
        if not self.deceased_name.strip():
            raise EstateInvariantError(self.aggregate_id, "deceased name is required")
        cached = (self.gross_value, self.total_liabilities, self.net_estate_value)
        if any(value is None for value in cached):
            raise EstateInvariantError(self.aggregate_id, "cached totals are missing")
        if any(value.currency is not self.currency for value in cached):
            raise EstateInvariantError(
                self.aggregate_id, f"cached totals must be in {self.currency.value}"
            )
        for collection in (self._assets, self._debts, self._dependants, self._gifts):
            for child in collection.values():
                self._check_linkage(child)

        expected = self._compute_totals()
        if expected.net_estate_value != self.net_estate_value:
            raise EstateInvariantError(
                self.aggregate_id,
                f"stored net value {self.net_estate_value} does not match "
                f"recalculated {expected.net_estate_value}",
            )

    def _check_linkage(self, child: _EstateChild) -> None:
        if child.estate_id != self.aggregate_id:
            raise EstateLinkageError(self.aggregate_id, child.estate_id, child.id)

    # --- Queries ---

    @property
    def estate_id(self) -> str:
        return self.aggregate_id

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    # Children come back as detached copies; change them through the estate.

    @property
    def assets(self) -> tuple[Asset, ...]:
        return _detached_all(self._assets.values())

    @property
    def debts(self) -> tuple[Debt, ...]:
        return _detached_all(self._debts.values())

    @property
    def legal_dependants(self) -> tuple[LegalDependant, ...]:
        return _detached_all(self._dependants.values())

    @property
    def gifts_inter_vivos(self) -> tuple[GiftInterVivos, ...]:
        return _detached_all(self._gifts.values())

    def get_asset(self, asset_id: str) -> Asset | None:
        asset = self._assets.get(asset_id)
        return _detached(asset) if asset is not None else None

    def get_debt(self, debt_id: str) -> Debt | None:
        debt = self._debts.get(debt_id)
        return _detached(debt) if debt is not None else None

    def get_legal_dependant(self, dependant_id: str) -> LegalDependant | None:
        dependant = self._dependants.get(dependant_id)
        return _detached(dependant) if dependant is not None else None

    def get_gift_inter_vivos(self, gift_id: str) -> GiftInterVivos | None:
        gift = self._gifts.get(gift_id)
        return _detached(gift) if gift is not None else None

    def is_solvent(self) -> bool:
        return self.gross_value >= self.total_liabilities

    def get_insolvency_shortfall(self) -> Money:
        """Amount by which liabilities exceed gross value (zero when solvent)."""
        return (self.total_liabilities - self.gross_value).clamp_at_zero()

    def solvency_ratio(self) -> Decimal | None:
        """Gross value per unit of liability; None when nothing is owed."""
        if self.total_liabilities.is_zero:
            return None
        return self.gross_value.amount / self.total_liabilities.amount

    def get_critical_debts(self) -> list[Debt]:
        """Outstanding debts that must be paid before any distribution."""
        return [_detached(d) for d in self._debts.values() if d.blocks_distribution()]

    def can_cover_critical_debts(self) -> bool:
        critical = Money.sum(
            (d.outstanding_balance for d in self.get_critical_debts()), self.currency
        )
        return self.gross_value >= critical

    def get_verified_assets(self) -> list[Asset]:
        return [_detached(a) for a in self._live_assets() if a.is_verified]

    def get_unverified_assets(self) -> list[Asset]:
        return [_detached(a) for a in self._live_assets() if not a.is_verified]

    def get_debts_by_priority(self, outstanding_only: bool = False) -> list[Debt]:
        """Debts in Section 45 payment order; ties keep insertion order."""
        debts = [d for d in self._debts.values() if d.is_outstanding or not outstanding_only]
        return [_detached(d) for d in sorted(debts, key=lambda d: d.priority)]

    def is_ready_for_distribution(self) -> bool:
        return not self.get_distribution_blockers()

    def get_distribution_blockers(self) -> list[str]:
        """Explain, in order, everything preventing distribution."""
        blockers: list[str] = []
        if self.is_deleted:
            blockers.append("Estate has been deleted")
        if self.is_frozen:
            blockers.append(f"Estate is frozen: {self.freeze_reason}")
        if not self.is_solvent():
            blockers.append(
                f"Estate is insolvent with a shortfall of {self.get_insolvency_shortfall()}"
            )
        if critical := self.get_critical_debts():
            blockers.append(
                f"{len(critical)} critical debt(s) must be settled before distribution"
            )
        if not self.get_verified_assets():
            blockers.append(
                f"No verified assets ({len(self.get_unverified_assets())} "
                "asset(s) awaiting verification)"
            )
        return blockers

    def total_annual_dependant_provision(self) -> Money:
        """Yearly needs of all verified dependants."""
        return Money.sum(
            (d.annual_provision for d in self._dependants.values() if d.is_verified),
            self.currency,
        )

    def dependant_provision_exceeds_estate(self) -> bool:
        return self.total_annual_dependant_provision() > self.net_estate_value

    def summary(self) -> EstateFinancialSummary:
        blockers = self.get_distribution_blockers()
        return EstateFinancialSummary(
            estate_id=self.aggregate_id,
            deceased_name=self.deceased_name,
            currency=self.currency,
            gross_value=self.gross_value,
            total_liabilities=self.total_liabilities,
            net_estate_value=self.net_estate_value,
            hotchpot_adjusted_value=self.hotchpot_adjusted_value,
            is_solvent=self.is_solvent(),
            insolvency_shortfall=self.get_insolvency_shortfall(),
            asset_count=len(self._live_assets()),
            verified_asset_count=len(self.get_verified_assets()),
            debt_count=len(self._debts),
            outstanding_debt_count=sum(d.is_outstanding for d in self._debts.values()),
            critical_debt_count=len(self.get_critical_debts()),
            dependant_count=len(self._dependants),
            annual_dependant_provision=self.total_annual_dependant_provision(),
            gift_count=len(self._gifts),
            is_frozen=self.is_frozen,
            is_ready_for_distribution=not blockers,
            blockers=tuple(blockers),
        )

    def _live_assets(self) -> list[Asset]:
        return [a for a in self._assets.values() if a.is_active and not a.is_deleted]

    # --- Financial position ---

    def _compute_totals(self) -> FinancialTotals:
        gross = Money.sum(
            (a.distributable_value for a in self._live_assets()), self.currency
        )
        liabilities = Money.sum(
            (d.outstanding_balance for d in self._debts.values() if d.is_outstanding),
            self.currency,
        )
        hotchpot = None
        if self._gifts:
            hotchpot = gross + Money.sum(
                (g.hotchpot_value for g in self._gifts.values() if g.counts_toward_hotchpot),
                self.currency,
            )
        return FinancialTotals(
            gross_value=gross,
            total_liabilities=liabilities,
            net_estate_value=(gross - liabilities).clamp_at_zero(),
            hotchpot_adjusted_value=hotchpot,
        )

    @property
    def totals(self) -> FinancialTotals:
        return FinancialTotals(
            gross_value=self.gross_value,
            total_liabilities=self.total_liabilities,
            net_estate_value=self.net_estate_value,
            hotchpot_adjusted_value=self.hotchpot_adjusted_value,
        )

    def recalculate_financials(self) -> FinancialTotals:
        """Recompute the cached totals from the children and record the result."""
        was_solvent = self.is_solvent()
        totals = self._compute_totals()
        self.gross_value = totals.gross_value
        self.total_liabilities = totals.total_liabilities
        self.net_estate_value = totals.net_estate_value
        self.hotchpot_adjusted_value = totals.hotchpot_adjusted_value
        self.updated_at = self.clock.now()
        logger.debug(
            "Estate %s recalculated: gross=%s liabilities=%s net=%s",
            self.aggregate_id,
            totals.gross_value,
            totals.total_liabilities,
            totals.net_estate_value,
        )
        self._record(
            events.EstateValueRecalculated(
                estate_id=self.aggregate_id,
                gross_value=_amount(totals.gross_value),
                total_liabilities=_amount(totals.total_liabilities),
                net_value=_amount(totals.net_estate_value),
                hotchpot_adjusted_value=(
                    _amount(totals.hotchpot_adjusted_value)
                    if totals.hotchpot_adjusted_value is not None
                    else None
                ),
                currency=self.currency.value,
            )
        )
        if was_solvent and not self.is_solvent():
            logger.warning(
                "Estate %s became insolvent (shortfall %s)",
                self.aggregate_id,
                self.get_insolvency_shortfall(),
            )
            self._record(
                events.EstateInsolvencyDetected(
                    estate_id=self.aggregate_id,
                    gross_value=_amount(self.gross_value),
                    total_liabilities=_amount(self.total_liabilities),
                    shortfall=_amount(self.get_insolvency_shortfall()),
                    currency=self.currency.value,
                )
            )
        return totals

    # --- Guards ---

    def _mutation_blocker(self) -> str | None:
        if self.is_deleted:
            return f"Estate {self.aggregate_id} has been deleted"
        if self.is_frozen:
            return f"Estate {self.aggregate_id} is frozen: {self.freeze_reason}"
        return None

    def _admit(self, child: C, collection: dict[str, C], label: str) -> str | None:
        """Common checks before adding *child*; raises on a foreign estate id."""
        if error := self._mutation_blocker():
            return error
        self._check_linkage(child)
        if child.id in collection:
            return f"{label} {child.id} already exists in estate {self.aggregate_id}"
        return None

    def _missing(self, label: str, entity_id: str) -> Result[None]:
        return Result.fail(f"{label} {entity_id} not found in estate {self.aggregate_id}")

    def _currency_error(self, label: str, currency: Currency) -> str | None:
        if currency is not self.currency:
            return (
                f"{label} currency {currency.value} does not match "
                f"estate currency {self.currency.value}"
            )
        return None

    def _update_child(  # pylint: disable=too-many-arguments
        self,
        collection: dict[str, C],
        label: str,
        child_id: str,
        change: Callable[[C], Result[None]],
        event: Callable[[C], events.EstateEvent],
    ) -> Result[None]:
        """Apply *change* to one child, then record *event* and recalculate."""
        if error := self._mutation_blocker():
            return Result.fail(error)
        if (child := collection.get(child_id)) is None:
            return self._missing(label, child_id)
        if (result := change(child)).is_failure:
            return result
        self._record(event(child))
        self.recalculate_financials()
        return Result.ok()

    def _securing_debt_error(self, asset_id: str) -> str | None:
        securing = [
            d.id
            for d in self._debts.values()
            if d.secured_asset_id == asset_id and d.is_outstanding
        ]
        if securing:
            return f"Asset {asset_id} secures outstanding debt(s): {', '.join(securing)}"
        return None

    # --- Assets ---

    def add_asset(self, asset: Asset) -> Result[None]:
        if error := self._admit(asset, self._assets, "Asset") or self._currency_error(
            "Asset", asset.currency
        ):
            return Result.fail(error)
        self._assets[asset.id] = _detached(asset)
        self._record(
            events.AssetAddedToEstate(
                estate_id=self.aggregate_id,
                asset_id=asset.id,
                asset_type=asset.asset_type.value,
                name=asset.name,
                value=_amount(asset.current_value),
                currency=asset.currency.value,
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def remove_asset(self, asset_id: str) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if asset_id not in self._assets:
            return self._missing("Asset", asset_id)
        if error := self._securing_debt_error(asset_id):
            return Result.fail(error)
        del self._assets[asset_id]
        self._record(
            events.AssetRemovedFromEstate(estate_id=self.aggregate_id, asset_id=asset_id)
        )
        self.recalculate_financials()
        return Result.ok()

    def verify_asset(self, asset_id: str, verified_by: str) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if (asset := self._assets.get(asset_id)) is None:
            return self._missing("Asset", asset_id)
        if (result := asset.mark_as_verified(verified_by)).is_failure:
            return result
        self._record(
            events.AssetVerified(
                estate_id=self.aggregate_id, asset_id=asset_id, verified_by=verified_by
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def reject_asset_verification(
        self, asset_id: str, rejected_by: str, reason: str
    ) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if (asset := self._assets.get(asset_id)) is None:
            return self._missing("Asset", asset_id)
        if (result := asset.reject_verification(rejected_by, reason)).is_failure:
            return result
        self._record(
            events.AssetVerificationRejected(
                estate_id=self.aggregate_id,
                asset_id=asset_id,
                rejected_by=rejected_by,
                reason=reason,
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def revalue_asset(self, asset_id: str, new_value: Money) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if (asset := self._assets.get(asset_id)) is None:
            return self._missing("Asset", asset_id)
        previous = asset.current_value
        if (result := asset.update_valuation(new_value)).is_failure:
            return result
        self._record(
            events.AssetRevalued(
                estate_id=self.aggregate_id,
                asset_id=asset_id,
                previous_value=_amount(previous),
                new_value=_amount(new_value),
                currency=new_value.currency.value,
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def dispute_asset(self, asset_id: str, reason: str) -> Result[None]:
        """Contest an asset; it stops counting toward the gross value."""
        return self._update_child(
            self._assets,
            "Asset",
            asset_id,
            lambda asset: asset.dispute(reason),
            lambda asset: events.AssetDisputed(
                estate_id=self.aggregate_id, asset_id=asset_id, reason=reason.strip()
            ),
        )

    def set_asset_encumbrance(self, asset_id: str, amount: Money | None) -> Result[None]:
        """Record a charge over an asset, or clear it with ``None``."""
        if amount is not None and (
            error := self._currency_error("Encumbrance", amount.currency)
        ):
            return Result.fail(error)
        return self._update_child(
            self._assets,
            "Asset",
            asset_id,
            lambda asset: asset.set_encumbrance(amount),
            lambda asset: events.AssetEncumbranceSet(
                estate_id=self.aggregate_id,
                asset_id=asset_id,
                amount=_amount(amount) if amount is not None else None,
                currency=self.currency.value,
            ),
        )

    def deactivate_asset(self, asset_id: str) -> Result[None]:
        return self._update_child(
            self._assets,
            "Asset",
            asset_id,
            lambda asset: asset.deactivate(),
            lambda asset: events.AssetDeactivated(
                estate_id=self.aggregate_id, asset_id=asset_id
            ),
        )

    def reactivate_asset(self, asset_id: str) -> Result[None]:
        return self._update_child(
            self._assets,
            "Asset",
            asset_id,
            lambda asset: asset.reactivate(),
            lambda asset: events.AssetReactivated(
                estate_id=self.aggregate_id, asset_id=asset_id
            ),
        )

    def soft_delete_asset(self, asset_id: str, reason: str) -> Result[None]:
        """Retire an asset while keeping its record.

        Refused while the asset secures an outstanding debt.
        """

        def change(asset: Asset) -> Result[None]:
            if error := self._securing_debt_error(asset_id):
                return Result.fail(error)
            return asset.soft_delete(reason)

        return self._update_child(
            self._assets,
            "Asset",
            asset_id,
            change,
            lambda asset: events.AssetDeleted(
                estate_id=self.aggregate_id, asset_id=asset_id, reason=reason.strip()
            ),
        )

    def restore_asset(self, asset_id: str) -> Result[None]:
        return self._update_child(
            self._assets,
            "Asset",
            asset_id,
            lambda asset: asset.restore(),
            lambda asset: events.AssetRestored(
                estate_id=self.aggregate_id, asset_id=asset_id
            ),
        )

    # --- Debts ---

    def add_debt(self, debt: Debt) -> Result[None]:
        if error := self._admit(debt, self._debts, "Debt") or self._currency_error(
            "Debt", debt.currency
        ):
            return Result.fail(error)
        if debt.secured_asset_id is not None and debt.secured_asset_id not in self._assets:
            return Result.fail(
                f"Secured asset {debt.secured_asset_id} is not part of "
                f"estate {self.aggregate_id}"
            )
        self._debts[debt.id] = _detached(debt)
        self._record(
            events.DebtAddedToEstate(
                estate_id=self.aggregate_id,
                debt_id=debt.id,
                debt_type=debt.debt_type.value,
                creditor_name=debt.creditor_name,
                amount=_amount(debt.outstanding_balance),
                currency=debt.currency.value,
                tier=debt.tier.value,
                priority_rank=debt.priority.rank,
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def remove_debt(self, debt_id: str) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if debt_id not in self._debts:
            return self._missing("Debt", debt_id)
        del self._debts[debt_id]
        self._record(
            events.DebtRemovedFromEstate(estate_id=self.aggregate_id, debt_id=debt_id)
        )
        self.recalculate_financials()
        return Result.ok()

    def record_debt_payment(self, debt_id: str, amount: Money) -> Result[None]:
        """Pay down a debt, honouring the Section 45 payment order.

        A payment is refused while any debt of strictly higher priority is
        still outstanding.
        """
        if error := self._mutation_blocker():
            return Result.fail(error)
        if (debt := self._debts.get(debt_id)) is None:
            return self._missing("Debt", debt_id)
        senior = [
            d
            for d in self._debts.values()
            if d.is_outstanding and d.priority.outranks(debt.priority)
        ]
        if senior:
            return Result.fail(
                f"Debt {debt_id} ({debt.tier.value}) cannot be paid before "
                f"{len(senior)} higher-priority debt(s) are cleared"
            )
        if (result := debt.record_payment(amount)).is_failure:
            return result
        self._record(
            events.DebtPaymentRecorded(
                estate_id=self.aggregate_id,
                debt_id=debt_id,
                amount=_amount(amount),
                outstanding_balance=_amount(debt.outstanding_balance),
                currency=amount.currency.value,
                settled=debt.is_settled,
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def write_off_debt(self, debt_id: str, reason: str) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if (debt := self._debts.get(debt_id)) is None:
            return self._missing("Debt", debt_id)
        forgiven = debt.outstanding_balance
        if (result := debt.write_off(reason)).is_failure:
            return result
        self._record(
            events.DebtWrittenOff(
                estate_id=self.aggregate_id,
                debt_id=debt_id,
                reason=reason.strip(),
                amount=_amount(forgiven),
                currency=forgiven.currency.value,
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def check_limitation_periods(self, as_of: date | None = None) -> Result[list[str]]:
        """Mark debts whose limitation period has run as statute-barred.

        Returns:
            The ids of debts that became statute-barred on this call.
        """
        if error := self._mutation_blocker():
            return Result.fail(error)
        barred: list[str] = []
        for debt in self._debts.values():
            if debt.is_statute_barred or not debt.check_statute_barred(as_of, self.schedule):
                continue
            barred.append(debt.id)
            expiry = debt.limitation_expiry(self.schedule)
            self._record(
                events.DebtStatuteBarred(
                    estate_id=self.aggregate_id,
                    debt_id=debt.id,
                    barred_amount=_amount(debt.outstanding_balance),
                    currency=debt.currency.value,
                    limitation_expiry=expiry.isoformat() if expiry else "",
                )
            )
        if barred:
            self.recalculate_financials()
        return Result.ok(barred)

    def dispute_debt(self, debt_id: str, reason: str) -> Result[None]:
        """Contest a debt; it stays a liability but cannot be paid meanwhile."""
        return self._update_child(
            self._debts,
            "Debt",
            debt_id,
            lambda debt: debt.dispute(reason),
            lambda debt: events.DebtDisputed(
                estate_id=self.aggregate_id, debt_id=debt_id, reason=reason.strip()
            ),
        )

    def resolve_debt_dispute(
        self, debt_id: str, adjusted_balance: Money | None = None
    ) -> Result[None]:
        """Close a dispute, optionally with an agreed balance."""
        if adjusted_balance is not None and (
            error := self._currency_error("Adjusted balance", adjusted_balance.currency)
        ):
            return Result.fail(error)
        return self._update_child(
            self._debts,
            "Debt",
            debt_id,
            lambda debt: debt.resolve_dispute(adjusted_balance),
            lambda debt: events.DebtDisputeResolved(
                estate_id=self.aggregate_id,
                debt_id=debt_id,
                outstanding_balance=_amount(debt.outstanding_balance),
                currency=debt.currency.value,
                status=debt.status.value,
            ),
        )

    # --- Legal dependants ---

    def add_legal_dependant(self, dependant: LegalDependant) -> Result[None]:
        if error := self._admit(
            dependant, self._dependants, "Dependant"
        ) or self._currency_error("Dependant needs", dependant.monthly_needs.currency):
            return Result.fail(error)
        self._dependants[dependant.id] = _detached(dependant)
        self._record(
            events.LegalDependantAdded(
                estate_id=self.aggregate_id,
                dependant_id=dependant.id,
                person_id=dependant.person_id,
                relationship=dependant.relationship.value,
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def remove_legal_dependant(self, dependant_id: str) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if dependant_id not in self._dependants:
            return self._missing("Dependant", dependant_id)
        del self._dependants[dependant_id]
        self._record(
            events.LegalDependantRemoved(
                estate_id=self.aggregate_id, dependant_id=dependant_id
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def verify_dependant(self, dependant_id: str, verified_by: str) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if (dependant := self._dependants.get(dependant_id)) is None:
            return self._missing("Dependant", dependant_id)
        if (result := dependant.verify(verified_by)).is_failure:
            return result
        self._record(
            events.LegalDependantVerified(
                estate_id=self.aggregate_id,
                dependant_id=dependant_id,
                verified_by=verified_by,
            )
        )
        self.updated_at = self.clock.now()
        return Result.ok()

    # --- Gifts inter vivos ---

    def add_gift_inter_vivos(self, gift: GiftInterVivos) -> Result[None]:
        if error := self._admit(gift, self._gifts, "Gift") or self._currency_error(
            "Gift", gift.value_at_gift_time.currency
        ):
            return Result.fail(error)
        if gift.date_of_gift > self.date_of_death:
            return Result.fail("A gift inter vivos must be made before the date of death")
        self._gifts[gift.id] = _detached(gift)
        self._record(
            events.GiftInterVivosAdded(
                estate_id=self.aggregate_id,
                gift_id=gift.id,
                recipient_id=gift.recipient_id,
                value=_amount(gift.value_at_gift_time),
                currency=gift.value_at_gift_time.currency.value,
                is_subject_to_hotchpot=gift.is_subject_to_hotchpot,
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def remove_gift_inter_vivos(self, gift_id: str) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if gift_id not in self._gifts:
            return self._missing("Gift", gift_id)
        del self._gifts[gift_id]
        self._record(
            events.GiftInterVivosRemoved(estate_id=self.aggregate_id, gift_id=gift_id)
        )
        self.recalculate_financials()
        return Result.ok()

    def verify_gift(self, gift_id: str, verified_by: str) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if (gift := self._gifts.get(gift_id)) is None:
            return self._missing("Gift", gift_id)
        if (result := gift.verify(verified_by)).is_failure:
            return result
        self._record(
            events.GiftInterVivosVerified(
                estate_id=self.aggregate_id, gift_id=gift_id, verified_by=verified_by
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def adjust_gift_for_inflation(
        self, gift_id: str, annual_rate: Decimal | None = None
    ) -> Result[None]:
        """Compound a gift's value from its date to the date of death."""
        if error := self._mutation_blocker():
            return Result.fail(error)
        if (gift := self._gifts.get(gift_id)) is None:
            return self._missing("Gift", gift_id)
        rate = annual_rate if annual_rate is not None else self.schedule.hotchpot_inflation_rate
        adjusted = gift.calculate_inflation_adjusted_value(self.date_of_death, rate)
        if adjusted.is_failure or adjusted.value is None:
            return Result.fail(adjusted.error or "Inflation adjustment failed")
        self._record(
            events.GiftInflationAdjusted(
                estate_id=self.aggregate_id,
                gift_id=gift_id,
                adjusted_value=_amount(adjusted.value),
                currency=adjusted.value.currency.value,
            )
        )
        self.recalculate_financials()
        return Result.ok()

    def exclude_gift_from_hotchpot(self, gift_id: str, reason: str) -> Result[None]:
        """Stop a gift counting toward the hotchpot value (e.g. on court direction)."""
        return self._update_child(
            self._gifts,
            "Gift",
            gift_id,
            lambda gift: gift.exclude_from_hotchpot(reason),
            lambda gift: events.GiftExcludedFromHotchpot(
                estate_id=self.aggregate_id, gift_id=gift_id, reason=reason.strip()
            ),
        )

    def include_gift_in_hotchpot(self, gift_id: str) -> Result[None]:
        return self._update_child(
            self._gifts,
            "Gift",
            gift_id,
            lambda gift: gift.include_in_hotchpot(),
            lambda gift: events.GiftIncludedInHotchpot(
                estate_id=self.aggregate_id, gift_id=gift_id
            ),
        )

    # --- Freezing ---

    def freeze(self, reason: str, frozen_by: str | None = None) -> Result[None]:
        if self.is_deleted:
            return Result.fail(f"Estate {self.aggregate_id} has been deleted")
        if not reason.strip():
            return Result.fail("A reason is required to freeze an estate")
        if self.is_frozen:
            return Result.fail(f"Estate {self.aggregate_id} is already frozen")
        now = self.clock.now()
        self.is_frozen = True
        self.freeze_reason = reason.strip()
        self.frozen_at = now
        self.frozen_by = frozen_by
        self.updated_at = now
        logger.info("Estate %s frozen: %s", self.aggregate_id, self.freeze_reason)
        self._record(
            events.EstateFrozen(
                estate_id=self.aggregate_id,
                reason=self.freeze_reason,
                frozen_by=frozen_by,
                frozen_at=now.isoformat(),
            )
        )
        return Result.ok()

    def unfreeze(self, reason: str, unfrozen_by: str | None = None) -> Result[None]:
        if not reason.strip():
            return Result.fail("A reason is required to unfreeze an estate")
        if not self.is_frozen:
            return Result.fail(f"Estate {self.aggregate_id} is not frozen")
        now = self.clock.now()
        previous_reason = self.freeze_reason
        self.metadata.setdefault("freeze_history", []).append(
            {
                "freeze_reason": previous_reason,
                "frozen_at": self.frozen_at.isoformat() if self.frozen_at else None,
                "frozen_by": self.frozen_by,
                "unfreeze_reason": reason.strip(),
                "unfrozen_at": now.isoformat(),
                "unfrozen_by": unfrozen_by,
            }
        )
        self.metadata["last_freeze_reason"] = previous_reason
        self.is_frozen = False
        self.freeze_reason = None
        self.frozen_at = None
        self.frozen_by = None
        self.updated_at = now
        logger.info("Estate %s unfrozen: %s", self.aggregate_id, reason.strip())
        self._record(
            events.EstateUnfrozen(
                estate_id=self.aggregate_id,
                reason=reason.strip(),
                unfrozen_by=unfrozen_by,
                previous_freeze_reason=previous_reason,
            )
        )
        return Result.ok()

    # --- Testacy ---

    def mark_as_testate(self, will_id: str | None = None) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if self.is_testate:
            return Result.fail(f"Estate {self.aggregate_id} is already testate")
        self.is_testate = True
        self.is_intestate = False
        self.will_id = will_id
        self.updated_at = self.clock.now()
        self._record(
            events.EstateMarkedTestate(estate_id=self.aggregate_id, will_id=will_id)
        )
        return Result.ok()

    def mark_as_intestate(self) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if self.is_intestate:
            return Result.fail(f"Estate {self.aggregate_id} is already intestate")
        self.is_intestate = True
        self.is_testate = False
        self.will_id = None
        self.updated_at = self.clock.now()
        self._record(events.EstateMarkedIntestate(estate_id=self.aggregate_id))
        return Result.ok()

    # --- Lifecycle ---

    def soft_delete(self, reason: str) -> Result[None]:
        if error := self._mutation_blocker():
            return Result.fail(error)
        if not reason.strip():
            return Result.fail("A reason is required to delete an estate")
        self.deleted_at = self.clock.now()
        self.deletion_reason = reason.strip()
        self.updated_at = self.deleted_at
        self._record(
            events.EstateDeleted(estate_id=self.aggregate_id, reason=reason.strip())
        )
        return Result.ok()
