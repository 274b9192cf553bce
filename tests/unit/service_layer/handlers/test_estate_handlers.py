"""Estate command handlers, driven through the bootstrapped message bus.

Scope:
    - Each command loads the estate, applies one change and saves it with
      its events in one transaction.
    - Rejected commands leave storage untouched and publish nothing.
    - Committed events reach the publisher once, in order.
"""

import logging
from datetime import date
from decimal import Decimal

import pytest

from tests.helpers.builders import DATE_OF_DEATH, ESTATE_ID
from tests.helpers.logs import assert_log_message
from urithi.domain.entities import AssetType, DebtType, DependantRelationship
from urithi.domain.errors import EstateInvariantError
from urithi.service_layer import commands, queries
from urithi.service_layer.repositories import AggregateNotFoundError

# pylint: disable=magic-value-comparison,too-few-public-methods


def open_estate(bus) -> str:
    return bus.handle(
        commands.CreateEstate(
            deceased_id=ESTATE_ID,
            deceased_name="Wanjiru Kamau",
            date_of_death=DATE_OF_DEATH,
        )
    ).unwrap()


def add_home(bus, value="1000000") -> str:
    asset_id = bus.handle(
        commands.AddAsset(
            estate_id=ESTATE_ID,
            name="Family home, Kiambu",
            asset_type=AssetType.PROPERTY,
            value=Decimal(value),
        )
    ).unwrap()
    bus.handle(
        commands.VerifyAsset(estate_id=ESTATE_ID, asset_id=asset_id, verified_by="valuer-1")
    ).unwrap()
    return asset_id


def add_debt(bus, debt_type=DebtType.PERSONAL_LOAN, amount="100000", **extra) -> str:
    return bus.handle(
        commands.AddDebt(
            estate_id=ESTATE_ID,
            debt_type=debt_type,
            creditor_name="Equity Bank",
            description="Balance at date of death",
            principal_amount=Decimal(amount),
            **extra,
        )
    ).unwrap()


def summary(app):
    return queries.estate_summary(ESTATE_ID, app.uow, app.clock, app.schedule)


class TestCreateEstate:
    """Tests for opening an estate."""

    @staticmethod
    def test_creates_and_publishes(bus, uow, publisher, caplog):
        """The estate is stored and `EstateCreated` is published."""
        with caplog.at_level(logging.INFO):
            assert open_estate(bus) == ESTATE_ID
        assert uow.committed
        assert uow.snapshots.load(ESTATE_ID).version == 1
        assert publisher.event_types == ["EstateCreated"]
        assert_log_message(
            caplog.records, f"Opened estate {ESTATE_ID} for Wanjiru Kamau", "INFO"
        )

    @staticmethod
    def test_duplicate_rejected(bus, publisher):
        """An estate is opened once."""
        open_estate(bus)
        result = bus.handle(
            commands.CreateEstate(
                deceased_id=ESTATE_ID, deceased_name="Someone", date_of_death=DATE_OF_DEATH
            )
        )
        assert result.error == f"Estate {ESTATE_ID} already exists"
        assert publisher.event_types == ["EstateCreated"]

    @staticmethod
    def test_unknown_currency(bus):
        """Only supported currencies are accepted."""
        result = bus.handle(
            commands.CreateEstate(
                deceased_id=ESTATE_ID,
                deceased_name="Wanjiru Kamau",
                date_of_death=DATE_OF_DEATH,
                currency="XYZ",
            )
        )
        assert result.error == "Unsupported currency 'XYZ'"

    @staticmethod
    def test_future_death_raises(bus):
        """Broken invariants propagate as exceptions."""
        with pytest.raises(EstateInvariantError):
            bus.handle(
                commands.CreateEstate(
                    deceased_id=ESTATE_ID,
                    deceased_name="Wanjiru Kamau",
                    date_of_death=date(2030, 1, 1),
                )
            )

    @staticmethod
    def test_unknown_estate_raises(bus):
        """Commands for an unknown estate raise `AggregateNotFoundError`."""
        with pytest.raises(AggregateNotFoundError):
            bus.handle(commands.MarkEstateIntestate(estate_id="nobody"))


class TestAssetsAndDebts:
    """Tests for asset and debt commands."""

    @staticmethod
    def test_asset_ids_come_from_generator(bus):
        """New children get ids from the entity id generator."""
        open_estate(bus)
        assert add_home(bus) == "E00001"

    @staticmethod
    def test_financial_flow(app, bus, publisher):
        """Assets, debts and payments keep the summary current."""
        open_estate(bus)
        add_home(bus)
        funeral = add_debt(bus, DebtType.FUNERAL_EXPENSE, "80000")
        loan = add_debt(bus, amount="50000")

        early = bus.handle(
            commands.RecordDebtPayment(estate_id=ESTATE_ID, debt_id=loan, amount=Decimal(10))
        )
        assert "cannot be paid before 1 higher-priority debt(s)" in early.error

        bus.handle(
            commands.RecordDebtPayment(
                estate_id=ESTATE_ID, debt_id=funeral, amount=Decimal(80000)
            )
        ).unwrap()

        result = summary(app)
        assert result.gross_value.amount == Decimal(1_000_000)
        assert result.total_liabilities.amount == Decimal(50_000)
        assert result.net_estate_value.amount == Decimal(950_000)
        assert result.is_ready_for_distribution
        assert publisher.event_types.count("DebtPaymentRecorded") == 1

    @staticmethod
    def test_asset_in_other_currency(bus):
        """The domain rejects a currency mismatch."""
        open_estate(bus)
        result = bus.handle(
            commands.AddAsset(
                estate_id=ESTATE_ID,
                name="Savings",
                asset_type=AssetType.BANK_ACCOUNT,
                value=Decimal(100),
                currency="USD",
            )
        )
        assert result.error == "Asset currency USD does not match estate currency KES"

    @staticmethod
    def test_rejected_command_changes_nothing(bus, uow, publisher, caplog):
        """A failed change is neither saved nor published."""
        open_estate(bus)
        with caplog.at_level(logging.DEBUG):
            result = bus.handle(
                commands.RemoveAsset(estate_id=ESTATE_ID, asset_id="missing")
            )
        assert result.is_failure
        assert uow.snapshots.load(ESTATE_ID).version == 1
        assert publisher.event_types == ["EstateCreated"]
        assert_log_message(
            caplog.records,
            f"Estate {ESTATE_ID}: change rejected: {result.error}",
            "DEBUG",
        )

    @staticmethod
    def test_limitation_periods(bus, publisher):
        """Time-barred debts are reported by id and published."""
        open_estate(bus)
        add_home(bus)
        old = add_debt(bus, incurred_date=date(2010, 5, 1))
        add_debt(bus, incurred_date=date(2024, 5, 1))
        result = bus.handle(
            commands.CheckLimitationPeriods(estate_id=ESTATE_ID, as_of=date(2025, 6, 1))
        )
        assert result.unwrap() == [old]
        assert publisher.event_types.count("DebtStatuteBarred") == 1


class TestChildLifecycle:
    """Tests for disputes, encumbrances and soft deletion through the bus."""

    @staticmethod
    def test_asset_lifecycle_updates_summary(app, bus, publisher):
        """Each asset change is saved with its recalculation."""
        open_estate(bus)
        home = add_home(bus)
        bus.handle(
            commands.SetAssetEncumbrance(
                estate_id=ESTATE_ID, asset_id=home, amount=Decimal(300_000)
            )
        ).unwrap()
        assert summary(app).gross_value.amount == Decimal(700_000)

        refused = bus.handle(
            commands.SoftDeleteAsset(
                estate_id=ESTATE_ID, asset_id=home, reason="Sold before death"
            )
        )
        assert refused.error == "Cannot delete an encumbered asset"

        bus.handle(
            commands.SetAssetEncumbrance(estate_id=ESTATE_ID, asset_id=home, amount=None)
        ).unwrap()
        bus.handle(
            commands.DisputeAsset(
                estate_id=ESTATE_ID, asset_id=home, reason="Title held by a cousin"
            )
        ).unwrap()
        assert summary(app).gross_value.amount == Decimal(0)
        assert publisher.event_types[-2:] == ["AssetDisputed", "EstateValueRecalculated"]
        assert publisher.event_types.count("AssetEncumbranceSet") == 2

    @staticmethod
    def test_soft_delete_and_restore(app, bus):
        """A deleted asset drops out of the summary until it is restored."""
        open_estate(bus)
        home = add_home(bus)
        bus.handle(
            commands.SoftDeleteAsset(
                estate_id=ESTATE_ID, asset_id=home, reason="Sold before death"
            )
        ).unwrap()
        deleted = summary(app)
        assert deleted.asset_count == 0
        assert deleted.gross_value.amount == Decimal(0)

        bus.handle(commands.RestoreAsset(estate_id=ESTATE_ID, asset_id=home)).unwrap()
        restored = summary(app)
        assert restored.asset_count == 1
        assert restored.gross_value.amount == Decimal(1_000_000)

    @staticmethod
    def test_debt_dispute_resolution(app, bus, publisher):
        """An agreed balance becomes the liability."""
        open_estate(bus)
        add_home(bus)
        loan = add_debt(bus)
        bus.handle(
            commands.DisputeDebt(
                estate_id=ESTATE_ID, debt_id=loan, reason="Amount was never agreed"
            )
        ).unwrap()
        bus.handle(
            commands.ResolveDebtDispute(
                estate_id=ESTATE_ID, debt_id=loan, adjusted_balance=Decimal(40_000)
            )
        ).unwrap()
        assert summary(app).total_liabilities.amount == Decimal(40_000)
        assert "DebtDisputeResolved" in publisher.event_types

    @staticmethod
    def test_gift_excluded_from_hotchpot(app, bus):
        """An excluded gift no longer raises the hotchpot value."""
        open_estate(bus)
        add_home(bus)
        gift_id = bus.handle(
            commands.AddGiftInterVivos(
                estate_id=ESTATE_ID,
                recipient_id="child-1",
                description="Plot in Thika",
                value=Decimal(200_000),
                date_of_gift=date(2020, 3, 15),
            )
        ).unwrap()
        bus.handle(
            commands.VerifyGiftInterVivos(
                estate_id=ESTATE_ID, gift_id=gift_id, verified_by="registrar-1"
            )
        ).unwrap()
        bus.handle(
            commands.ExcludeGiftFromHotchpot(
                estate_id=ESTATE_ID, gift_id=gift_id, reason="Court direction"
            )
        ).unwrap()
        assert summary(app).hotchpot_adjusted_value.amount == Decimal(1_000_000)

        bus.handle(
            commands.IncludeGiftInHotchpot(estate_id=ESTATE_ID, gift_id=gift_id)
        ).unwrap()
        assert summary(app).hotchpot_adjusted_value.amount == Decimal(1_200_000)


class TestDependantsAndGifts:
    """Tests for dependants and lifetime gifts."""

    @staticmethod
    def test_gift_hotchpot(app, bus):
        """A verified gift raises the hotchpot value."""
        open_estate(bus)
        add_home(bus)
        gift_id = bus.handle(
            commands.AddGiftInterVivos(
                estate_id=ESTATE_ID,
                recipient_id="child-1",
                description="Plot in Thika",
                value=Decimal(200_000),
                date_of_gift=date(2020, 3, 15),
            )
        ).unwrap()
        bus.handle(
            commands.VerifyGiftInterVivos(
                estate_id=ESTATE_ID, gift_id=gift_id, verified_by="registrar-1"
            )
        ).unwrap()
        assert summary(app).hotchpot_adjusted_value.amount == Decimal(1_200_000)

        bus.handle(
            commands.AdjustGiftForInflation(estate_id=ESTATE_ID, gift_id=gift_id)
        ).unwrap()
        assert summary(app).hotchpot_adjusted_value.amount > Decimal(1_250_000)

    @staticmethod
    def test_dependant_provision(app, bus):
        """Verified dependants count toward the annual provision."""
        open_estate(bus)
        dependant_id = bus.handle(
            commands.AddLegalDependant(
                estate_id=ESTATE_ID,
                person_id="child-1",
                full_name="Njeri Kamau",
                relationship=DependantRelationship.CHILD,
                monthly_needs=Decimal(15_000),
                date_of_birth=date(2012, 4, 2),
            )
        ).unwrap()
        bus.handle(
            commands.VerifyLegalDependant(
                estate_id=ESTATE_ID, dependant_id=dependant_id, verified_by="registrar-1"
            )
        ).unwrap()
        result = summary(app)
        assert result.dependant_count == 1
        assert result.annual_dependant_provision.amount == Decimal(180_000)


class TestFreezing:
    """Tests for freeze and unfreeze commands."""

    @staticmethod
    def test_frozen_estate_refuses_changes(bus, publisher):
        """A frozen estate refuses everything but unfreezing."""
        open_estate(bus)
        bus.handle(
            commands.FreezeEstate(estate_id=ESTATE_ID, reason="Court injunction")
        ).unwrap()
        result = bus.handle(
            commands.AddAsset(
                estate_id=ESTATE_ID,
                name="Car",
                asset_type=AssetType.VEHICLE,
                value=Decimal(500_000),
            )
        )
        assert result.error == f"Estate {ESTATE_ID} is frozen: Court injunction"
        bus.handle(
            commands.UnfreezeEstate(estate_id=ESTATE_ID, reason="Injunction lifted")
        ).unwrap()
        assert publisher.event_types == ["EstateCreated", "EstateFrozen", "EstateUnfrozen"]


class TestQueries:
    """Tests for the read-side helpers."""

    @staticmethod
    def test_missing_summary(app):
        """No estate, no summary."""
        assert summary(app) is None

    @staticmethod
    def test_estate_ids(app, bus):
        """Only estates are listed."""
        open_estate(bus)
        bus.handle(commands.CreateWill(testator_id="t-1", title="Will")).unwrap()
        assert queries.estate_ids(app.uow) == [ESTATE_ID]
