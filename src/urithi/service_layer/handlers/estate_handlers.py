"""Handlers relating to the estate aggregate.

Every handler loads the estate inside a unit of work, applies one mutator
and saves only if the mutator succeeded. A failed `Result` leaves storage
untouched and is returned to the caller as is.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from decimal import Decimal
from typing import TypeVar

from urithi.domain.aggregates import Estate
from urithi.domain.clock import Clock
from urithi.domain.entities import Asset, Debt, GiftInterVivos, LegalDependant
from urithi.domain.result import Result
from urithi.domain.statutes import StatuteSchedule
from urithi.domain.value_objects import Currency, Money, Percentage
from urithi.interfaces.id_generator import IdGenerator
from urithi.interfaces.unit_of_work import AbstractUnitOfWork
from urithi.service_layer import commands
from urithi.service_layer import repositories as repos

# pylint: disable=too-many-arguments

logger = logging.getLogger(__name__)

R = TypeVar("R")


# ============================================================================
#                                  Helpers
# ============================================================================


def _update_estate(
    estate_id: str,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
    operation: Callable[[Estate], Result[R]],
) -> Result[R]:
    with uow:
        repo = repos.EstateRepository(
            uow, event_id_generator, clock=clock, schedule=schedule
        )
        estate = repo.get(estate_id)
        if (result := operation(estate)).is_failure:
            logger.debug("Estate %s: change rejected: %s", estate_id, result.error)
            return result
        repo.save(estate)
        uow.commit()
    return result


def _money(amount: Decimal, code: str | None, default: Currency) -> Result[Money]:
    if code is None:
        return Result.ok(Money(amount, default))
    try:
        return Result.ok(Money(amount, Currency(code)))
    except ValueError:
        return Result.fail(f"Unsupported currency {code!r}")


# ============================================================================
#                              Estate lifecycle
# ============================================================================


def create_estate(
    cmd: commands.CreateEstate,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[str]:
    """Open an estate and return its id.

    Raises:
        EstateInvariantError: If the deceased's details are unusable.
    """
    try:
        currency = Currency(cmd.currency)
    except ValueError:
        return Result.fail(f"Unsupported currency {cmd.currency!r}")

    estate = Estate.create(
        deceased_id=cmd.deceased_id,
        deceased_name=cmd.deceased_name,
        date_of_death=cmd.date_of_death,
        estate_id=cmd.estate_id,
        currency=currency,
        kra_pin=cmd.kra_pin,
        clock=clock,
        schedule=schedule,
    )
    with uow:
        if uow.snapshots.load(estate.estate_id) is not None:
            return Result.fail(f"Estate {estate.estate_id} already exists")
        repo = repos.EstateRepository(
            uow, event_id_generator, clock=clock, schedule=schedule
        )
        repo.save(estate)
        uow.commit()
    logger.info("Opened estate %s for %s", estate.estate_id, estate.deceased_name)
    return Result.ok(estate.estate_id)


def freeze_estate(
    cmd: commands.FreezeEstate,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.freeze(cmd.reason, cmd.frozen_by),
    )


def unfreeze_estate(
    cmd: commands.UnfreezeEstate,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.unfreeze(cmd.reason, cmd.unfrozen_by),
    )


def mark_estate_testate(
    cmd: commands.MarkEstateTestate,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.mark_as_testate(cmd.will_id),
    )


def mark_estate_intestate(
    cmd: commands.MarkEstateIntestate,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.mark_as_intestate(),
    )


def delete_estate(
    cmd: commands.DeleteEstate,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.soft_delete(cmd.reason),
    )


# ============================================================================
#                                   Assets
# ============================================================================


def add_asset(
    cmd: commands.AddAsset,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    entity_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[str]:
    """Register an asset with the estate and return the asset id."""
    asset_id = entity_id_generator.new_id()

    def operation(estate: Estate) -> Result[str]:
        value = _money(cmd.value, cmd.currency, estate.currency)
        if value.is_failure:
            return Result.fail(value.error or "Invalid asset value")
        share: Percentage | None = None
        if cmd.ownership_share is not None:
            if (parsed := Percentage.create(cmd.ownership_share)).is_failure:
                return Result.fail(parsed.error or "Invalid ownership share")
            share = parsed.value
        encumbrance = (
            Money(cmd.encumbrance, value.unwrap().currency)
            if cmd.encumbrance is not None
            else None
        )
        created = Asset.create(
            asset_id=asset_id,
            estate_id=estate.estate_id,
            name=cmd.name,
            asset_type=cmd.asset_type,
            current_value=value.unwrap(),
            ownership_type=cmd.ownership_type,
            ownership_share=share,
            encumbrance=encumbrance,
            title_deed_number=cmd.title_deed_number,
            description=cmd.description,
            clock=clock,
        )
        if created.is_failure:
            return Result.fail(created.error or "Invalid asset")
        return estate.add_asset(created.unwrap()).and_return(asset_id)

    return _update_estate(
        cmd.estate_id, uow, event_id_generator, clock, schedule, operation
    )


def verify_asset(
    cmd: commands.VerifyAsset,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.verify_asset(cmd.asset_id, cmd.verified_by),
    )


def reject_asset_verification(
    cmd: commands.RejectAssetVerification,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.reject_asset_verification(
            cmd.asset_id, cmd.rejected_by, cmd.reason
        ),
    )


def revalue_asset(
    cmd: commands.RevalueAsset,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.revalue_asset(
            cmd.asset_id, Money(cmd.new_value, estate.currency)
        ),
    )


def remove_asset(
    cmd: commands.RemoveAsset,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.remove_asset(cmd.asset_id),
    )


def dispute_asset(
    cmd: commands.DisputeAsset,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.dispute_asset(cmd.asset_id, cmd.reason),
    )


def set_asset_encumbrance(
    cmd: commands.SetAssetEncumbrance,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.set_asset_encumbrance(
            cmd.asset_id,
            Money(cmd.amount, estate.currency) if cmd.amount is not None else None,
        ),
    )


def deactivate_asset(
    cmd: commands.DeactivateAsset,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.deactivate_asset(cmd.asset_id),
    )


def reactivate_asset(
    cmd: commands.ReactivateAsset,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.reactivate_asset(cmd.asset_id),
    )


def soft_delete_asset(
    cmd: commands.SoftDeleteAsset,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    """Retire an asset but keep its record, unlike `remove_asset`."""
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.soft_delete_asset(cmd.asset_id, cmd.reason),
    )


def restore_asset(
    cmd: commands.RestoreAsset,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.restore_asset(cmd.asset_id),
    )


# ============================================================================
#                                   Debts
# ============================================================================


def add_debt(
    cmd: commands.AddDebt,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    entity_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[str]:
    """Record a debt against the estate and return the debt id."""
    debt_id = entity_id_generator.new_id()

    def operation(estate: Estate) -> Result[str]:
        principal = _money(cmd.principal_amount, cmd.currency, estate.currency)
        if principal.is_failure:
            return Result.fail(principal.error or "Invalid principal")
        currency = principal.unwrap().currency
        created = Debt.create(
            debt_id=debt_id,
            estate_id=estate.estate_id,
            debt_type=cmd.debt_type,
            creditor_name=cmd.creditor_name,
            description=cmd.description,
            principal_amount=principal.unwrap(),
            outstanding_balance=(
                Money(cmd.outstanding_balance, currency)
                if cmd.outstanding_balance is not None
                else None
            ),
            tier=cmd.tier,
            secured_asset_id=cmd.secured_asset_id,
            incurred_date=cmd.incurred_date,
            due_date=cmd.due_date,
            schedule=schedule,
            clock=clock,
        )
        if created.is_failure:
            return Result.fail(created.error or "Invalid debt")
        return estate.add_debt(created.unwrap()).and_return(debt_id)

    return _update_estate(
        cmd.estate_id, uow, event_id_generator, clock, schedule, operation
    )


def record_debt_payment(
    cmd: commands.RecordDebtPayment,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    """Pay towards a debt, in Section 45 order."""
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.record_debt_payment(
            cmd.debt_id, Money(cmd.amount, estate.currency)
        ),
    )


def write_off_debt(
    cmd: commands.WriteOffDebt,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.write_off_debt(cmd.debt_id, cmd.reason),
    )


def remove_debt(
    cmd: commands.RemoveDebt,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.remove_debt(cmd.debt_id),
    )


def dispute_debt(
    cmd: commands.DisputeDebt,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.dispute_debt(cmd.debt_id, cmd.reason),
    )


def resolve_debt_dispute(
    cmd: commands.ResolveDebtDispute,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.resolve_debt_dispute(
            cmd.debt_id,
            (
                Money(cmd.adjusted_balance, estate.currency)
                if cmd.adjusted_balance is not None
                else None
            ),
        ),
    )


def check_limitation_periods(
    cmd: commands.CheckLimitationPeriods,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[list[str]]:
    """Return the ids of debts that became statute-barred."""
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.check_limitation_periods(cmd.as_of),
    )


# ============================================================================
#                         Dependants and lifetime gifts
# ============================================================================


def add_legal_dependant(
    cmd: commands.AddLegalDependant,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    entity_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[str]:
    dependant_id = entity_id_generator.new_id()

    def operation(estate: Estate) -> Result[str]:
        created = LegalDependant.create(
            dependant_id=dependant_id,
            estate_id=estate.estate_id,
            person_id=cmd.person_id,
            full_name=cmd.full_name,
            relationship=cmd.relationship,
            monthly_needs=Money(cmd.monthly_needs, estate.currency),
            date_of_birth=cmd.date_of_birth,
            is_incapacitated=cmd.is_incapacitated,
            clock=clock,
        )
        if created.is_failure:
            return Result.fail(created.error or "Invalid dependant")
        return estate.add_legal_dependant(created.unwrap()).and_return(dependant_id)

    return _update_estate(
        cmd.estate_id, uow, event_id_generator, clock, schedule, operation
    )


def verify_legal_dependant(
    cmd: commands.VerifyLegalDependant,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.verify_dependant(cmd.dependant_id, cmd.verified_by),
    )


def remove_legal_dependant(
    cmd: commands.RemoveLegalDependant,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.remove_legal_dependant(cmd.dependant_id),
    )


def add_gift_inter_vivos(
    cmd: commands.AddGiftInterVivos,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    entity_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[str]:
    gift_id = entity_id_generator.new_id()

    def operation(estate: Estate) -> Result[str]:
        created = GiftInterVivos.create(
            gift_id=gift_id,
            estate_id=estate.estate_id,
            recipient_id=cmd.recipient_id,
            description=cmd.description,
            value_at_gift_time=Money(cmd.value, estate.currency),
            date_of_gift=cmd.date_of_gift,
            is_subject_to_hotchpot=cmd.is_subject_to_hotchpot,
            clock=clock,
        )
        if created.is_failure:
            return Result.fail(created.error or "Invalid gift")
        return estate.add_gift_inter_vivos(created.unwrap()).and_return(gift_id)

    return _update_estate(
        cmd.estate_id, uow, event_id_generator, clock, schedule, operation
    )


def verify_gift_inter_vivos(
    cmd: commands.VerifyGiftInterVivos,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.verify_gift(cmd.gift_id, cmd.verified_by),
    )


def adjust_gift_for_inflation(
    cmd: commands.AdjustGiftForInflation,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.adjust_gift_for_inflation(cmd.gift_id, cmd.annual_rate),
    )


def remove_gift_inter_vivos(
    cmd: commands.RemoveGiftInterVivos,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.remove_gift_inter_vivos(cmd.gift_id),
    )


def exclude_gift_from_hotchpot(
    cmd: commands.ExcludeGiftFromHotchpot,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.exclude_gift_from_hotchpot(cmd.gift_id, cmd.reason),
    )


def include_gift_in_hotchpot(
    cmd: commands.IncludeGiftInHotchpot,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_estate(
        cmd.estate_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda estate: estate.include_gift_in_hotchpot(cmd.gift_id),
    )


COMMAND_HANDLERS: dict[type, Callable[..., Result]] = {
    commands.CreateEstate: create_estate,
    commands.FreezeEstate: freeze_estate,
    commands.UnfreezeEstate: unfreeze_estate,
    commands.MarkEstateTestate: mark_estate_testate,
    commands.MarkEstateIntestate: mark_estate_intestate,
    commands.DeleteEstate: delete_estate,
    commands.AddAsset: add_asset,
    commands.VerifyAsset: verify_asset,
    commands.RejectAssetVerification: reject_asset_verification,
    commands.RevalueAsset: revalue_asset,
    commands.RemoveAsset: remove_asset,
    commands.DisputeAsset: dispute_asset,
    commands.SetAssetEncumbrance: set_asset_encumbrance,
    commands.DeactivateAsset: deactivate_asset,
    commands.ReactivateAsset: reactivate_asset,
    commands.SoftDeleteAsset: soft_delete_asset,
    commands.RestoreAsset: restore_asset,
    commands.AddDebt: add_debt,
    commands.RecordDebtPayment: record_debt_payment,
    commands.WriteOffDebt: write_off_debt,
    commands.RemoveDebt: remove_debt,
    commands.DisputeDebt: dispute_debt,
    commands.ResolveDebtDispute: resolve_debt_dispute,
    commands.CheckLimitationPeriods: check_limitation_periods,
    commands.AddLegalDependant: add_legal_dependant,
    commands.VerifyLegalDependant: verify_legal_dependant,
    commands.RemoveLegalDependant: remove_legal_dependant,
    commands.AddGiftInterVivos: add_gift_inter_vivos,
    commands.VerifyGiftInterVivos: verify_gift_inter_vivos,
    commands.AdjustGiftForInflation: adjust_gift_for_inflation,
    commands.RemoveGiftInterVivos: remove_gift_inter_vivos,
    commands.ExcludeGiftFromHotchpot: exclude_gift_from_hotchpot,
    commands.IncludeGiftInHotchpot: include_gift_in_hotchpot,
}
