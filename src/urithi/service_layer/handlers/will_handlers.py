"""Handlers relating to the will aggregate."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from urithi.domain.aggregates import Will
from urithi.domain.clock import Clock
from urithi.domain.entities import Bequest, TestamentaryExecutor, WillWitness
from urithi.domain.result import Result
from urithi.domain.statutes import StatuteSchedule
from urithi.domain.value_objects import (
    Currency,
    Money,
    Percentage,
    RegisteredUser,
    WitnessSignature,
    same_person,
)
from urithi.interfaces.id_generator import IdGenerator
from urithi.interfaces.unit_of_work import AbstractUnitOfWork
from urithi.service_layer import commands
from urithi.service_layer import repositories as repos

# pylint: disable=too-many-arguments

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _update_will(
    will_id: str,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
    operation: Callable[[Will], Result[R]],
) -> Result[R]:
    with uow:
        repo = repos.WillRepository(
            uow, event_id_generator, clock=clock, schedule=schedule
        )
        will = repo.get(will_id)
        if (result := operation(will)).is_failure:
            logger.debug("Will %s: change rejected: %s", will_id, result.error)
            return result
        repo.save(will)
        uow.commit()
    return result


# ============================================================================
#                                  Lifecycle
# ============================================================================


def create_will(
    cmd: commands.CreateWill,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    aggregate_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[str]:
    """Start a draft will and return its id."""
    will = Will.create(
        will_id=cmd.will_id or aggregate_id_generator.new_id(),
        testator_id=cmd.testator_id,
        title=cmd.title,
        clock=clock,
        schedule=schedule,
    )
    with uow:
        if uow.snapshots.load(will.will_id) is not None:
            return Result.fail(f"Will {will.will_id} already exists")
        repos.WillRepository(
            uow, event_id_generator, clock=clock, schedule=schedule
        ).save(will)
        uow.commit()
    return Result.ok(will.will_id)


def execute_will(
    cmd: commands.ExecuteWill,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_will(
        cmd.will_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda will: will.execute(cmd.executed_at),
    )


def activate_will(
    cmd: commands.ActivateWill,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_will(
        cmd.will_id, uow, event_id_generator, clock, schedule, lambda will: will.activate()
    )


def revoke_will(
    cmd: commands.RevokeWill,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_will(
        cmd.will_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda will: will.revoke(cmd.reason),
    )


# ============================================================================
#                                  Executors
# ============================================================================


def nominate_executor(
    cmd: commands.NominateExecutor,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    entity_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[str]:
    """Nominate an executor, check eligibility and appoint them under the will."""
    executor_id = entity_id_generator.new_id()

    def operation(will: Will) -> Result[str]:
        created = TestamentaryExecutor.create(
            executor_id=executor_id,
            will_id=will.will_id,
            identity=cmd.identity,
            age=cmd.age,
            order_of_priority=cmd.order_of_priority,
            is_primary=cmd.is_primary,
            is_resident=cmd.is_resident,
            is_bankrupt=cmd.is_bankrupt,
            has_criminal_record=cmd.has_criminal_record,
            criminal_record_details=cmd.criminal_record_details,
            compensation=cmd.compensation,
            clock=clock,
            schedule=schedule,
        )
        if created.is_failure:
            return Result.fail(created.error or "Invalid executor")
        executor = created.unwrap()
        executor.check_eligibility(cmd.checked_by, schedule)
        return will.add_executor(executor).and_return(executor_id)

    return _update_will(cmd.will_id, uow, event_id_generator, clock, schedule, operation)


def accept_executor_appointment(
    cmd: commands.AcceptExecutorAppointment,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_will(
        cmd.will_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda will: will.accept_executor_appointment(cmd.executor_id),
    )


def remove_executor(
    cmd: commands.RemoveExecutor,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_will(
        cmd.will_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda will: will.remove_executor(cmd.executor_id),
    )


# ============================================================================
#                                  Bequests
# ============================================================================


def add_bequest(
    cmd: commands.AddBequest,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    entity_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[str]:
    bequest_id = entity_id_generator.new_id()

    def operation(will: Will) -> Result[str]:
        share: Percentage | None = None
        if cmd.share is not None:
            if (parsed := Percentage.create(cmd.share)).is_failure:
                return Result.fail(parsed.error or "Invalid share")
            share = parsed.value
        amount: Money | None = None
        if cmd.amount is not None:
            try:
                amount = Money(cmd.amount, Currency(cmd.currency))
            except ValueError:
                return Result.fail(f"Unsupported currency {cmd.currency!r}")
        created = Bequest.create(
            bequest_id=bequest_id,
            will_id=will.will_id,
            beneficiary_id=cmd.beneficiary_id,
            bequest_type=cmd.bequest_type,
            description=cmd.description,
            asset_id=cmd.asset_id,
            share=share,
            amount=amount,
            priority=cmd.priority,
            conditions=cmd.conditions,
            clock=clock,
        )
        if created.is_failure:
            return Result.fail(created.error or "Invalid bequest")
        return will.add_bequest(created.unwrap()).and_return(bequest_id)

    return _update_will(cmd.will_id, uow, event_id_generator, clock, schedule, operation)


# ============================================================================
#                                  Witnesses
# ============================================================================


def add_witness(
    cmd: commands.AddWitness,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    entity_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[str]:
    """Register a witness; beneficiaries and executors of the will are refused."""
    witness_id = entity_id_generator.new_id()

    def operation(will: Will) -> Result[str]:
        identity = cmd.identity
        created = WillWitness.create(
            witness_id=witness_id,
            will_id=will.will_id,
            identity=identity,
            full_name=cmd.full_name,
            relationship_to_testator=cmd.relationship_to_testator,
            age=cmd.age,
            is_beneficiary=(
                isinstance(identity, RegisteredUser)
                and identity.user_id in will.beneficiary_ids()
            ),
            is_executor=any(same_person(identity, e.identity) for e in will.executors),
            clock=clock,
            schedule=schedule,
        )
        if created.is_failure:
            return Result.fail(created.error or "Invalid witness")
        witness = created.unwrap()
        witness.check_eligibility(schedule)
        return will.add_witness(witness).and_return(witness_id)

    return _update_will(cmd.will_id, uow, event_id_generator, clock, schedule, operation)


def accept_witness_invitation(
    cmd: commands.AcceptWitnessInvitation,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_will(
        cmd.will_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda will: will.accept_witness_invitation(cmd.witness_id),
    )


def record_witness_signature(
    cmd: commands.RecordWitnessSignature,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    def operation(will: Will) -> Result[None]:
        signature = WitnessSignature.capture(
            signature_type=cmd.signature_type,
            signed_at=cmd.signed_at or clock.now(),
            attestation=cmd.attestation,
            co_witness_present=cmd.co_witness_present,
            co_witness_id=cmd.co_witness_id,
            signature_hash=cmd.signature_hash,
        )
        if signature.is_failure:
            return Result.fail(signature.error or "Invalid signature")
        return will.record_witness_signature(cmd.witness_id, signature.unwrap())

    return _update_will(cmd.will_id, uow, event_id_generator, clock, schedule, operation)


def verify_witness(
    cmd: commands.VerifyWitness,
    uow: AbstractUnitOfWork,
    event_id_generator: IdGenerator,
    clock: Clock,
    schedule: StatuteSchedule,
) -> Result[None]:
    return _update_will(
        cmd.will_id,
        uow,
        event_id_generator,
        clock,
        schedule,
        lambda will: will.verify_witness(
            cmd.witness_id, cmd.verified_by, cmd.method, cmd.notes
        ),
    )


COMMAND_HANDLERS: dict[type, Callable[..., Result]] = {
    commands.CreateWill: create_will,
    commands.ExecuteWill: execute_will,
    commands.ActivateWill: activate_will,
    commands.RevokeWill: revoke_will,
    commands.NominateExecutor: nominate_executor,
    commands.AcceptExecutorAppointment: accept_executor_appointment,
    commands.RemoveExecutor: remove_executor,
    commands.AddBequest: add_bequest,
    commands.AddWitness: add_witness,
    commands.AcceptWitnessInvitation: accept_witness_invitation,
    commands.RecordWitnessSignature: record_witness_signature,
    commands.VerifyWitness: verify_witness,
}
