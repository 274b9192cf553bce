"""Will aggregate.

Owns the executors, witnesses and bequests of a single will and enforces the
rules that span them: a beneficiary or executor may never witness
(Section 11(4) LSA), percentage bequests may not exceed 100% in total, and
there is at most one residuary clause.

Lifecycle::

    DRAFT --execute--> PENDING_WITNESS --(minimum witnesses signed)--> WITNESSED
    WITNESSED --activate--> ACTIVE
    any state but REVOKED --revoke--> REVOKED
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from urithi.domain import events
from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.entities import (
    Bequest,
    ExecutorStatus,
    TestamentaryExecutor,
    WillWitness,
)
from urithi.domain.entities.will_witness import (
    BENEFICIARY_WITNESS_MESSAGE,
    EXECUTOR_WITNESS_MESSAGE,
)
from urithi.domain.errors import WillInvariantError, WillLinkageError
from urithi.domain.result import Result
from urithi.domain.statutes import DEFAULT_STATUTE_SCHEDULE, StatuteSchedule
from urithi.domain.value_objects import HUNDRED, WitnessSignature, same_person

from .base import Aggregate

# pylint: disable=too-many-instance-attributes,too-many-public-methods

logger = logging.getLogger(__name__)


class WillStatus(Enum):
    """Lifecycle of a will."""

    DRAFT = "draft"
    PENDING_WITNESS = "pending_witness"
    WITNESSED = "witnessed"
    ACTIVE = "active"
    REVOKED = "revoked"


#: Statuses in which the will's content (executors, bequests) may change.
EDITABLE_STATUSES = frozenset({WillStatus.DRAFT})
#: Statuses in which witnesses may still be added.
WITNESSING_STATUSES = frozenset({WillStatus.DRAFT, WillStatus.PENDING_WITNESS})


class Will(Aggregate):
    """Aggregate root for a testator's will."""

    STREAM_TYPE = "Will"

    def __init__(  # pylint: disable=too-many-arguments
        self,
        aggregate_id: str,
        *,
        testator_id: str,
        title: str,
        created_at: datetime | None = None,
        clock: Clock = SYSTEM_CLOCK,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
        version: int = 0,
    ) -> None:
        super().__init__(aggregate_id, clock=clock, version=version)
        self.schedule = schedule
        self.testator_id = testator_id
        self.title = title
        self.status = WillStatus.DRAFT
        self.executed_at: datetime | None = None
        self.witnessed_at: datetime | None = None
        self.activated_at: datetime | None = None
        self.revoked_at: datetime | None = None
        self.revocation_reason: str | None = None
        self.created_at = created_at or clock.now()
        self.updated_at = self.created_at

        self._executors: dict[str, TestamentaryExecutor] = {}
        self._witnesses: dict[str, WillWitness] = {}
        self._bequests: dict[str, Bequest] = {}

    # --- Construction Paths ---

    @classmethod
    def create(
        cls,
        *,
        will_id: str,
        testator_id: str,
        title: str,
        clock: Clock = SYSTEM_CLOCK,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> Will:
        """Start a new draft will.

        Raises:
            WillInvariantError: If the testator or title is missing.
        """
        will = cls(
            will_id,
            testator_id=testator_id,
            title=title.strip(),
            clock=clock,
            schedule=schedule,
        )
        will.validate()
        will._record(
            events.WillCreated(will_id=will_id, testator_id=testator_id, title=will.title)
        )
        return will

    @classmethod
    def reconstitute(  # pylint: disable=too-many-arguments
        cls,
        *,
        will_id: str,
        testator_id: str,
        title: str,
        executors: Iterable[TestamentaryExecutor] = (),
        witnesses: Iterable[WillWitness] = (),
        bequests: Iterable[Bequest] = (),
        state: dict[str, Any] | None = None,
        version: int = 0,
        clock: Clock = SYSTEM_CLOCK,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> Will:
        """Rebuild a will from persisted state without emitting events."""
        will = cls(
            will_id,
            testator_id=testator_id,
            title=title,
            clock=clock,
            schedule=schedule,
            version=version,
        )
        for name, value in (state or {}).items():
            if name.startswith("_") or not hasattr(will, name):
                raise WillInvariantError(will_id, f"unknown attribute {name!r}")
            setattr(will, name, value)
        will._executors = {e.id: e for e in executors}
        will._witnesses = {w.id: w for w in witnesses}
        will._bequests = {b.id: b for b in bequests}
        will.validate()
        return will

    # --- Invariants ---

    def validate(self) -> None:
        """Raises WillInvariantError or WillLinkageError on corrupt structure."""
        if not self.testator_id.strip():
            raise WillInvariantError(self.aggregate_id, "testator id is required")
        if not self.title.strip():
            raise WillInvariantError(self.aggregate_id, "title is required")
        for collection in (self._executors, self._witnesses, self._bequests):
            for child in collection.values():
                if child.will_id != self.aggregate_id:
                    raise WillLinkageError(self.aggregate_id, child.will_id, child.id)
        if self.total_allocated_percentage() > HUNDRED:
            raise WillInvariantError(self.aggregate_id, "bequests exceed 100%")
        if sum(b.is_residuary for b in self._bequests.values()) > 1:
            raise WillInvariantError(self.aggregate_id, "more than one residuary bequest")
        for witness in self._witnesses.values():
            if self._witness_conflict(witness):
                raise WillInvariantError(
                    self.aggregate_id, f"witness {witness.id} is disqualified"
                )

    # --- Queries ---

    @property
    def will_id(self) -> str:
        return self.aggregate_id

    @property
    def executors(self) -> tuple[TestamentaryExecutor, ...]:
        """Executors in order of priority (stable for equal priorities)."""
        return tuple(sorted(self._executors.values(), key=lambda e: e.order_of_priority))

    @property
    def witnesses(self) -> tuple[WillWitness, ...]:
        return tuple(self._witnesses.values())

    @property
    def bequests(self) -> tuple[Bequest, ...]:
        return tuple(self._bequests.values())

    def get_executor(self, executor_id: str) -> TestamentaryExecutor | None:
        return self._executors.get(executor_id)

    def get_witness(self, witness_id: str) -> WillWitness | None:
        return self._witnesses.get(witness_id)

    def get_bequest(self, bequest_id: str) -> Bequest | None:
        return self._bequests.get(bequest_id)

    def beneficiary_ids(self) -> set[str]:
        return {b.beneficiary_id for b in self._bequests.values()}

    def total_allocated_percentage(self) -> Decimal:
        return sum(
            (
                b.allocated_percentage.value
                for b in self._bequests.values()
                if b.allocated_percentage is not None
            ),
            Decimal(0),
        )

    def get_primary_executor(self) -> TestamentaryExecutor | None:
        """The designated primary executor, else the highest-priority serving one."""
        serving = [
            e
            for e in self.executors
            if e.status in (ExecutorStatus.NOMINATED, ExecutorStatus.ACTIVE)
        ]
        for executor in serving:
            if executor.is_primary:
                return executor
        return serving[0] if serving else None

    def signed_witnesses(self) -> list[WillWitness]:
        return [w for w in self._witnesses.values() if w.has_signed]

    def is_valid_for_probate(self) -> bool:
        """ACTIVE, enough probate-valid witnesses, and a serving executor."""
        valid_witnesses = [
            w
            for w in self._witnesses.values()
            if w.is_valid_for_probate(self.schedule.age_of_majority)
        ]
        return (
            self.status is WillStatus.ACTIVE
            and len(valid_witnesses) >= self.schedule.minimum_witnesses
            and any(e.is_active_and_eligible() for e in self._executors.values())
        )

    def _witness_conflict(self, witness: WillWitness) -> str | None:
        if witness.user_id is not None and witness.user_id in self.beneficiary_ids():
            return BENEFICIARY_WITNESS_MESSAGE
        if any(same_person(witness.identity, e.identity) for e in self._executors.values()):
            return EXECUTOR_WITNESS_MESSAGE
        return None

    # --- Guards ---

    def _require_status(self, action: str, allowed: frozenset[WillStatus]) -> str | None:
        if self.status in allowed:
            return None
        expected = ", ".join(sorted(s.name for s in allowed))
        return f"Cannot {action} a will that is {self.status.name} (expected {expected})"

    def _check_linkage(self, child: TestamentaryExecutor | WillWitness | Bequest) -> None:
        if child.will_id != self.aggregate_id:
            raise WillLinkageError(self.aggregate_id, child.will_id, child.id)

    def _touch(self) -> None:
        self.updated_at = self.clock.now()

    # --- Executors ---

    def add_executor(self, executor: TestamentaryExecutor) -> Result[None]:
        if error := self._require_status("add an executor to", EDITABLE_STATUSES):
            return Result.fail(error)
        self._check_linkage(executor)
        if executor.id in self._executors:
            return Result.fail(f"Executor {executor.id} is already appointed")
        if any(same_person(executor.identity, e.identity) for e in self._executors.values()):
            return Result.fail(f"{executor.display_name} is already an executor of this will")
        if not executor.is_eligible:
            return Result.fail(
                f"Executor {executor.display_name} has not passed the eligibility check "
                f"({executor.eligibility_status.value})"
            )
        if any(same_person(executor.identity, w.identity) for w in self._witnesses.values()):
            return Result.fail(EXECUTOR_WITNESS_MESSAGE)
        self._executors[executor.id] = executor
        self._touch()
        self._record(
            events.ExecutorAppointed(
                will_id=self.aggregate_id,
                executor_id=executor.id,
                name=executor.display_name,
                order_of_priority=executor.order_of_priority,
            )
        )
        return Result.ok()

    def accept_executor_appointment(self, executor_id: str) -> Result[None]:
        """The nominated executor takes up the appointment."""
        if self.status is WillStatus.REVOKED:
            return Result.fail("Cannot accept an appointment under a revoked will")
        if (executor := self._executors.get(executor_id)) is None:
            return Result.fail(f"Executor {executor_id} is not appointed under this will")
        if (result := executor.accept_appointment()).is_failure:
            return result
        self._touch()
        self._record(
            events.ExecutorAccepted(will_id=self.aggregate_id, executor_id=executor_id)
        )
        return Result.ok()

    def remove_executor(self, executor_id: str) -> Result[None]:
        if error := self._require_status("remove an executor from", EDITABLE_STATUSES):
            return Result.fail(error)
        if executor_id not in self._executors:
            return Result.fail(f"Executor {executor_id} is not appointed under this will")
        del self._executors[executor_id]
        self._touch()
        self._record(
            events.ExecutorRemoved(will_id=self.aggregate_id, executor_id=executor_id)
        )
        return Result.ok()

    # --- Bequests ---

    def add_bequest(self, bequest: Bequest) -> Result[None]:
        if error := self._require_status("add a bequest to", EDITABLE_STATUSES):
            return Result.fail(error)
        self._check_linkage(bequest)
        if bequest.id in self._bequests:
            return Result.fail(f"Bequest {bequest.id} already exists")
        if (share := bequest.allocated_percentage) is not None:
            total = self.total_allocated_percentage() + share.value
            if total > HUNDRED:
                return Result.fail(
                    f"Total bequest allocation cannot exceed 100% (would be {total}%)"
                )
        if bequest.is_residuary and any(b.is_residuary for b in self._bequests.values()):
            return Result.fail("A will can have only one residuary bequest")
        if bequest.asset_id is not None and any(
            b.asset_id == bequest.asset_id and b.priority == bequest.priority
            for b in self._bequests.values()
        ):
            return Result.fail(
                f"Asset {bequest.asset_id} is already bequeathed at priority "
                f"{bequest.priority}"
            )
        if any(w.user_id == bequest.beneficiary_id for w in self._witnesses.values()):
            return Result.fail(BENEFICIARY_WITNESS_MESSAGE)
        self._bequests[bequest.id] = bequest
        self._touch()
        self._record(
            events.BequestAdded(
                will_id=self.aggregate_id,
                bequest_id=bequest.id,
                beneficiary_id=bequest.beneficiary_id,
                bequest_type=bequest.bequest_type.value,
            )
        )
        return Result.ok()

    # --- Witnesses ---

    def add_witness(self, witness: WillWitness) -> Result[None]:
        if error := self._require_status("add a witness to", WITNESSING_STATUSES):
            return Result.fail(error)
        self._check_linkage(witness)
        if witness.id in self._witnesses:
            return Result.fail(f"Witness {witness.id} already exists")
        if any(same_person(witness.identity, w.identity) for w in self._witnesses.values()):
            return Result.fail(f"{witness.full_name} is already a witness to this will")
        if conflict := self._witness_conflict(witness):
            return Result.fail(conflict)
        self._witnesses[witness.id] = witness
        self._touch()
        self._record(
            events.WitnessAdded(
                will_id=self.aggregate_id, witness_id=witness.id, name=witness.full_name
            )
        )
        return Result.ok()

    def accept_witness_invitation(self, witness_id: str) -> Result[None]:
        """The witness agrees to attest and acknowledges the obligation."""
        if error := self._require_status("accept a witness for", WITNESSING_STATUSES):
            return Result.fail(error)
        if (witness := self._witnesses.get(witness_id)) is None:
            return Result.fail(f"Witness {witness_id} not found")
        if (result := witness.accept_invitation(self.schedule)).is_failure:
            return result
        if not witness.understands_obligation:
            witness.acknowledge_obligation()
        self._touch()
        self._record(
            events.WitnessAccepted(will_id=self.aggregate_id, witness_id=witness_id)
        )
        return Result.ok()

    def record_witness_signature(
        self, witness_id: str, signature: WitnessSignature
    ) -> Result[None]:
        if error := self._require_status(
            "record a signature on", frozenset({WillStatus.PENDING_WITNESS})
        ):
            return Result.fail(error)
        if (witness := self._witnesses.get(witness_id)) is None:
            return Result.fail(f"Witness {witness_id} not found")
        if (result := witness.add_signature(signature)).is_failure:
            return result
        self._touch()
        self._record(
            events.WitnessSigned(
                will_id=self.aggregate_id,
                witness_id=witness_id,
                signed_at=signature.signed_at.isoformat(),
            )
        )
        self._mark_witnessed_if_complete()
        return Result.ok()

    def verify_witness(
        self, witness_id: str, verified_by: str, method: str, notes: str | None = None
    ) -> Result[None]:
        if self.status is WillStatus.REVOKED:
            return Result.fail("Cannot verify a witness on a revoked will")
        if (witness := self._witnesses.get(witness_id)) is None:
            return Result.fail(f"Witness {witness_id} not found")
        if (result := witness.verify_witness(verified_by, method, notes)).is_failure:
            return result
        self._touch()
        self._record(
            events.WitnessVerified(
                will_id=self.aggregate_id, witness_id=witness_id, verified_by=verified_by
            )
        )
        self._mark_witnessed_if_complete()
        return Result.ok()

    def _mark_witnessed_if_complete(self) -> None:
        signed = self.signed_witnesses()
        if (
            self.status is WillStatus.PENDING_WITNESS
            and len(signed) >= self.schedule.minimum_witnesses
        ):
            self.status = WillStatus.WITNESSED
            self.witnessed_at = self.clock.now()
            self._record(
                events.WillWitnessed(will_id=self.aggregate_id, witness_count=len(signed))
            )

    # --- Lifecycle ---

    def execute(self, executed_at: datetime | None = None) -> Result[None]:
        """Record the testator's signature; the will then awaits witnesses."""
        if error := self._require_status("execute", EDITABLE_STATUSES):
            return Result.fail(error)
        problems = []
        if not self._bequests:
            problems.append("a will needs at least one bequest")
        if not self._executors:
            problems.append("a will needs at least one executor")
        if problems:
            return Result.fail("Cannot execute: " + "; ".join(problems))
        self.executed_at = executed_at or self.clock.now()
        self.status = WillStatus.PENDING_WITNESS
        self._touch()
        self._record(
            events.WillExecuted(
                will_id=self.aggregate_id, executed_at=self.executed_at.isoformat()
            )
        )
        self._mark_witnessed_if_complete()
        return Result.ok()

    def activate(self) -> Result[None]:
        if error := self._require_status("activate", frozenset({WillStatus.WITNESSED})):
            return Result.fail(error)
        self.status = WillStatus.ACTIVE
        self.activated_at = self.clock.now()
        self._touch()
        logger.info("Will %s activated", self.aggregate_id)
        self._record(
            events.WillActivated(
                will_id=self.aggregate_id, activated_at=self.activated_at.isoformat()
            )
        )
        return Result.ok()

    def revoke(self, reason: str) -> Result[None]:
        if self.status is WillStatus.REVOKED:
            return Result.fail("Will is already revoked")
        if not reason.strip():
            return Result.fail("A reason is required to revoke a will")
        self.status = WillStatus.REVOKED
        self.revoked_at = self.clock.now()
        self.revocation_reason = reason.strip()
        self._touch()
        logger.info("Will %s revoked: %s", self.aggregate_id, self.revocation_reason)
        self._record(events.WillRevoked(will_id=self.aggregate_id, reason=reason.strip()))
        return Result.ok()
