"""Unit tests for the `Will` aggregate.

Scope:
    - Executor, bequest and witness management while the will is editable.
    - Cross-entity rules: beneficiaries and executors never witness, bequest
      percentages stay within 100%, a single residuary clause.
    - The DRAFT -> PENDING_WITNESS -> WITNESSED -> ACTIVE lifecycle and
      revocation.
"""

import logging

import pytest

from tests.helpers.builders import (
    WILL_ID,
    captured_signature,
    make_bequest,
    make_executor,
    make_will,
    make_witness,
    registered,
)
from tests.helpers.logs import assert_log_message
from urithi.domain import events
from urithi.domain.aggregates import Will, WillStatus
from urithi.domain.entities import BequestType
from urithi.domain.errors import WillInvariantError, WillLinkageError
from urithi.domain.value_objects import ExternalPerson, Percentage

# pylint: disable=magic-value-comparison,too-few-public-methods

BENEFICIARY_MESSAGE = "A beneficiary cannot witness a will (Section 11(4)(a) LSA)"
EXECUTOR_MESSAGE = "An executor cannot witness a will (Section 11(4)(b) LSA)"


def event_types(will):
    return [type(e).__name__ for e in will.dequeue_uncommitted()]


def drafted_will(clock, witnesses=2):
    """A draft with one executor, one residuary bequest and invited witnesses."""
    will = make_will(clock)
    will.add_executor(make_executor(clock=clock)).unwrap()
    will.add_bequest(make_bequest(clock=clock)).unwrap()
    for n in range(1, witnesses + 1):
        will.add_witness(
            make_witness(f"wit-{n}", clock=clock, full_name=f"Witness Number {n}")
        ).unwrap()
        will.accept_witness_invitation(f"wit-{n}").unwrap()
    will.dequeue_uncommitted()
    return will


def witnessed_will(clock):
    will = drafted_will(clock)
    will.execute().unwrap()
    for witness in will.witnesses:
        will.record_witness_signature(witness.id, captured_signature(clock)).unwrap()
    will.dequeue_uncommitted()
    return will


class TestWillCreation:
    """Tests for `Will.create` and reconstitution."""

    @staticmethod
    def test_create(clock):
        """A new will is a draft and records `WillCreated`."""
        will = Will.create(
            will_id=WILL_ID, testator_id="testator-1", title=" My will ", clock=clock
        )
        assert will.status is WillStatus.DRAFT
        assert will.title == "My will"
        assert will.dequeue_uncommitted() == [
            events.WillCreated(will_id=WILL_ID, testator_id="testator-1", title="My will")
        ]

    @staticmethod
    def test_create_requires_title(clock):
        """A will needs a title."""
        with pytest.raises(WillInvariantError, match="title is required"):
            make_will(clock, title="  ")

    @staticmethod
    def test_reconstitute_rejects_witnessing_beneficiary(clock):
        """Stored state where a beneficiary witnessed is corrupt."""
        witness = make_witness(clock=clock, identity=registered("beneficiary-1"))
        with pytest.raises(WillInvariantError, match="witness wit-1 is disqualified"):
            Will.reconstitute(
                will_id=WILL_ID,
                testator_id="testator-1",
                title="Will",
                witnesses=[witness],
                bequests=[make_bequest(clock=clock)],
                clock=clock,
            )

    @staticmethod
    def test_reconstitute_restores_state(clock):
        """Scalar state comes back by attribute name."""
        will = Will.reconstitute(
            will_id=WILL_ID,
            testator_id="testator-1",
            title="Will",
            state={"status": WillStatus.ACTIVE},
            version=3,
            clock=clock,
        )
        assert will.status is WillStatus.ACTIVE
        assert will.version == 3
        assert not will.pending_events
        with pytest.raises(WillInvariantError, match="unknown attribute 'colour'"):
            Will.reconstitute(
                will_id=WILL_ID,
                testator_id="testator-1",
                title="Will",
                state={"colour": "red"},
            )


class TestExecutors:
    """Tests for appointing executors."""

    @staticmethod
    def test_add_executor(clock):
        """Eligible executors are appointed."""
        will = make_will(clock)
        will.add_executor(make_executor(clock=clock)).unwrap()
        assert event_types(will) == ["ExecutorAppointed"]
        assert will.get_primary_executor().id == "exec-1"

    @staticmethod
    def test_unchecked_executor_rejected(clock):
        """The eligibility check must have passed."""
        will = make_will(clock)
        result = will.add_executor(make_executor(clock=clock, checked=False))
        assert result.is_failure
        assert "has not passed the eligibility check" in result.error

    @staticmethod
    def test_same_person_twice(clock):
        """One person holds one appointment."""
        will = make_will(clock)
        will.add_executor(make_executor(clock=clock)).unwrap()
        result = will.add_executor(make_executor("exec-2", clock=clock))
        assert result.error == "Otieno Ochieng is already an executor of this will"

    @staticmethod
    def test_foreign_executor_raises(clock):
        """Executors of another will are a programming error."""
        will = make_will(clock)
        with pytest.raises(WillLinkageError):
            will.add_executor(make_executor(clock=clock, will_id="will-999"))

    @staticmethod
    def test_primary_executor(clock):
        """The designated primary wins over priority order."""
        will = make_will(clock)
        will.add_executor(make_executor(clock=clock, order_of_priority=1)).unwrap()
        will.add_executor(
            make_executor(
                "exec-2",
                clock=clock,
                identity=ExternalPerson("Kipchoge Ruto", national_id="99887766"),
                order_of_priority=2,
                is_primary=True,
            )
        ).unwrap()
        assert [e.id for e in will.executors] == ["exec-1", "exec-2"]
        assert will.get_primary_executor().id == "exec-2"

    @staticmethod
    def test_accept_and_remove(clock):
        """Appointments can be accepted, and removed while editable."""
        will = make_will(clock)
        will.add_executor(make_executor(clock=clock)).unwrap()
        will.accept_executor_appointment("exec-1").unwrap()
        assert will.get_executor("exec-1").is_active_and_eligible()
        will.remove_executor("exec-1").unwrap()
        assert event_types(will) == [
            "ExecutorAppointed",
            "ExecutorAccepted",
            "ExecutorRemoved",
        ]
        assert will.remove_executor("exec-1").error == (
            "Executor exec-1 is not appointed under this will"
        )

    @staticmethod
    def test_executor_cannot_be_witness(clock):
        """A witness cannot later become an executor."""
        will = make_will(clock)
        person = ExternalPerson("Otieno Ochieng", national_id="22334455")
        will.add_witness(make_witness(clock=clock, identity=person)).unwrap()
        assert will.add_executor(make_executor(clock=clock, identity=person)).error == (
            EXECUTOR_MESSAGE
        )


class TestBequests:
    """Tests for bequests."""

    @staticmethod
    def test_percentages_capped(clock):
        """Percentage bequests cannot exceed 100% in total."""
        will = make_will(clock)
        for n in (1, 2):
            result = will.add_bequest(
                make_bequest(
                    f"beq-{n}",
                    clock=clock,
                    bequest_type=BequestType.PERCENTAGE,
                    share=Percentage(60),
                )
            )
        assert result.is_failure
        assert result.error.startswith("Total bequest allocation cannot exceed 100%")
        assert len(will.bequests) == 1

    @staticmethod
    def test_single_residuary(clock):
        """Only one residuary clause."""
        will = make_will(clock)
        will.add_bequest(make_bequest(clock=clock)).unwrap()
        assert will.add_bequest(make_bequest("beq-2", clock=clock)).error == (
            "A will can have only one residuary bequest"
        )

    @staticmethod
    def test_same_asset_same_priority(clock):
        """An asset is bequeathed once per priority."""
        will = make_will(clock)
        specific = {"bequest_type": BequestType.SPECIFIC_ASSET, "asset_id": "asset-1"}
        will.add_bequest(make_bequest(clock=clock, **specific)).unwrap()
        assert will.add_bequest(make_bequest("beq-2", clock=clock, **specific)).error == (
            "Asset asset-1 is already bequeathed at priority 1"
        )
        will.add_bequest(make_bequest("beq-3", clock=clock, priority=2, **specific)).unwrap()

    @staticmethod
    def test_duplicate_id(clock):
        """Bequest ids are unique."""
        will = make_will(clock)
        will.add_bequest(make_bequest(clock=clock)).unwrap()
        result = will.add_bequest(
            make_bequest(clock=clock, bequest_type=BequestType.PERCENTAGE, share=Percentage(5))
        )
        assert result.error == "Bequest beq-1 already exists"

    @staticmethod
    def test_witness_cannot_become_beneficiary(clock):
        """A registered witness cannot be given a bequest."""
        will = make_will(clock)
        will.add_witness(make_witness(clock=clock, identity=registered("user-7"))).unwrap()
        assert will.add_bequest(make_bequest(clock=clock, beneficiary_id="user-7")).error == (
            BENEFICIARY_MESSAGE
        )


class TestWitnesses:
    """Tests for witnesses and attestation."""

    @staticmethod
    def test_beneficiary_cannot_witness(clock):
        """Section 11(4)(a)."""
        will = make_will(clock)
        will.add_bequest(make_bequest(clock=clock)).unwrap()
        witness = make_witness(clock=clock, identity=registered("beneficiary-1"))
        assert will.add_witness(witness).error == BENEFICIARY_MESSAGE
        assert not will.witnesses

    @staticmethod
    def test_executor_cannot_witness(clock):
        """Section 11(4)(b)."""
        will = make_will(clock)
        will.add_executor(make_executor(clock=clock)).unwrap()
        witness = make_witness(
            clock=clock, identity=ExternalPerson("Otieno Ochieng", national_id="22334455")
        )
        assert will.add_witness(witness).error == EXECUTOR_MESSAGE

    @staticmethod
    def test_same_witness_twice(clock):
        """A person witnesses once."""
        will = make_will(clock)
        person = ExternalPerson("Akinyi Odhiambo", national_id="11112222")
        will.add_witness(make_witness(clock=clock, identity=person)).unwrap()
        assert will.add_witness(make_witness("wit-2", clock=clock, identity=person)).error == (
            "Akinyi Odhiambo is already a witness to this will"
        )

    @staticmethod
    def test_accepting_acknowledges_obligation(clock):
        """Accepting the invitation also records the acknowledgement."""
        will = make_will(clock)
        will.add_witness(make_witness(clock=clock)).unwrap()
        will.accept_witness_invitation("wit-1").unwrap()
        witness = will.get_witness("wit-1")
        assert witness.understands_obligation
        assert witness.is_eligible
        assert event_types(will) == ["WitnessAdded", "WitnessAccepted"]
        assert will.accept_witness_invitation("wit-9").error == "Witness wit-9 not found"

    @staticmethod
    def test_signature_requires_executed_will(clock):
        """Witnesses sign after the testator."""
        will = drafted_will(clock)
        assert will.record_witness_signature("wit-1", captured_signature(clock)).error == (
            "Cannot record a signature on a will that is DRAFT (expected PENDING_WITNESS)"
        )


class TestLifecycle:
    """Tests for execution, witnessing, activation and revocation."""

    @staticmethod
    def test_execute_requires_content(clock):
        """An empty will cannot be executed."""
        will = make_will(clock)
        assert will.execute().error == (
            "Cannot execute: a will needs at least one bequest; "
            "a will needs at least one executor"
        )

    @staticmethod
    def test_full_lifecycle(clock):
        """Executed, witnessed by two, activated."""
        will = drafted_will(clock)
        will.execute().unwrap()
        assert will.status is WillStatus.PENDING_WITNESS
        assert event_types(will) == ["WillExecuted"]

        will.record_witness_signature("wit-1", captured_signature(clock)).unwrap()
        assert will.status is WillStatus.PENDING_WITNESS
        will.record_witness_signature("wit-2", captured_signature(clock)).unwrap()
        assert will.status is WillStatus.WITNESSED
        assert event_types(will) == ["WitnessSigned", "WitnessSigned", "WillWitnessed"]

        will.activate().unwrap()
        assert will.status is WillStatus.ACTIVE
        assert not will.is_valid_for_probate()

    @staticmethod
    def test_valid_for_probate(clock):
        """Verified witnesses and an active executor make a probate-ready will."""
        will = witnessed_will(clock)
        will.activate().unwrap()
        will.accept_executor_appointment("exec-1").unwrap()
        for witness in will.witnesses:
            will.verify_witness(witness.id, "registrar-1", "national_id").unwrap()
        assert will.is_valid_for_probate()

    @staticmethod
    def test_content_frozen_after_execution(clock):
        """Bequests cannot be added once executed."""
        will = drafted_will(clock)
        will.execute().unwrap()
        result = will.add_bequest(
            make_bequest("beq-2", clock=clock, bequest_type=BequestType.PERCENTAGE, share=Percentage(10))
        )
        assert result.error == (
            "Cannot add a bequest to a will that is PENDING_WITNESS (expected DRAFT)"
        )

    @staticmethod
    def test_activate_requires_witnessed(clock):
        """Only a witnessed will can be activated."""
        assert make_will(clock).activate().error == (
            "Cannot activate a will that is DRAFT (expected WITNESSED)"
        )

    @staticmethod
    def test_revoke(clock, caplog):
        """Revocation is final."""
        will = witnessed_will(clock)
        assert will.revoke(" ").error == "A reason is required to revoke a will"
        with caplog.at_level(logging.INFO):
            will.revoke("Superseded by a later will").unwrap()
        assert_log_message(
            caplog.records, f"Will {WILL_ID} revoked: Superseded by a later will", "INFO"
        )
        assert will.status is WillStatus.REVOKED
        assert will.revoke("again").error == "Will is already revoked"
        assert will.accept_executor_appointment("exec-1").error == (
            "Cannot accept an appointment under a revoked will"
        )
        assert will.verify_witness("wit-1", "registrar-1", "national_id").error == (
            "Cannot verify a witness on a revoked will"
        )
