"""Read-side helpers for entry points.

Queries load aggregates from their snapshots and never write.
"""

from __future__ import annotations

from urithi.domain.aggregates import Estate, EstateFinancialSummary
from urithi.domain.clock import Clock
from urithi.domain.statutes import StatuteSchedule
from urithi.interfaces.unit_of_work import AbstractUnitOfWork

from .repositories import EstateSnapshotMapper


def estate_summary(
    estate_id: str,
    uow: AbstractUnitOfWork,
    clock: Clock,
    schedule: StatuteSchedule,
) -> EstateFinancialSummary | None:
    """Financial summary of an estate, or None if there is no such estate."""
    with uow:
        snapshot = uow.snapshots.load(estate_id)
        if snapshot is None or snapshot.stream_type != Estate.STREAM_TYPE:
            return None
        estate = EstateSnapshotMapper(clock=clock, schedule=schedule).from_state(
            snapshot.stream_id, snapshot.state, snapshot.version
        )
    return estate.summary()


def estate_ids(uow: AbstractUnitOfWork) -> list[str]:
    with uow:
        return list(uow.snapshots.list_stream_ids(Estate.STREAM_TYPE))
