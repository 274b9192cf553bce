"""Module for snapshot-backed aggregate repositories."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from urithi.domain.aggregates import Aggregate, Estate, Will
from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.statutes import DEFAULT_STATUTE_SCHEDULE, StatuteSchedule
from urithi.interfaces.id_generator import IdGenerator
from urithi.interfaces.outbox import EventEnvelope
from urithi.interfaces.snapshot_store import Snapshot
from urithi.interfaces.unit_of_work import AbstractUnitOfWork

from .errors import AggregateNotFoundError
from .event_mapper import EventMapper
from .snapshot_mapper import EstateSnapshotMapper, SnapshotMapper, WillSnapshotMapper

# ============================================================================
#                      Generic Snapshot-Backed Repository
# ============================================================================


T = TypeVar("T", bound=Aggregate)


class AggregateRepository(Generic[T]):
    """Loads and saves aggregates of one type inside a unit of work.

    A save writes the aggregate's new snapshot and the events it recorded in
    the same transaction. The snapshot version is the number of events the
    aggregate has ever recorded, so the outbox versions of a stream run
    1, 2, 3, ... without gaps. The unit of work is told about the written
    envelopes so the message bus can publish them after commit.
    """

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        event_id_generator: IdGenerator,
        snapshot_mapper: SnapshotMapper[T],
        event_mapper: EventMapper | None = None,
    ) -> None:
        self.uow = uow
        self.event_id_generator = event_id_generator
        self.snapshot_mapper = snapshot_mapper
        self.event_mapper = event_mapper if event_mapper is not None else EventMapper()

    @property
    def aggregate_cls(self) -> type[T]:
        return self.snapshot_mapper.aggregate_cls

    # --- Loads ---

    def find(self, aggregate_id: str) -> T | None:
        """Return the aggregate, or None if there is no such aggregate of this type."""
        snapshot = self.uow.snapshots.load(aggregate_id)
        if snapshot is None or snapshot.stream_type != self.aggregate_cls.STREAM_TYPE:
            return None
        return self.snapshot_mapper.from_state(
            snapshot.stream_id, snapshot.state, snapshot.version
        )

    def get(self, aggregate_id: str) -> T:
        """Get an aggregate from its ID.

        Args:
            aggregate_id: The ID of the aggregate to retrieve.
        Raises:
            AggregateNotFoundError: If the aggregate does not exist.
        Returns:
            The aggregate
        """
        if (aggregate := self.find(aggregate_id)) is None:
            raise AggregateNotFoundError(
                aggregate_type_name=self.aggregate_cls.__name__,
                aggregate_id=aggregate_id,
            )
        return aggregate

    def list_ids(self) -> list[str]:
        return list(self.uow.snapshots.list_stream_ids(self.aggregate_cls.STREAM_TYPE))

    # --- Saves ---

    def save(
        self, aggregate: T, metadata: dict[str, Any] | None = None
    ) -> Sequence[EventEnvelope]:
        """Persist the aggregate's state and drain its recorded events.

        An aggregate with no recorded events is not written.

        Raises:
            VersionConflictError: If the stored aggregate moved on since it was
                loaded.
            DomainError: If the aggregate breaks an invariant.
        """
        aggregate.validate()
        events = aggregate.dequeue_uncommitted()
        if not events:
            return []

        expected_version = aggregate.version
        new_version = expected_version + len(events)
        envelopes = [
            self.event_mapper.to_envelope(
                stream_id=aggregate.aggregate_id,
                stream_type=aggregate.STREAM_TYPE,
                version=expected_version + i,
                event_id=self.event_id_generator.new_id(),
                event=event,
                metadata=metadata,
            )
            for i, event in enumerate(events, start=1)
        ]

        self.uow.snapshots.save(
            Snapshot(
                stream_id=aggregate.aggregate_id,
                stream_type=aggregate.STREAM_TYPE,
                version=new_version,
                state=self.snapshot_mapper.to_state(aggregate),
            ),
            expected_version=expected_version,
        )
        persisted = self.uow.outbox.append(envelopes)
        self.uow.track(persisted)
        aggregate.mark_committed(new_version)
        return persisted


# ============================================================================
#                          Concrete Repositories
# ============================================================================


class EstateRepository(AggregateRepository[Estate]):
    """Repository for Estate aggregates."""

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        event_id_generator: IdGenerator,
        *,
        clock: Clock = SYSTEM_CLOCK,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> None:
        super().__init__(
            uow, event_id_generator, EstateSnapshotMapper(clock=clock, schedule=schedule)
        )


class WillRepository(AggregateRepository[Will]):
    """Repository for Will aggregates."""

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        event_id_generator: IdGenerator,
        *,
        clock: Clock = SYSTEM_CLOCK,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> None:
        super().__init__(
            uow, event_id_generator, WillSnapshotMapper(clock=clock, schedule=schedule)
        )
