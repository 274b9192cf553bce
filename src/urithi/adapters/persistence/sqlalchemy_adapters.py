"""SQLAlchemy-backed snapshot store and outbox.

Both adapters work on a caller-owned `Connection`; the unit of work owns
the transaction, so a snapshot and the events it produced are committed or
rolled back together. Driver errors are mapped to the port exceptions.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from sqlalchemy import Select, insert, select, update
from sqlalchemy.engine import Connection
from sqlalchemy.exc import DataError, DBAPIError, IntegrityError

from urithi.interfaces.outbox import (
    DuplicateEventIdError,
    EventEnvelope,
    InvalidEnvelopeError,
    Outbox,
    OutboxUnavailableError,
    check_batch,
)
from urithi.interfaces.snapshot_store import (
    InvalidSnapshotError,
    Snapshot,
    SnapshotStore,
    SnapshotStoreError,
    VersionConflictError,
)

from .schema import aggregate_snapshots, event_outbox

# all keywords must be present in the driver message
UNIQUE_KEYWORDS = ("unique",)  # pragma: no mutate

EMPTY_STRING = ""  # pragma: no mutate


def _driver_message(error: DBAPIError) -> str:
    return str(error.orig) if error.orig not in (None, EMPTY_STRING) else str(error)


class SqlAlchemySnapshotStore(SnapshotStore):
    """Snapshots in the ``aggregate_snapshots`` table."""

    def __init__(self, connection: Connection):
        self.connection = connection

    # --------------------------------------------------------------------- #
    # Interface implementation
    # --------------------------------------------------------------------- #

    def load(self, stream_id: str) -> Snapshot | None:
        stmt = select(aggregate_snapshots).where(
            aggregate_snapshots.c.stream_id == stream_id
        )
        row = self.connection.execute(stmt).mappings().one_or_none()
        return Snapshot(**row) if row is not None else None

    def save(self, snapshot: Snapshot, expected_version: int) -> Snapshot:
        if snapshot.version <= expected_version:
            raise InvalidSnapshotError(
                f"version {snapshot.version} does not advance past {expected_version}"
            )
        values = {
            "stream_type": snapshot.stream_type,
            "version": snapshot.version,
            "state": snapshot.state,
            "updated_at": datetime.now(timezone.utc),
        }
        try:
            if expected_version == 0:
                self.connection.execute(
                    insert(aggregate_snapshots).values(
                        stream_id=snapshot.stream_id, **values
                    )
                )
            else:
                result = self.connection.execute(
                    update(aggregate_snapshots)
                    .where(aggregate_snapshots.c.stream_id == snapshot.stream_id)
                    .where(aggregate_snapshots.c.version == expected_version)
                    .values(**values)
                )
                if result.rowcount != 1:
                    raise VersionConflictError(
                        snapshot.stream_id, expected_version, self._version_of(snapshot)
                    )
        except IntegrityError as e:
            raise VersionConflictError(snapshot.stream_id, expected_version, None) from e
        except DBAPIError as e:
            raise SnapshotStoreError(_driver_message(e)) from e

        stored = self.load(snapshot.stream_id)
        if stored is None:  # pragma: no cover
            raise SnapshotStoreError(f"snapshot {snapshot.stream_id} vanished on save")
        return stored

    def list_stream_ids(self, stream_type: str) -> Iterable[str]:
        stmt = (
            select(aggregate_snapshots.c.stream_id)
            .where(aggregate_snapshots.c.stream_type == stream_type)
            .order_by(aggregate_snapshots.c.stream_id)
        )
        yield from self.connection.execute(stmt).scalars().all()

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    def _version_of(self, snapshot: Snapshot) -> int | None:
        stmt = select(aggregate_snapshots.c.version).where(
            aggregate_snapshots.c.stream_id == snapshot.stream_id
        )
        return self.connection.execute(stmt).scalar_one_or_none()


class SqlAlchemyOutbox(Outbox):
    """Events in the ``event_outbox`` table."""

    def __init__(self, connection: Connection):
        self.connection = connection

    # --------------------------------------------------------------------- #
    # Interface implementation
    # --------------------------------------------------------------------- #

    def append(self, envelopes: Sequence[EventEnvelope]) -> Sequence[EventEnvelope]:
        if not envelopes:
            return []
        check_batch(envelopes)

        rows = [
            {
                "stream_id": e.stream_id,
                "stream_type": e.stream_type,
                "version": e.version,
                "event_id": e.event_id,
                "event_type": e.event_type,
                "payload": e.payload,
                "metadata": e.metadata,
                "recorded_at": e.recorded_at or datetime.now(timezone.utc),
            }
            for e in envelopes
        ]
        try:
            persisted = (
                self.connection.execute(
                    insert(event_outbox).values(rows).returning(event_outbox)
                )
                .mappings()
                .all()
            )
        except IntegrityError as e:
            msg = _driver_message(e)
            if all(kw in msg.lower() for kw in UNIQUE_KEYWORDS):
                raise DuplicateEventIdError(msg) from e
            raise InvalidEnvelopeError(msg) from e
        except DataError as e:
            raise InvalidEnvelopeError(str(e)) from e
        except DBAPIError as e:
            raise OutboxUnavailableError(str(e)) from e

        by_id = {row["event_id"]: EventEnvelope(**row) for row in persisted}
        return [by_id[e.event_id] for e in envelopes]

    def read_stream(self, stream_id: str) -> Iterable[EventEnvelope]:
        stmt: Select = (
            select(event_outbox)
            .where(event_outbox.c.stream_id == stream_id)
            .order_by(event_outbox.c.version.asc())
        )
        for row in self.connection.execute(stmt).mappings().all():
            yield EventEnvelope(**row)

    def read_since(
        self, global_seq: int = 0, limit: int | None = None
    ) -> Iterable[EventEnvelope]:
        if global_seq < 0:
            raise ValueError("global_seq must be >= 0")
        if limit is not None and limit < 1:
            raise ValueError("limit cannot be <= 0")

        stmt: Select = (
            select(event_outbox)
            .where(event_outbox.c.global_seq > global_seq)
            .order_by(event_outbox.c.global_seq.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        for row in self.connection.execute(stmt).mappings().all():
            yield EventEnvelope(**row)
