"""In-memory snapshot store and outbox.

All data lives in the instance and is lost when it is discarded. Use for
unit tests, prototyping, or anywhere durability is not required. Both
classes support `checkpoint` / `restore` so an in-memory unit of work can
roll back.

These implementations pass the same contract tests as the SQLAlchemy ones.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime, timezone

from urithi.interfaces.outbox import (
    DuplicateEventIdError,
    EventEnvelope,
    Outbox,
    check_batch,
)
from urithi.interfaces.snapshot_store import (
    InvalidSnapshotError,
    Snapshot,
    SnapshotStore,
    VersionConflictError,
)


class InMemorySnapshotStore(SnapshotStore):
    """Dictionary-backed SnapshotStore."""

    def __init__(self) -> None:
        self._snapshots: dict[str, Snapshot] = {}

    # --------------------------------------------------------------------- #
    # Interface implementation
    # --------------------------------------------------------------------- #

    def load(self, stream_id: str) -> Snapshot | None:
        snapshot = self._snapshots.get(stream_id)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    def save(self, snapshot: Snapshot, expected_version: int) -> Snapshot:
        current = self._snapshots.get(snapshot.stream_id)
        actual = current.version if current is not None else 0
        if actual != expected_version:
            raise VersionConflictError(snapshot.stream_id, expected_version, actual)
        if snapshot.version <= expected_version:
            raise InvalidSnapshotError(
                f"version {snapshot.version} does not advance past {expected_version}"
            )
        stored = replace(
            copy.deepcopy(snapshot), updated_at=datetime.now(timezone.utc)
        )
        self._snapshots[snapshot.stream_id] = stored
        return copy.deepcopy(stored)

    def list_stream_ids(self, stream_type: str) -> Iterable[str]:
        for stream_id, snapshot in self._snapshots.items():
            if snapshot.stream_type == stream_type:
                yield stream_id

    # --------------------------------------------------------------------- #
    # Transactions
    # --------------------------------------------------------------------- #

    def checkpoint(self) -> dict[str, Snapshot]:
        return dict(self._snapshots)

    def restore(self, checkpoint: dict[str, Snapshot]) -> None:
        self._snapshots = dict(checkpoint)


class InMemoryOutbox(Outbox):
    """List-backed Outbox."""

    def __init__(self) -> None:
        self._events: list[EventEnvelope] = []

    # --------------------------------------------------------------------- #
    # Interface implementation
    # --------------------------------------------------------------------- #

    def append(self, envelopes: Sequence[EventEnvelope]) -> Sequence[EventEnvelope]:
        if not envelopes:
            return []
        check_batch(envelopes)

        known_ids = {e.event_id for e in self._events}
        known_versions = {(e.stream_id, e.version) for e in self._events}
        for envelope in envelopes:
            if envelope.event_id in known_ids:
                raise DuplicateEventIdError(f"duplicate event_id {envelope.event_id}")
            if (envelope.stream_id, envelope.version) in known_versions:
                raise DuplicateEventIdError(
                    f"{envelope.stream_id} already has version {envelope.version}"
                )

        now = datetime.now(timezone.utc)
        appended = [
            replace(envelope, global_seq=len(self._events) + i, recorded_at=now)
            for i, envelope in enumerate(envelopes, start=1)
        ]
        self._events.extend(appended)
        return appended

    def read_stream(self, stream_id: str) -> Iterable[EventEnvelope]:
        yield from sorted(
            (e for e in self._events if e.stream_id == stream_id),
            key=lambda e: e.version,
        )

    def read_since(
        self, global_seq: int = 0, limit: int | None = None
    ) -> Iterable[EventEnvelope]:
        if global_seq < 0:
            raise ValueError("global_seq must be >= 0")
        if limit is not None and limit <= 0:
            raise ValueError("limit cannot be <= 0")

        if limit is not None:
            yield from self._events[global_seq : global_seq + limit]
        else:
            yield from self._events[global_seq:]

    # --------------------------------------------------------------------- #
    # Transactions
    # --------------------------------------------------------------------- #

    def checkpoint(self) -> int:
        return len(self._events)

    def restore(self, checkpoint: int) -> None:
        del self._events[checkpoint:]
