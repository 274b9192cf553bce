"""Snapshot store interface.

Aggregates are persisted as a JSON-compatible state document ("snapshot")
keyed by stream id. Saves are guarded by optimistic concurrency: the caller
passes the version it loaded, and the store refuses the write if another
writer got there first.
"""

import abc
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any


class SnapshotStoreError(Exception):
    """Base class for snapshot store errors."""


class VersionConflictError(SnapshotStoreError):
    """Stored version does not match the expected version (optimistic concurrency)."""

    def __init__(self, stream_id: str, expected: int, actual: int | None) -> None:
        super().__init__(
            f"Version conflict on {stream_id}: expected {expected}, found {actual}."
        )
        self.stream_id = stream_id
        self.expected = expected
        self.actual = actual


class InvalidSnapshotError(SnapshotStoreError):
    """The snapshot is malformed."""


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Persisted state of one aggregate at one version."""

    stream_id: str
    stream_type: str
    version: int
    state: dict[str, Any]
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.stream_id.strip() or not self.stream_type.strip():
            raise InvalidSnapshotError("stream_id and stream_type must be non-empty.")
        if self.version < 1:
            raise InvalidSnapshotError("version must be >= 1")


class SnapshotStore(abc.ABC):
    """Load and save aggregate snapshots."""

    @abc.abstractmethod
    def load(self, stream_id: str) -> Snapshot | None:
        """Return the latest snapshot for *stream_id*, or None if absent."""

    @abc.abstractmethod
    def save(self, snapshot: Snapshot, expected_version: int) -> Snapshot:
        """Write *snapshot*, replacing the one at *expected_version*.

        Args:
            snapshot: The new state; its version must exceed *expected_version*.
            expected_version: Version the caller loaded; 0 for a new stream.

        Raises:
            VersionConflictError: If the stored version differs.
            InvalidSnapshotError: If the new version does not advance.

        Returns:
            The stored snapshot with `updated_at` populated.
        """

    @abc.abstractmethod
    def list_stream_ids(self, stream_type: str) -> Iterable[str]:
        """Yield the stream ids of every stored snapshot of *stream_type*."""
