"""Base class for all aggregates."""

from __future__ import annotations

import abc
from typing import ClassVar

from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.errors import AggregateIdMismatchError
from urithi.domain.events import DomainEvent


class Aggregate(abc.ABC):
    """Generic base class for all aggregates.

    Aggregates hold their full state and record a domain event for every
    accepted mutation. Recorded events sit in a private outbox until the
    repository drains them with `dequeue_uncommitted` as part of a save.
    """

    STREAM_TYPE: ClassVar[str]
    """A string identifier for the type of event stream this aggregate uses.

    Concrete aggregate implementations must set this to distinguish their event streams.
    """

    def __init__(
        self, aggregate_id: str, *, clock: Clock = SYSTEM_CLOCK, version: int = 0
    ) -> None:
        self.aggregate_id: str = aggregate_id
        self.clock: Clock = clock
        self._version: int = version
        self._pending_events: list[DomainEvent] = []

    # --- Invariants ---

    @abc.abstractmethod
    def validate(self) -> None:
        """Check the aggregate's structural invariants.

        Raises:
            DomainError: A subclass describing the broken invariant.
        """

    # --- Plumbing ---

    def _record(self, event: DomainEvent) -> None:
        """Internal gate. Do not override.

        Performs aggregate ID check before queueing the event.
        """
        if event.aggregate_id != self.aggregate_id:
            raise AggregateIdMismatchError(self.aggregate_id, event.aggregate_id)
        self._pending_events.append(event)

    @property
    def pending_events(self) -> tuple[DomainEvent, ...]:
        """Events recorded since the last drain, oldest first (read-only view)."""
        return tuple(self._pending_events)

    def dequeue_uncommitted(self) -> list[DomainEvent]:
        """Dequeue all uncommitted events.

        Returns:
            A list of all uncommitted events since the last call to this method.

        Note: This is NOT thread-safe. It is the caller's responsibility to ensure
        that no other operations are performed on the aggregate between calls to this
        method.
        """

        uncommitted_events = self._pending_events
        self._pending_events = []
        return uncommitted_events

    def mark_committed(self, version: int) -> None:
        """Record the stream version reached by a successful save."""
        if version < self._version:
            raise ValueError(
                f"Version cannot go backwards ({version} < {self._version})"
            )
        self._version = version

    @property
    def version(self) -> int:
        """The current version of the aggregate."""
        return self._version
