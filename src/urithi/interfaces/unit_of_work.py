"""Unit of Work interface for Urithi.

Defines the AbstractUnitOfWork contract: a context-managed unit of work with
a SnapshotStore and an Outbox that commit or roll back together, plus the
hand-off of committed events to the publisher.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence

from .outbox import EventEnvelope, Outbox
from .snapshot_store import SnapshotStore


class AbstractUnitOfWork(abc.ABC):
    """Contract for a transactional unit of work."""

    snapshots: SnapshotStore
    outbox: Outbox

    def __init__(self) -> None:
        self._staged_envelopes: list[EventEnvelope] = []
        self._committed_envelopes: list[EventEnvelope] = []

    def __enter__(self) -> AbstractUnitOfWork:
        """Enter the unit of work context and return the unit.

        Implementations may acquire transactional resources here.
        """
        return self

    def __exit__(self, *args):
        """Exit the unit of work context.

        Default behavior is to roll back on exit.
        """
        self.rollback()

    def track(self, envelopes: Sequence[EventEnvelope]) -> None:
        """Remember envelopes written in this transaction for publication."""
        self._staged_envelopes.extend(envelopes)

    def commit(self) -> None:
        """Persist changes and finalize the transaction."""
        self._commit()
        self._committed_envelopes.extend(self._staged_envelopes)
        self._staged_envelopes = []

    def rollback(self) -> None:
        """Revert uncommitted changes and clean up transactional resources."""
        self._rollback()
        self._staged_envelopes = []

    def collect_new_events(self) -> list[EventEnvelope]:
        """Drain the envelopes committed since the last call.

        Each committed envelope is returned exactly once.
        """
        envelopes = self._committed_envelopes
        self._committed_envelopes = []
        return envelopes

    @abc.abstractmethod
    def _commit(self) -> None:
        """Backend-specific commit."""

    @abc.abstractmethod
    def _rollback(self) -> None:
        """Backend-specific rollback; must be safe after a commit."""
