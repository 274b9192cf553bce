"""Units of work for Urithi.

`SqlAlchemyUnitOfWork` opens a connection per `with` block and hands the
same connection to the snapshot store and the outbox, so both writes share
one transaction. `InMemoryUnitOfWork` keeps its stores across blocks and
rolls back by restoring a checkpoint taken on entry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from urithi.adapters.persistence import (
    InMemoryOutbox,
    InMemorySnapshotStore,
    SqlAlchemyOutbox,
    SqlAlchemySnapshotStore,
)
from urithi.interfaces.unit_of_work import AbstractUnitOfWork

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """SQLAlchemy-backed Unit of Work."""

    def __init__(self, engine: Engine):
        super().__init__()
        self.engine = engine
        self.connection: Connection

    def __enter__(self):
        self.connection = self.engine.connect()
        self.snapshots = SqlAlchemySnapshotStore(self.connection)
        self.outbox = SqlAlchemyOutbox(self.connection)
        return super().__enter__()

    def __exit__(self, *args):
        super().__exit__(*args)
        self.connection.close()

    def _commit(self):
        self.connection.commit()

    def _rollback(self):
        self.connection.rollback()


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """Non-durable Unit of Work for tests and prototyping."""

    def __init__(self) -> None:
        super().__init__()
        self.snapshots = InMemorySnapshotStore()
        self.outbox = InMemoryOutbox()
        self.committed = False
        self._checkpoint: tuple[Any, Any] | None = None

    def __enter__(self):
        self._checkpoint = (self.snapshots.checkpoint(), self.outbox.checkpoint())
        self.committed = False
        return super().__enter__()

    def _commit(self):
        self._checkpoint = (self.snapshots.checkpoint(), self.outbox.checkpoint())
        self.committed = True

    def _rollback(self):
        if self._checkpoint is not None:
            snapshots, outbox = self._checkpoint
            self.snapshots.restore(snapshots)
            self.outbox.restore(outbox)
