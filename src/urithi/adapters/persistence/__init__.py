"""Snapshot store and outbox adapters."""

from .in_memory import InMemoryOutbox, InMemorySnapshotStore
from .sqlalchemy_adapters import SqlAlchemyOutbox, SqlAlchemySnapshotStore

__all__ = [
    "InMemoryOutbox",
    "InMemorySnapshotStore",
    "SqlAlchemyOutbox",
    "SqlAlchemySnapshotStore",
]
