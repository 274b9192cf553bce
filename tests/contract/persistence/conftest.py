"""Fixtures for snapshot store and outbox contract tests.

Every test runs once per backend: the in-memory adapters and the SQLAlchemy
adapters on an in-memory SQLite database.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterable
from typing import Any

import pytest

from urithi.adapters.persistence import (
    InMemoryOutbox,
    InMemorySnapshotStore,
    SqlAlchemyOutbox,
    SqlAlchemySnapshotStore,
)
from urithi.interfaces.outbox import EventEnvelope, Outbox
from urithi.interfaces.snapshot_store import Snapshot, SnapshotStore

# pylint: disable=redefined-outer-name

_counter = itertools.count(1)


def make_ulid() -> str:
    """A unique 26-character id (the right length, not a real ULID)."""
    return f"{next(_counter):026d}"


@pytest.fixture
def make_envelope() -> Callable[..., EventEnvelope]:
    """Factory for valid, not yet persisted envelopes."""

    def _make(
        *,
        stream_id: str = "deceased-001",
        stream_type: str = "Estate",
        version: int = 1,
        event_type: str = "EstateCreated",
        event_id: str | None = None,
        payload: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> EventEnvelope:
        return EventEnvelope(
            stream_id=stream_id,
            stream_type=stream_type,
            version=version,
            event_id=event_id or make_ulid(),
            event_type=event_type,
            payload=payload or {"estate_id": stream_id},
            metadata=metadata,
        )

    return _make


@pytest.fixture
def make_snapshot() -> Callable[..., Snapshot]:
    def _make(
        *,
        stream_id: str = "deceased-001",
        stream_type: str = "Estate",
        version: int = 1,
        state: dict[str, Any] | None = None,
    ) -> Snapshot:
        return Snapshot(
            stream_id=stream_id,
            stream_type=stream_type,
            version=version,
            state=state if state is not None else {"schema": 1, "version": version},
        )

    return _make


@pytest.fixture(params=["memory", "sqlite"])
def outbox(request: pytest.FixtureRequest, sqlite_engine_memory) -> Iterable[Outbox]:
    """A fresh outbox per backend."""
    match request.param:
        case "memory":
            yield InMemoryOutbox()
        case "sqlite":
            with sqlite_engine_memory.begin() as connection:
                yield SqlAlchemyOutbox(connection)
        case _:
            raise ValueError(f"unknown outbox type: {request.param}")


@pytest.fixture(params=["memory", "sqlite"])
def snapshot_store(
    request: pytest.FixtureRequest, sqlite_engine_memory
) -> Iterable[SnapshotStore]:
    """A fresh snapshot store per backend."""
    match request.param:
        case "memory":
            yield InMemorySnapshotStore()
        case "sqlite":
            with sqlite_engine_memory.begin() as connection:
                yield SqlAlchemySnapshotStore(connection)
        case _:
            raise ValueError(f"unknown snapshot store type: {request.param}")
