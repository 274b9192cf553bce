"""Persistence schema.

Two tables, written in one transaction per unit of work:

``aggregate_snapshots``
    One row per aggregate holding its latest JSON state. ``version`` guards
    optimistic concurrency: an update only succeeds against the version the
    writer loaded.

``event_outbox``
    Append-only log of the domain events each save produced, in global
    order, for publication and audit.

| Constraint                        | Purpose                          |
|-----------------------------------|----------------------------------|
| PK(stream_id) on snapshots        | one current state per aggregate  |
| UNIQUE(stream_id, version)        | no two events claim one version  |
| UNIQUE(event_id)                  | ULID uniqueness                  |
| CHECK(length(event_id) = 26)      | ULID length                      |
| CHECK(version >= 1)               | versions start at 1              |
"""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    Identity,
    Index,
    Integer,
    String,
    Table,
    UniqueConstraint,
    text,
)

from urithi.adapters.db.metadata import metadata
from urithi.adapters.db.sa_types import BIGINT_PK, JSON_DOCUMENT, UTCDateTime

__all__ = ["aggregate_snapshots", "event_outbox"]

aggregate_snapshots = Table(
    "aggregate_snapshots",
    metadata,
    Column("stream_id", String(200), primary_key=True, comment="Aggregate id."),
    Column(
        "stream_type",
        String(100),
        nullable=False,
        comment="Aggregate kind (e.g. Estate, Will).",
    ),
    Column(
        "version",
        Integer,
        nullable=False,
        comment="Version reached by the last save; used for optimistic concurrency.",
    ),
    Column("state", JSON_DOCUMENT, nullable=False, comment="Serialized aggregate."),
    Column(
        "updated_at",
        UTCDateTime(),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
    CheckConstraint("version >= 1", name="positive_version"),
    Index(None, "stream_type"),
    comment="Latest state of every aggregate.",
)

event_outbox = Table(
    "event_outbox",
    metadata,
    Column(
        "global_seq",
        BIGINT_PK,
        Identity(start=1),
        primary_key=True,
        comment="Global, monotonically increasing sequence across all streams.",
    ),
    Column("stream_id", String(200), nullable=False),
    Column("stream_type", String(100), nullable=False),
    Column("version", Integer, nullable=False),
    Column("event_id", String(26), nullable=False, unique=True),
    Column("event_type", String(120), nullable=False),
    Column(
        "recorded_at",
        UTCDateTime(),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
    Column("payload", JSON_DOCUMENT, nullable=False),
    Column("metadata", JSON_DOCUMENT, nullable=True),
    UniqueConstraint("stream_id", "version"),
    CheckConstraint("version >= 1", name="positive_version"),
    CheckConstraint("length(event_id) = 26", name="event_id_26_char"),
    Index(None, "stream_id", "global_seq"),
    Index(None, "event_type"),
    comment="Append-only log of domain events awaiting or past publication.",
)
