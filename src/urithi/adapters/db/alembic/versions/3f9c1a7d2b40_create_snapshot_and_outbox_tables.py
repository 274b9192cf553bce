"""Create aggregate_snapshots and event_outbox tables

Revision ID: 3f9c1a7d2b40
Revises:
Create Date: 2025-10-02

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from urithi.adapters.db.sa_types import BIGINT_PK, JSON_DOCUMENT, UTCDateTime

# pylint: disable=no-member

# revision identifiers, used by Alembic.
revision: str = "3f9c1a7d2b40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

OUTBOX_STREAM_INDEX = "ix_event_outbox_event_outbox_stream_id_event_outbox_global_seq"
OUTBOX_TYPE_INDEX = "ix_event_outbox_event_outbox_event_type"
SNAPSHOT_TYPE_INDEX = "ix_aggregate_snapshots_aggregate_snapshots_stream_type"


def upgrade() -> None:
    """Upgrade schema."""
    dialect = op.get_bind().dialect.name

    op.create_table(
        "aggregate_snapshots",
        sa.Column("stream_id", sa.String(length=200), nullable=False, comment="Aggregate id."),
        sa.Column(
            "stream_type",
            sa.String(length=100),
            nullable=False,
            comment="Aggregate kind (e.g. Estate, Will).",
        ),
        sa.Column(
            "version",
            sa.Integer(),
            nullable=False,
            comment="Version reached by the last save; used for optimistic concurrency.",
        ),
        sa.Column("state", JSON_DOCUMENT, nullable=False, comment="Serialized aggregate."),
        sa.Column(
            "updated_at",
            UTCDateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "version >= 1", name=op.f("ck_aggregate_snapshots_positive_version")
        ),
        sa.PrimaryKeyConstraint("stream_id", name=op.f("pk_aggregate_snapshots")),
        comment="Latest state of every aggregate.",
    )
    op.create_index(
        op.f(SNAPSHOT_TYPE_INDEX), "aggregate_snapshots", ["stream_type"], unique=False
    )

    op.create_table(
        "event_outbox",
        sa.Column(
            "global_seq",
            BIGINT_PK,
            sa.Identity(always=False, start=1),
            nullable=False,
            comment="Global, monotonically increasing sequence across all streams.",
        ),
        sa.Column("stream_id", sa.String(length=200), nullable=False),
        sa.Column("stream_type", sa.String(length=100), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.String(length=26), nullable=False),
        sa.Column("event_type", sa.String(length=120), nullable=False),
        sa.Column(
            "recorded_at",
            UTCDateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("payload", JSON_DOCUMENT, nullable=False),
        sa.Column("metadata", JSON_DOCUMENT, nullable=True),
        sa.CheckConstraint(
            "length(event_id) = 26", name=op.f("ck_event_outbox_event_id_26_char")
        ),
        sa.CheckConstraint("version >= 1", name=op.f("ck_event_outbox_positive_version")),
        sa.PrimaryKeyConstraint("global_seq", name=op.f("pk_event_outbox")),
        sa.UniqueConstraint("event_id", name=op.f("uq_event_outbox_event_id")),
        sa.UniqueConstraint(
            "stream_id", "version", name=op.f("uq_event_outbox_stream_id_version")
        ),
        comment="Append-only log of domain events awaiting or past publication.",
    )
    op.create_index(op.f(OUTBOX_TYPE_INDEX), "event_outbox", ["event_type"], unique=False)
    op.create_index(
        op.f(OUTBOX_STREAM_INDEX),
        "event_outbox",
        ["stream_id", "global_seq"],
        unique=False,
    )

    # ---- APPEND-ONLY ENFORCEMENT ----
    if dialect == "postgresql":  # pylint: disable=magic-value-comparison
        op.execute(
            """
            CREATE OR REPLACE FUNCTION event_outbox_forbid_mod() RETURNS trigger
            LANGUAGE plpgsql AS $$
            BEGIN
              RAISE EXCEPTION 'event_outbox is append-only; % not allowed', TG_OP
              USING ERRCODE = '0A000';
            END;
            $$;
            """
        )
        op.execute(
            """
            CREATE TRIGGER tr_event_outbox_append_only
            BEFORE UPDATE OR DELETE ON event_outbox
            FOR EACH ROW
            EXECUTE FUNCTION event_outbox_forbid_mod();
            """
        )
    else:
        op.execute(
            """
            CREATE TRIGGER tr_event_outbox_no_update
            BEFORE UPDATE ON event_outbox
            BEGIN
              SELECT RAISE(ABORT, 'event_outbox is append-only; UPDATE not allowed');
            END;
            """
        )
        op.execute(
            """
            CREATE TRIGGER tr_event_outbox_no_delete
            BEFORE DELETE ON event_outbox
            BEGIN
              SELECT RAISE(ABORT, 'event_outbox is append-only; DELETE not allowed');
            END;
            """
        )


def downgrade() -> None:
    """Downgrade schema."""
    dialect = op.get_bind().dialect.name

    if dialect == "postgresql":  # pylint: disable=magic-value-comparison,R6103
        op.execute("DROP TRIGGER IF EXISTS tr_event_outbox_append_only ON event_outbox;")
        op.execute("DROP FUNCTION IF EXISTS event_outbox_forbid_mod();")
    else:
        op.execute("DROP TRIGGER IF EXISTS tr_event_outbox_no_delete;")
        op.execute("DROP TRIGGER IF EXISTS tr_event_outbox_no_update;")

    op.drop_index(op.f(OUTBOX_STREAM_INDEX), table_name="event_outbox")
    op.drop_index(op.f(OUTBOX_TYPE_INDEX), table_name="event_outbox")
    op.drop_table("event_outbox")
    op.drop_index(op.f(SNAPSHOT_TYPE_INDEX), table_name="aggregate_snapshots")
    op.drop_table("aggregate_snapshots")
