"""Construction-time invariants of `EventEnvelope`, `Snapshot` and batches."""

from datetime import datetime, timedelta, timezone

import pytest

from urithi.interfaces.outbox import EventEnvelope, InvalidEnvelopeError, check_batch
from urithi.interfaces.snapshot_store import InvalidSnapshotError, Snapshot

# pylint: disable=too-few-public-methods


def make_event(**overrides):
    kwargs = {
        "stream_id": "deceased-001",
        "stream_type": "Estate",
        "version": 1,
        "event_id": "01J9Z8X0000000000000000000",
        "event_type": "EstateCreated",
        "payload": {"estate_id": "deceased-001"},
    }
    kwargs.update(overrides)
    return EventEnvelope(**kwargs)


class TestEventEnvelope:
    """Tests for `EventEnvelope` validation."""

    @staticmethod
    def test_event_id_length():
        """Event ids are ULID-sized."""
        with pytest.raises(InvalidEnvelopeError, match="26-character ULID"):
            make_event(event_id="short")

    @pytest.mark.parametrize("bad_version", [-1, 0], ids=["negative", "zero"])
    @staticmethod
    def test_version_positive(bad_version):
        """Versions start at one."""
        with pytest.raises(InvalidEnvelopeError, match="version must be >= 1"):
            make_event(version=bad_version)

    @staticmethod
    def test_global_seq_positive():
        """An assigned sequence number starts at one."""
        with pytest.raises(InvalidEnvelopeError, match="global_seq must be >= 1"):
            make_event(global_seq=0)

    @pytest.mark.parametrize(
        ("recorded_at", "match"),
        [
            (datetime(2025, 6, 1, 9, 0), "tz-aware"),
            (datetime(2025, 6, 1, 9, 0, tzinfo=timezone(timedelta(hours=3))), "UTC"),
        ],
        ids=["naive", "nairobi"],
    )
    @staticmethod
    def test_recorded_at_utc(recorded_at, match):
        """Recorded times are UTC."""
        with pytest.raises(InvalidEnvelopeError, match=match):
            make_event(recorded_at=recorded_at)

    @pytest.mark.parametrize("field", ["stream_id", "stream_type", "event_type"])
    @staticmethod
    def test_blank_names(field):
        """Identifying names must not be blank."""
        with pytest.raises(InvalidEnvelopeError, match="must be non-empty"):
            make_event(**{field: "  "})


class TestCheckBatch:
    """Tests for `check_batch`."""

    @staticmethod
    def test_valid_and_empty():
        """Contiguous single-stream batches pass, as does an empty one."""
        check_batch([])
        check_batch(
            [make_event(), make_event(version=2, event_id="01J9Z8X0000000000000000001")]
        )

    @pytest.mark.parametrize(
        ("second", "match"),
        [
            ({"stream_id": "deceased-002"}, "Mixed streams"),
            ({"global_seq": 7}, "global_seq must be None"),
            ({"event_id": "01J9Z8X0000000000000000000"}, "Duplicate event_id"),
            ({"version": 3}, "contiguous"),
        ],
    )
    @staticmethod
    def test_invalid(second, match):
        """Each batch rule is enforced."""
        fields = {"version": 2, "event_id": "01J9Z8X0000000000000000001"}
        fields.update(second)
        with pytest.raises(InvalidEnvelopeError, match=match):
            check_batch([make_event(), make_event(**fields)])


class TestSnapshot:
    """Tests for `Snapshot` validation."""

    @staticmethod
    def test_version_positive():
        """Stored snapshots start at version one."""
        with pytest.raises(InvalidSnapshotError, match="version must be >= 1"):
            Snapshot(stream_id="deceased-001", stream_type="Estate", version=0, state={})

    @staticmethod
    def test_blank_ids():
        """Ids must not be blank."""
        with pytest.raises(InvalidSnapshotError):
            Snapshot(stream_id=" ", stream_type="Estate", version=1, state={})
