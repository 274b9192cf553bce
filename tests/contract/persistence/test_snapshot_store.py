"""Contract tests for the SnapshotStore port.

Backend-agnostic behaviour:
- a saved snapshot loads back with its state and a UTC ``updated_at``
- saves are guarded by the expected version
- versions must advance
- stream ids are listed per stream type
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from urithi.interfaces.snapshot_store import (
    InvalidSnapshotError,
    SnapshotStore,
    VersionConflictError,
)

# pylint: disable=magic-value-comparison

STATE = {
    "schema": 1,
    "deceased_name": "Wanjiru Kamau",
    "assets": [{"id": "E00001", "value": "1000000.00", "verified": True}],
    "frozen": None,
}


def test_missing(snapshot_store: SnapshotStore):
    """Unknown ids load as None."""
    assert snapshot_store.load("nobody") is None


def test_save_and_load(snapshot_store: SnapshotStore, make_snapshot):
    """State survives a round trip through the store."""
    snapshot_store.save(make_snapshot(version=3, state=STATE), expected_version=0)
    loaded = snapshot_store.load("deceased-001")
    assert loaded is not None
    assert loaded.version == 3
    assert loaded.stream_type == "Estate"
    assert loaded.state == STATE
    assert loaded.updated_at is not None
    assert loaded.updated_at.utcoffset() == timedelta(0)


def test_update(snapshot_store: SnapshotStore, make_snapshot):
    """A save against the loaded version replaces the snapshot."""
    snapshot_store.save(make_snapshot(version=1), expected_version=0)
    stored = snapshot_store.save(
        make_snapshot(version=4, state={"schema": 1, "updated": True}), expected_version=1
    )
    assert stored.version == 4
    assert snapshot_store.load("deceased-001").state == {"schema": 1, "updated": True}


@pytest.mark.parametrize("expected_version", [0, 2])
def test_stale_version_conflicts(snapshot_store: SnapshotStore, make_snapshot, expected_version):
    """Writers holding a stale version are refused."""
    snapshot_store.save(make_snapshot(version=1), expected_version=0)
    with pytest.raises(VersionConflictError):
        snapshot_store.save(make_snapshot(version=5), expected_version=expected_version)
    assert snapshot_store.load("deceased-001").version == 1


def test_new_stream_with_version(snapshot_store: SnapshotStore, make_snapshot):
    """A first save must claim version zero."""
    with pytest.raises(VersionConflictError):
        snapshot_store.save(make_snapshot(version=2), expected_version=1)


def test_version_must_advance(snapshot_store: SnapshotStore, make_snapshot):
    """The new version must exceed the expected one."""
    snapshot_store.save(make_snapshot(version=2), expected_version=0)
    with pytest.raises(InvalidSnapshotError):
        snapshot_store.save(make_snapshot(version=2), expected_version=2)


def test_list_stream_ids(snapshot_store: SnapshotStore, make_snapshot):
    """Ids are listed for the requested type only."""
    snapshot_store.save(make_snapshot(stream_id="deceased-001"), expected_version=0)
    snapshot_store.save(make_snapshot(stream_id="deceased-002"), expected_version=0)
    snapshot_store.save(
        make_snapshot(stream_id="will-001", stream_type="Will"), expected_version=0
    )
    assert sorted(snapshot_store.list_stream_ids("Estate")) == ["deceased-001", "deceased-002"]
    assert list(snapshot_store.list_stream_ids("Will")) == ["will-001"]
    assert list(snapshot_store.list_stream_ids("Grant")) == []
