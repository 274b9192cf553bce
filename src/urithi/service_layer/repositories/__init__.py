"""Package for repository implementations."""

from .aggregate_repository import AggregateRepository, EstateRepository, WillRepository
from .errors import AggregateNotFoundError, RepositoryError, SnapshotDecodeError
from .event_mapper import EventMapper
from .snapshot_mapper import EstateSnapshotMapper, SnapshotMapper, WillSnapshotMapper

__all__ = [
    "AggregateNotFoundError",
    "AggregateRepository",
    "EstateRepository",
    "EstateSnapshotMapper",
    "EventMapper",
    "RepositoryError",
    "SnapshotDecodeError",
    "SnapshotMapper",
    "WillRepository",
    "WillSnapshotMapper",
]
