"""Event outbox interfaces for URITHI.

This module defines:
- The canonical `EventEnvelope` DTO.
- The `Outbox` port (framework-free ABC) for appending and reading events.
- A small, adapter-agnostic exception hierarchy for precise error handling.

Layering & dependency rules:
- Lives under `urithi.interfaces`. Do NOT import from adapters, bootstrap, or entrypoints.
- Safe to import from service layer and adapters.

Contract overview
-----------------
Append:
- Atomic write for a **single (stream_type, stream_id)** batch, in the same
  transaction as the aggregate snapshot it accompanies.
- `global_seq` is assigned by the outbox; `recorded_at` is normalized to **UTC tz-aware**.
- Returns envelopes in the **same order** as provided.
- Errors:
  * `InvalidEnvelopeError`: client-side invariant violations (mixed streams,
    non-contiguous versions, naive timestamps).
  * `DuplicateEventIdError`: `event_id` not globally unique, or
    `(stream_id, version)` already recorded.
  * `OutboxUnavailableError`: transient driver/DB issues; callers may retry.

Reads:
- `read_stream(stream_id)`: ascending by `version`.
- `read_since(global_seq=0, limit=None)`: ascending by `global_seq` (global catch-up).
- Empty results yield an empty iterator. Invalid ranges raise `ValueError`.

Invariants & validation:
- `event_id` is a **26-char ULID**.
- `version >= 1`; `global_seq` is None pre-persist.
- If provided, `recorded_at` must be **tz-aware** (UTC).
- `stream_id`, `stream_type`, `event_type` must be non-empty (whitespace rejected).
"""

import abc
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

ULID_LENGTH = 26

# --- Exceptions to standardize adapter behavior ---


class OutboxError(Exception):
    """Base class for URITHI outbox errors."""


class DuplicateEventIdError(OutboxError):
    """event_id (or a stream version) must be unique; duplicate detected."""


class InvalidEnvelopeError(OutboxError):
    """The event envelope is invalid."""


class OutboxUnavailableError(OutboxError):
    """Operational/timeout/connection errors; callers may retry."""


# --- Envelope DTO ---


@dataclass(frozen=True, slots=True)
class EventEnvelope:
    """Canonical persisted event wrapper.

    Notes:
      - `version` is the aggregate version the event produced.
      - `global_seq` is None before persistence and assigned by the outbox.
      - `recorded_at` if set, should be UTC, tz-aware; the outbox may set it.
    """

    # pylint: disable=too-many-instance-attributes

    stream_id: str
    stream_type: str
    version: int
    event_id: str  # 26-char ULID
    event_type: str
    payload: dict[str, Any]
    metadata: dict[str, Any] | None = None  # e.g., correlation_id, actor
    recorded_at: datetime | None = None
    global_seq: int | None = None

    def __post_init__(self) -> None:
        if len(self.event_id) != ULID_LENGTH:
            raise InvalidEnvelopeError("event_id must be a 26-character ULID.")
        if self.version < 1:
            raise InvalidEnvelopeError("version must be >= 1")
        if self.global_seq is not None and self.global_seq < 1:
            raise InvalidEnvelopeError("global_seq must be >= 1 when set")
        if self.recorded_at is not None:
            if self.recorded_at.tzinfo is None or self.recorded_at.utcoffset() is None:
                raise InvalidEnvelopeError("recorded_at must be tz-aware.")
            if self.recorded_at.utcoffset() != timedelta(0):
                raise InvalidEnvelopeError("recorded_at must be UTC.")
        if (
            not self.stream_id.strip()
            or not self.stream_type.strip()
            or not self.event_type.strip()
        ):
            raise InvalidEnvelopeError(
                "stream_id, stream_type, and event_type must be non-empty."
            )


def check_batch(envelopes: Sequence[EventEnvelope]) -> None:
    """Validate a single-stream append batch.

    Raises:
        InvalidEnvelopeError: On mixed streams, a pre-assigned global_seq,
            duplicate event ids, or non-contiguous versions.
    """
    if not envelopes:
        return
    first = envelopes[0]
    for envelope in envelopes:
        if (envelope.stream_id, envelope.stream_type) != (
            first.stream_id,
            first.stream_type,
        ):
            raise InvalidEnvelopeError("Mixed streams in a single batch.")
        if envelope.global_seq is not None:
            raise InvalidEnvelopeError("global_seq must be None before persistence.")
    ids = [e.event_id for e in envelopes]
    if len(ids) != len(set(ids)):
        raise InvalidEnvelopeError("Duplicate event_id within batch.")
    versions = [e.version for e in envelopes]
    if versions != list(range(versions[0], versions[0] + len(versions))):
        raise InvalidEnvelopeError("Versions in batch must be contiguous and ordered.")


# --- Outbox Interface ---


class Outbox(abc.ABC):
    """An abstract base class for the transactional event outbox."""

    @abc.abstractmethod
    def append(self, envelopes: Sequence[EventEnvelope]) -> Sequence[EventEnvelope]:
        """Persist a single-stream batch of events.

        An empty batch is a no-op and returns an empty list.

        Raises:
            InvalidEnvelopeError: If the batch violates `check_batch`.
            DuplicateEventIdError: When an event_id or (stream_id, version)
                already exists.
            OutboxUnavailableError: For operational errors; callers may retry.

        Returns:
            The persisted events with `global_seq` and `recorded_at`
            populated, in the **same order** as provided.
        """

    @abc.abstractmethod
    def read_stream(self, stream_id: str) -> Iterable[EventEnvelope]:
        """Yield events for a given stream, ordered by version ascending."""

    @abc.abstractmethod
    def read_since(
        self, global_seq: int = 0, limit: int | None = None
    ) -> Iterable[EventEnvelope]:
        """Yield events with `global_seq` > the given value, ascending.

        Raises:
            ValueError: if global_seq < 0 or limit is not None and limit < 1.
        """
