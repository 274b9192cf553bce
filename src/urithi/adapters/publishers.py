"""Event publishers.

Delivery to real subscribers (notifications, projections) is outside the
engine; these publishers cover logging and tests.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from urithi.interfaces.event_publisher import EventPublisher
from urithi.interfaces.outbox import EventEnvelope

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods


class LoggingEventPublisher(EventPublisher):
    """Writes one INFO record per published event."""

    def publish(self, envelopes: Sequence[EventEnvelope]) -> None:
        for envelope in envelopes:
            logger.info(
                "Published %s for %s %s (v%d)",
                envelope.event_type,
                envelope.stream_type,
                envelope.stream_id,
                envelope.version,
            )


class InMemoryEventPublisher(EventPublisher):
    """Collects published envelopes in `published`."""

    def __init__(self) -> None:
        self.published: list[EventEnvelope] = []

    def publish(self, envelopes: Sequence[EventEnvelope]) -> None:
        self.published.extend(envelopes)

    @property
    def event_types(self) -> list[str]:
        return [e.event_type for e in self.published]
