"""Interface for publishing committed events to the outside world."""

import abc
from collections.abc import Sequence

from .outbox import EventEnvelope

# pylint: disable=too-few-public-methods


class EventPublisher(abc.ABC):
    """Delivers committed event envelopes to subscribers.

    Publishing happens after the unit of work has committed. Implementations
    may raise; callers treat a failed publish as non-fatal because the events
    are already durable in the outbox.
    """

    @abc.abstractmethod
    def publish(self, envelopes: Sequence[EventEnvelope]) -> None:
        """Publish *envelopes* in order."""
