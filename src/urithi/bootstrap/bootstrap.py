"""Bootstrap the message bus with handlers and unit of work."""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from urithi import config
from urithi.adapters.db.engine import make_engine
from urithi.adapters.id_generators import ULIDGenerator
from urithi.adapters.publishers import LoggingEventPublisher
from urithi.adapters.unit_of_work import SqlAlchemyUnitOfWork
from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.result import Result
from urithi.domain.statutes import StatuteSchedule
from urithi.interfaces.event_publisher import EventPublisher
from urithi.interfaces.id_generator import IdGenerator
from urithi.interfaces.unit_of_work import AbstractUnitOfWork
from urithi.service_layer.handlers import COMMAND_HANDLERS
from urithi.service_layer.messagebus import MessageBus

if TYPE_CHECKING:
    from urithi.service_layer.commands import Command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContainer:
    """A class to hold application wiring constants."""

    message_bus: MessageBus
    uow: AbstractUnitOfWork
    clock: Clock
    schedule: StatuteSchedule


def build_write_uow(url: str) -> AbstractUnitOfWork:
    """Build a new unit of work for write operations."""
    engine = make_engine(url)
    return SqlAlchemyUnitOfWork(engine)


def build_message_bus(  # pylint: disable=too-many-arguments
    uow: AbstractUnitOfWork,
    command_handlers: dict[type[Command], Callable[..., Result]],
    *,
    clock: Clock = SYSTEM_CLOCK,
    schedule: StatuteSchedule,
    publisher: EventPublisher | None = None,
    event_id_generator: IdGenerator | None = None,
    entity_id_generator: IdGenerator | None = None,
    aggregate_id_generator: IdGenerator | None = None,
) -> MessageBus:
    """Build a message bus with injected dependencies.

    Handlers receive only the dependencies named in their signatures. Event
    ids default to ULIDs; entity and aggregate ids share the event id
    generator unless given their own.
    """
    event_ids = event_id_generator or ULIDGenerator()
    dependencies: dict[str, Any] = {
        "uow": uow,
        "clock": clock,
        "schedule": schedule,
        "event_id_generator": event_ids,
        "entity_id_generator": entity_id_generator or event_ids,
        "aggregate_id_generator": aggregate_id_generator or event_ids,
    }
    injected_command_handlers = {
        command_type: inject_dependencies(handler, dependencies)
        for command_type, handler in command_handlers.items()
    }

    return MessageBus(
        uow,
        command_handlers=injected_command_handlers,
        publisher=publisher,
    )


def bootstrap(
    uow: AbstractUnitOfWork | None = None,
    *,
    clock: Clock = SYSTEM_CLOCK,
    schedule: StatuteSchedule | None = None,
    publisher: EventPublisher | None = None,
    **id_generators: IdGenerator,
) -> AppContainer:
    """Bootstrap the message bus with handlers and unit of work.

    With no arguments the application is wired from the environment: the
    database named by ``URITHI_DB_URL``, the statute schedule named by
    ``URITHI_STATUTE_FILE`` (or the built-in one) and a logging publisher.
    Tests pass an `InMemoryUnitOfWork`, a `FixedClock` and deterministic id
    generators (``event_id_generator=...`` and friends) instead.
    """
    if uow is None:
        uow = build_write_uow(config.get_db_url())
    if schedule is None:
        schedule = config.get_statute_schedule()
    if publisher is None:
        publisher = LoggingEventPublisher()
    logger.debug("Bootstrapping with statute schedule %s", schedule.version)

    message_bus = build_message_bus(
        uow,
        COMMAND_HANDLERS,
        clock=clock,
        schedule=schedule,
        publisher=publisher,
        **id_generators,
    )

    return AppContainer(
        message_bus=message_bus, uow=uow, clock=clock, schedule=schedule
    )


def inject_dependencies(
    handler: Callable, dependencies: Mapping[str, object]
) -> Callable:
    """Inject dependencies into a handler function based on its parameters."""
    params = inspect.signature(handler).parameters
    deps = {
        name: dependency for name, dependency in dependencies.items() if name in params
    }
    return functools.partial(handler, **deps)
