"""Message bus implementation for handling commands and publishing events."""

import logging
from collections.abc import Callable

from urithi.domain.result import Result
from urithi.interfaces.event_publisher import EventPublisher
from urithi.interfaces.unit_of_work import AbstractUnitOfWork

from .commands import Command

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods


class NoHandlerForCommand(LookupError):
    """Exception raised when no handler is found for a command."""

    def __init__(self, cmd: Command) -> None:
        super().__init__(f"No handler found for command {type(cmd).__name__}")


class MessageBus:
    """A simple message bus for handling commands.

    The message bus routes commands to their handlers and, once a handler has
    returned, hands the events its unit of work committed to the publisher.
    Each committed event is published exactly once.

    Args:
        uow: The unit of work injected into the handlers. The bus drains its
            committed events after every command.
        command_handlers: A mapping of command types to their handlers.
            Handlers are callables that accept a single command argument;
            other dependencies are injected by the bootstrap.
        publisher: Receives committed events. Publishing happens after the
            transaction, so a failing publisher is logged and otherwise
            ignored: the events stay in the outbox.

    Note:
        Business-rule failures come back from the handler as failed `Result`
        values and are returned unchanged. Exceptions (invariant violations,
        storage errors) are logged and re-raised.
    """

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        command_handlers: dict[type[Command], Callable[..., Result]],
        publisher: EventPublisher | None = None,
    ) -> None:
        self.uow = uow
        self._command_handlers = command_handlers
        self._publisher = publisher

    def handle(self, cmd: Command) -> Result:
        """Handle a command by dispatching it to the appropriate handler.

        Args:
            cmd: The command to handle.

        Raises:
            NoHandlerForCommand: If no handler is found for the command type.
            Exception: If the handler raises an exception.

        Returns:
            The handler's result.
        """

        if handler := self._command_handlers.get(type(cmd)):
            handler_name = self._get_handler_name(handler)
            logger.debug("Handling command %s with handler %s", cmd, handler_name)
            try:
                result = handler(cmd)
            except Exception:  # pylint: disable=broad-except
                logger.exception(
                    "Exception handling command %s with handler %s", cmd, handler_name
                )
                raise
        else:
            logger.error("No handler found for command %s", type(cmd).__name__)
            raise NoHandlerForCommand(cmd)

        if result.is_failure:
            logger.info("Command %s rejected: %s", type(cmd).__name__, result.error)
        self._publish_committed()
        return result

    def _publish_committed(self) -> None:
        if not (envelopes := self.uow.collect_new_events()):
            return
        if self._publisher is None:
            logger.debug("No publisher configured; %d event(s) left in outbox", len(envelopes))
            return
        try:
            self._publisher.publish(envelopes)
        except Exception:  # pylint: disable=broad-except
            logger.exception(
                "Publishing %d event(s) failed; they remain in the outbox",
                len(envelopes),
            )

    @staticmethod
    def _get_handler_name(fn: Callable[..., Result]) -> str:
        if hasattr(fn, "__name__"):
            return fn.__name__
        if hasattr(fn, "func") and hasattr(fn.func, "__name__"):
            return fn.func.__name__
        return repr(fn)
