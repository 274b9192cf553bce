"""Service layer handlers."""

from collections.abc import Callable

from urithi.domain.result import Result

from .estate_handlers import COMMAND_HANDLERS as ESTATE_COMMAND_HANDLERS
from .will_handlers import COMMAND_HANDLERS as WILL_COMMAND_HANDLERS

__all__ = ["COMMAND_HANDLERS"]

COMMAND_HANDLERS: dict[type, Callable[..., Result]] = {
    **ESTATE_COMMAND_HANDLERS,
    **WILL_COMMAND_HANDLERS,
}
