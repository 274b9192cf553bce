"""Bootstrap (composition root) for URITHI.

Assembles the application at runtime: wires concrete adapters (stores,
units of work, id generators, publishers) into the service-layer handlers
and builds the message bus around them.

Import rules:
- Entry points import *this* package rather than adapters or the service layer.
- This package may import: `urithi.adapters`, `urithi.service_layer`,
  `urithi.interfaces`, `urithi.domain`, and `urithi.config`.
- Inner layers must not import `urithi.bootstrap`.
"""

from .bootstrap import (
    AppContainer,
    bootstrap,
    build_message_bus,
    build_write_uow,
    inject_dependencies,
)

__all__ = [
    "AppContainer",
    "bootstrap",
    "build_message_bus",
    "build_write_uow",
    "inject_dependencies",
]
