"""Service layer for URITHI.

Implements application use-cases: command handlers, orchestration, and
transaction boundaries. Loads aggregates through repositories, calls their
mutators and saves state and events inside a unit of work.

Dependency rule: may import `urithi.domain` and `urithi.interfaces`, but not
`urithi.adapters` or `urithi.entrypoints`.
"""
