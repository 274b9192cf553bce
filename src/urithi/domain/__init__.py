"""Domain layer for URITHI.

Contains the succession rules: aggregates, entities, value objects, statutory
schedules and domain events. This package is deliberately technology-agnostic.

Dependency rule: do not import from `urithi.adapters`, `urithi.service_layer`
or `urithi.entrypoints`.
"""
