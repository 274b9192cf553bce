"""Adapters (infrastructure implementations) for URITHI.

Concrete implementations of the ports in `urithi.interfaces`: snapshot stores
and outboxes (in-memory and SQLAlchemy), units of work, ID generators and
event publishers, plus the database plumbing they share (metadata, custom
column types, engine factory, Alembic migrations).

Dependency rule: adapters may import `urithi.interfaces` (and, where a
mapping needs them, `urithi.domain` types). They must not import
`urithi.service_layer`, `urithi.bootstrap` or `urithi.entrypoints`.
"""
