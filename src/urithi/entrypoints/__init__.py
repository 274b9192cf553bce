"""Entrypoints (inbound adapters) for URITHI.

Entry points parse input, call the service layer through the objects the
bootstrap builds, and present the results.

Dependency rule: may import `urithi.bootstrap`, `urithi.config` and
`urithi.service_layer`; avoid importing `urithi.adapters` directly.
"""
