"""Interfaces (application boundary) for URITHI.

Defines framework-free application contracts: ABCs and small DTOs shared by
the service layer and adapters (snapshot stores, the event outbox, event
publishers, ID generators, units of work). Business rules stay out of this
package.

Dependency rule: this package is independent; do not import from any
`urithi.*` modules. It may be imported by `urithi.service_layer`,
`urithi.adapters`, and `urithi.bootstrap`.
"""
