"""Fixtures for id generator contract tests."""

from collections.abc import Iterable

import pytest

from urithi.adapters.id_generators import SimpleIdGenerator, ULIDGenerator
from urithi.interfaces.id_generator import IdGenerator


@pytest.fixture(params=["ulid", "simple", "simple-prefixed"])
def id_generator(request: pytest.FixtureRequest) -> Iterable[IdGenerator]:
    """A fresh generator for each backend."""
    match request.param:
        case "ulid":
            yield ULIDGenerator()
        case "simple":
            yield SimpleIdGenerator()
        case "simple-prefixed":
            yield SimpleIdGenerator(8, "E")
        case _:
            raise ValueError(f"unknown id generator type: {request.param}")


@pytest.fixture(params=["ulid", "simple"])
def monotonic_id_generator(request: pytest.FixtureRequest) -> Iterable[IdGenerator]:
    """Generators whose ids sort in creation order."""
    match request.param:
        case "ulid":
            yield ULIDGenerator()
        case "simple":
            yield SimpleIdGenerator()
        case _:
            raise ValueError(f"unknown monotonic id generator type: {request.param}")
