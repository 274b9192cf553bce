"""Global pytest fixtures for URITHI."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

# pylint: disable=unused-argument

pytest_plugins = [
    "tests.fixtures.sqlite",
    "tests.fixtures.domain",
]

TESTS_ROOT = Path(__file__).parent.resolve()

#: Tests under each top-level directory get the matching mark by default.
DEFAULT_MARKS = {
    "unit": pytest.mark.unit,
    "contract": pytest.mark.contract,
    "integration": pytest.mark.integration,
    "functional": pytest.mark.functional,
}


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Mark each test with the suite it lives in (unit, contract, ...)."""
    for item in items:
        path = item.path.resolve()
        if TESTS_ROOT not in path.parents:
            continue
        suite = path.relative_to(TESTS_ROOT).parts[0]
        mark = DEFAULT_MARKS.get(suite)
        if mark is None:
            continue
        if not any(marker.name == mark.name for marker in item.iter_markers()):
            item.add_marker(mark)


# Helper to route to an existing engine fixture by name
@pytest.fixture
def engine(request: pytest.FixtureRequest) -> Engine:
    """Indirection fixture to parametrize over engine-providing fixtures.

    Example:
        ```py
        @pytest.mark.parametrize(
            "engine", ["sqlite_engine_memory", "sqlite_engine_file"], indirect=True
        )
        def test_something(engine): ...
        ```
    """
    return request.getfixturevalue(request.param)
