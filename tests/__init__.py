"""urithi test suite.

Folder taxonomy
- unit/         : Domain rules, handlers and helpers with no real I/O.
- integration/  : SQLite, Alembic migrations and the wired application.
- functional/   : The ``urithi`` CLI driven through click's test runner.
- contract/     : Port behaviour shared by the in-memory and SQL backends.
- fixtures/     : pytest plugins (SQLite engines, domain objects).
- helpers/      : Builders and assertion helpers (no tests here).

Markers are applied from the folder name by the root conftest.
Property-based tests live with the layer they exercise and use
@pytest.mark.property.
"""
