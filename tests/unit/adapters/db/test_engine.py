"""Unit tests for the database engine helpers.

These tests cover:
- Detection of SQLite (and in-memory SQLite) vs. other URLs.
- Creation of a SQLite engine for a given URL.
- Application of SQLite PRAGMAs on connect.
"""

from typing import TYPE_CHECKING

from sqlalchemy.engine import make_url

from urithi.adapters.db.engine import is_memory_sqlite, is_sqlite

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_is_sqlite_true_for_sqlite_url():
    assert is_sqlite("sqlite:///:memory:")
    assert is_sqlite(make_url("sqlite+pysqlite:///estates.db"))


def test_is_sqlite_false_for_postgres_url():
    assert not is_sqlite("postgresql://u:p@localhost/db")
    assert not is_sqlite(make_url("postgresql+psycopg://u:p@localhost/db"))


def test_is_memory_sqlite():
    """Only database-less or ``:memory:`` SQLite URLs are in-memory."""
    assert is_memory_sqlite("sqlite://")
    assert is_memory_sqlite("sqlite+pysqlite:///:memory:")
    assert not is_memory_sqlite("sqlite+pysqlite:///estates.db")
    assert not is_memory_sqlite("postgresql://u:p@localhost/db")


def test_make_engine_creates_sqlite(sqlite_engine_file: "Engine"):
    """make_engine() builds a working engine for a file URL."""
    engine = sqlite_engine_file  # built in the fixture with make_engine()
    assert engine.url.database is not None
    assert engine.url.database.endswith("urithi.db")


def test_sqlite_pragmas_applied(sqlite_engine_file: "Engine"):
    with sqlite_engine_file.connect() as cxn:
        fk = cxn.exec_driver_sql("PRAGMA foreign_keys;").scalar()
        jm = cxn.exec_driver_sql("PRAGMA journal_mode;").scalar()
        sync = cxn.exec_driver_sql("PRAGMA synchronous;").scalar()
    assert fk == 1
    assert jm is not None and jm.lower() == "wal"
    assert sync == 1


def test_memory_engine_shares_one_database(sqlite_engine_memory: "Engine"):
    """Separate connections to an in-memory engine see the same tables."""
    with sqlite_engine_memory.begin() as cxn:
        cxn.exec_driver_sql("CREATE TABLE probe (n INTEGER)")
        cxn.exec_driver_sql("INSERT INTO probe VALUES (1)")
    with sqlite_engine_memory.connect() as cxn:
        assert cxn.exec_driver_sql("SELECT n FROM probe").scalar() == 1
        jm = cxn.exec_driver_sql("PRAGMA journal_mode;").scalar()
    assert jm.lower() == "memory"
