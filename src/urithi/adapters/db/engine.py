"""Engine factory.

Every engine in the application is built here so connections are
configured consistently. SQLite connections get PRAGMAs suited to a local,
single-user database:

- ``foreign_keys=ON``
- ``journal_mode=WAL`` (file databases only)
- ``synchronous=NORMAL``
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def is_sqlite(url: str | URL) -> bool:
    """True if *url* points at a SQLite database."""
    return make_url(str(url)).get_backend_name() == "sqlite"


def is_memory_sqlite(url: str | URL) -> bool:
    u = make_url(str(url))
    return is_sqlite(u) and u.database in (None, "", ":memory:")


def make_engine(url: str | URL, *, echo: bool = False) -> Engine:
    """Create a configured SQLAlchemy Engine for *url*.

    In-memory SQLite URLs share one connection so every unit of work sees
    the same database.
    """
    if is_memory_sqlite(url):
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(url, echo=echo)

    if is_sqlite(url):
        wal = not is_memory_sqlite(url)

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _conn_record):  # type: ignore[no-untyped-def]
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON;")
            if wal:
                cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute("PRAGMA synchronous=NORMAL;")
            cur.close()

    return engine
