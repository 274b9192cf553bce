"""Configuration utilities for URITHI.

Configuration comes from the environment:

- ``URITHI_DB_URL``: SQLAlchemy URL of the application database.
- ``URITHI_STATUTE_FILE``: optional JSON file replacing the built-in
  statute schedule (see `urithi.domain.statutes.schedule_from_dict`).
"""

import json
import logging
import os
import sys
from importlib.resources import files
from pathlib import Path
from typing import TextIO

from alembic.config import Config

from urithi.domain.errors import StatuteScheduleError
from urithi.domain.statutes import (
    DEFAULT_STATUTE_SCHEDULE,
    StatuteSchedule,
    schedule_from_dict,
)

logger = logging.getLogger(__name__)

DB_URL_ENV = "URITHI_DB_URL"  # pragma: no mutate
STATUTE_FILE_ENV = "URITHI_STATUTE_FILE"  # pragma: no mutate

ALEMBIC_URL_KEY = "sqlalchemy.url"  # pragma: no mutate
ALEMBIC_SCRIPT_LOCATION_KEY = "script_location"  # pragma: no mutate


class DatabaseUrlNotSetError(Exception):
    """Raised when the URITHI_DB_URL environment variable is not set."""


def get_db_url() -> str:
    """Get the database URL from the environment.

    Returns:
        The value of the `URITHI_DB_URL` environment variable.

    Raises:
        DatabaseUrlNotSetError: If `URITHI_DB_URL` is not set.
    """
    if not (url := os.environ.get(DB_URL_ENV)):
        raise DatabaseUrlNotSetError
    return url


def build_alembic_config(
    db_url: str | None = None, stdout: TextIO = sys.stdout
) -> Config:
    """Build an Alembic `Config` object for URITHI's migrations.

    Args:
        db_url: SQLAlchemy database URL (e.g., `sqlite:///urithi.db`). Can be
            `None` only where Alembic won't need to connect to the database.
        stdout: Text stream Alembic writes status lines to.

    Returns:
        An `alembic.config.Config` pointing to the packaged migration scripts.
    """
    cfg = Config(stdout=stdout)
    if db_url is not None:
        cfg.set_main_option(ALEMBIC_URL_KEY, db_url)
    cfg.set_main_option(
        ALEMBIC_SCRIPT_LOCATION_KEY,
        str(files("urithi.adapters.db.alembic")),
    )
    return cfg


def load_statute_schedule(path: str | Path) -> StatuteSchedule:
    """Read a statute schedule from a JSON file.

    Raises:
        StatuteScheduleError: If the file cannot be read or is not a valid
            schedule.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise StatuteScheduleError(f"Cannot read statute schedule {path}: {e}") from e
    if not isinstance(data, dict):
        raise StatuteScheduleError(f"Statute schedule {path} must be a JSON object")
    schedule = schedule_from_dict(data)
    logger.debug("Loaded statute schedule %s from %s", schedule.version, path)
    return schedule


def get_statute_schedule() -> StatuteSchedule:
    """The schedule named by `URITHI_STATUTE_FILE`, else the built-in one."""
    if path := os.environ.get(STATUTE_FILE_ENV):
        return load_statute_schedule(path)
    return DEFAULT_STATUTE_SCHEDULE
