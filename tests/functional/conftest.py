"""Fixtures for driving the ``urithi`` CLI end to end."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_env(tmp_path: Path, sqlite_url: str) -> dict[str, str]:
    """Environment pointing the CLI at a scratch database and log file."""
    return {
        "URITHI_DB_URL": sqlite_url,
        "URITHI_LOG_PATH": str(tmp_path / "urithi.log"),
        "URITHI_STATUTE_FILE": "",
    }


@pytest.fixture
def runner(cli_env: dict[str, str]) -> CliRunner:
    return CliRunner(env=cli_env)
