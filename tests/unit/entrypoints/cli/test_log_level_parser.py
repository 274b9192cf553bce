"""Unit tests for `urithi.entrypoints.cli.helpers.log_level_parser`.

Covers the library defaults, later-wins overrides, comma/space separated
strings as read from ``URITHI_LOGGER_LEVELS`` and rejection of malformed
input.
"""

import logging
import types

import click
import pytest

from urithi.entrypoints.cli.helpers.log_level_parser import parse_log_level


def make_ctx():
    """The callback ignores its context, so a namespace stands in for one."""
    return types.SimpleNamespace()


def test_empty_uses_defaults():
    """With nothing given, the library loggers sit at WARNING."""
    assert parse_log_level(make_ctx(), None, ()) == {
        "sqlalchemy": logging.WARNING,
        "alembic": logging.WARNING,
    }


def test_repeated_flags_later_wins():
    """Later flags override earlier ones for the same logger."""
    value = ("sqlalchemy=INFO", "alembic=ERROR", "sqlalchemy=WARNING")
    out = parse_log_level(make_ctx(), None, value)
    assert out["sqlalchemy"] == logging.WARNING
    assert out["alembic"] == logging.ERROR


def test_plain_string_with_separators():
    """A single string may pack several pairs."""
    out = parse_log_level(
        make_ctx(), None, "urithi.domain=DEBUG,  urllib3=WARNING alembic=ERROR"
    )
    assert out["urithi.domain"] == logging.DEBUG
    assert out["urllib3"] == logging.WARNING
    assert out["alembic"] == logging.ERROR


def test_case_insensitive_levels():
    """Level names are case-insensitive."""
    out = parse_log_level(make_ctx(), None, ("sqlalchemy=info",))
    assert out["sqlalchemy"] == logging.INFO


@pytest.mark.parametrize("item", ["not-a-pair", "=INFO", "sqlalchemy=LOUD"])
def test_invalid_items_raise(item):
    """Malformed pairs and unknown levels are bad parameters."""
    with pytest.raises(click.BadParameter):
        parse_log_level(make_ctx(), None, (item,))
