"""Parsing for ``-L/--logger-level NAME=LEVEL`` options.

Values may repeat the option or pack several pairs into one string
separated by commas or whitespace (as the ``URITHI_LOGGER_LEVELS``
environment variable does).
"""

import logging
import re

import click

DEFAULT_LIB_LEVELS = {"sqlalchemy": logging.WARNING, "alembic": logging.WARNING}

_SEPARATORS = re.compile(r"[,\s]+")


def _normalize_items(value: str | list[str] | tuple[str, ...]) -> list[str]:
    """Flatten *value* into non-empty ``NAME=LEVEL`` strings."""
    chunks = [value] if isinstance(value, str) else list(value)
    return [item for chunk in chunks for item in _SEPARATORS.split(chunk) if item]


def parse_log_level(
    ctx: click.Context,  # pylint: disable=unused-argument
    param: click.Parameter | None,  # pylint: disable=unused-argument
    value: str | list[str] | tuple[str, ...],
) -> dict[str, int]:
    """Click callback returning a logger-name to numeric-level mapping.

    The defaults in `DEFAULT_LIB_LEVELS` apply unless overridden.

    Raises:
        click.BadParameter: If an item is not ``NAME=LEVEL`` or names an
            unknown level.
    """
    levels = dict(DEFAULT_LIB_LEVELS)
    for item in _normalize_items(value):
        name, sep, level_name = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"Expected NAME=LEVEL, got {item!r}")
        level = logging.getLevelName(level_name.strip().upper())
        if not isinstance(level, int):
            raise click.BadParameter(f"Invalid log level: {level_name}")
        levels[name.strip()] = level
    return levels
