"""URITHI CLI entry point.

Defines the top-level ``urithi`` command (via Click-Extra) and registers the
command groups:

- ``urithi db``: forward-only schema management (upgrade/current/heads/status).
- ``urithi compensation``: the statutory executor compensation scale.
- ``urithi estate``: summaries of stored estates.

Examples
    $ urithi --version
    $ urithi compensation scale 1500000
    $ urithi estate summary 01J9Z3Q6S9V0ZK1M2N3P4Q5R6S
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir

from urithi import __version__, config
from urithi.domain.errors import StatuteScheduleError
from urithi.logging import config_console_handler, config_flight_recorder, log_startup

from .compensation import compensation as compensation_group
from .db import db as db_group
from .estate import estate as estate_group
from .helpers import hyperlink
from .helpers.log_level_parser import parse_log_level

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """URITHI command-line interface.

    URITHI administers deceased estates under the Kenyan Law of Succession Act:
    it tracks assets, debts, dependants and lifetime gifts, keeps the estate's
    totals consistent, applies the Section 45 payment order and the statutory
    executor compensation scale, and records every change as a domain event.
    """

EPILOG = "\b\n" + "\n".join(
    [
        f"{click.style('See Also:', fg='blue', bold=True, underline=True)}",
        "  Kenya Law: " + hyperlink("https://kenyalaw.org"),
    ]
)


def _default_log_path() -> Path:
    return Path(user_log_dir("urithi", appauthor=False, ensure_exists=True)) / "latest.log"


def _statute_version() -> str:
    try:
        return config.get_statute_schedule().version
    except StatuteScheduleError as e:
        return f"<invalid: {e}>"


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
    epilog=EPILOG,
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Raise console verbosity one level above WARNING per repetition.",
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help="Lower console verbosity one level below WARNING per repetition.",
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Debug console output: DEBUG level with timestamps and source paths.",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="File the flight recorder writes to.",
    default=_default_log_path,
    envvar="URITHI_LOG_PATH",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--flight-recorder-capacity",
    type=click.IntRange(min=1),
    default=2000,
    hidden=True,
    envvar="URITHI_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Number of log records the flight recorder keeps.",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Keep the most recent DEBUG-level records in memory and write them to "
        "--log-path when a WARNING or ERROR is logged (or on exit with "
        "--force-flush). Console verbosity is unaffected."
    ),
    default=True,
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush_flight_recorder",
    is_flag=True,
    help="Write the flight recorder buffer to --log-path on exit even without errors.",
    default=False,
    show_default=True,
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    help=(
        "Set the minimum level of a named logger (NAME=LEVEL). Applies to both "
        "console and flight recorder. Repeatable, e.g. -L sqlalchemy=INFO "
        "-L urithi.service_layer=DEBUG."
    ),
    default=("sqlalchemy=WARNING", "alembic=WARNING"),
    show_default=True,
    show_envvar=True,
)
@clickx.pass_context
def urithi(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush_flight_recorder: bool,
    logger_levels: dict[str, int],
) -> None:
    """URITHI command-line interface."""

    level = logging.WARNING - 10 * verbose_count + 10 * quiet_count
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = [
        config_console_handler(
            level=level, debug_mode=debug, color=ctx.color is not False
        )
    ]
    if flight_recorder:
        handlers.append(
            config_flight_recorder(
                path=log_path,
                capacity=flight_recorder_capacity,
                flush_on_close=force_flush_flight_recorder,
            )
        )

    # the root logger passes everything; each handler applies its own level
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)

    log_startup(
        logger,
        app_version=__version__,
        level=logging.DEBUG if debug else level,
        handlers=handlers,
        log_path=log_path,
        flight_recorder=flight_recorder,
        flight_capacity=flight_recorder_capacity if flight_recorder else None,
        force_flush_fr=force_flush_flight_recorder,
        logger_levels=logger_levels,
        statute_version=_statute_version(),
    )

    ctx.call_on_close(logging.shutdown)


urithi.add_command(db_group)
urithi.add_command(compensation_group)
urithi.add_command(estate_group)
