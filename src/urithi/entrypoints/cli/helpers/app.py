"""Loading configured application objects with CLI-friendly failures."""

import click

from urithi import config
from urithi.bootstrap import AppContainer, bootstrap
from urithi.domain.errors import StatuteScheduleError
from urithi.domain.statutes import StatuteSchedule

MISSING_DB_URL_MSG = (
    "URITHI_DB_URL is not set. Point it at the estate database, e.g.\n"
    "  export URITHI_DB_URL='sqlite:///urithi.db'"
)


def load_schedule() -> StatuteSchedule:
    """The statute schedule in force.

    Raises:
        click.ClickException: If ``URITHI_STATUTE_FILE`` names a bad file.
    """
    try:
        return config.get_statute_schedule()
    except StatuteScheduleError as e:
        raise click.ClickException(
            f"{e}\nCheck the file named by {config.STATUTE_FILE_ENV}."
        ) from e


def load_app() -> AppContainer:
    """Bootstrap against the configured database."""
    schedule = load_schedule()
    try:
        return bootstrap(schedule=schedule)
    except config.DatabaseUrlNotSetError as e:
        raise click.ClickException(MISSING_DB_URL_MSG) from e
