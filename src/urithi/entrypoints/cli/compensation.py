"""``urithi compensation``: the statutory executor compensation scale."""

from __future__ import annotations

from decimal import Decimal

import click
import click_extra as clickx

from urithi.domain.errors import InvalidMoneyError
from urithi.domain.value_objects import Money, coerce_decimal

from .helpers import load_schedule


def _parse_amount(
    ctx: click.Context,  # pylint: disable=unused-argument
    param: click.Parameter,  # pylint: disable=unused-argument
    value: str,
) -> Decimal:
    try:
        amount = coerce_decimal(value.replace(",", ""))
    except InvalidMoneyError as e:
        raise click.BadParameter(f"{value!r} is not an amount") from e
    if not amount.is_finite() or amount < 0:
        raise click.BadParameter("The estate value must be a non-negative amount")
    return amount


def _band_label(lower: Decimal, upper: Decimal | None) -> str:
    if upper is None:
        return f"above {lower:,.2f}"
    return f"{lower:,.2f} - {upper:,.2f}"


@click.group(cls=clickx.ExtraGroup)
def compensation() -> None:
    """Executor compensation under the statute schedule in force."""


@compensation.command()
def bands() -> None:
    """List the compensation bands of the schedule."""
    schedule = load_schedule()
    click.echo(f"Schedule: {schedule.version} ({schedule.currency.value})")
    lower = Decimal(0)
    for band in schedule.compensation_bands:
        click.echo(f"  {_band_label(lower, band.upper_bound):<36} {band.rate:.2%}")
        if band.upper_bound is not None:
            lower = band.upper_bound


@compensation.command()
@click.argument("amount", callback=_parse_amount)
def scale(amount: Decimal) -> None:
    """Compute the statutory fee on a net estate value of AMOUNT.

    Each band's slice of AMOUNT is charged at the band's rate; the fee is the
    sum of the charges.
    """
    schedule = load_schedule()
    net_value = Money(amount, schedule.currency)
    charges = schedule.statutory_fee_breakdown(net_value)

    click.echo(f"Schedule  : {schedule.version}")
    click.echo(f"Net value : {net_value}")
    for charge in charges:
        click.echo(
            f"  {_band_label(charge.lower_bound, charge.upper_bound):<36}"
            f" {charge.rate:>6.2%} of {charge.slice_amount} = {charge.fee}"
        )
    click.echo(f"Fee       : {schedule.statutory_fee(net_value)}")
