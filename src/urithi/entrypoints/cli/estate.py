"""``urithi estate``: read-only views of stored estates."""

from __future__ import annotations

import click
import click_extra as clickx

from urithi.domain.aggregates import EstateFinancialSummary
from urithi.service_layer import queries

from .helpers import load_app, success, warn


@click.group(cls=clickx.ExtraGroup)
def estate() -> None:
    """Inspect estates stored in the database."""


@estate.command(name="list")
def list_() -> None:
    """List the ids of stored estates."""
    app = load_app()
    for estate_id in queries.estate_ids(app.uow):
        click.echo(estate_id)


def _print_summary(summary: EstateFinancialSummary) -> None:
    hotchpot = summary.hotchpot_adjusted_value
    lines = [
        ("Estate", f"{summary.estate_id} ({summary.deceased_name})"),
        ("Gross value", str(summary.gross_value)),
        ("Liabilities", str(summary.total_liabilities)),
        ("Net value", str(summary.net_estate_value)),
        ("Hotchpot value", str(hotchpot) if hotchpot is not None else "-"),
        ("Solvent", "yes" if summary.is_solvent else "no"),
        (
            "Assets",
            f"{summary.asset_count} ({summary.verified_asset_count} verified)",
        ),
        (
            "Debts",
            f"{summary.debt_count} ({summary.outstanding_debt_count} outstanding, "
            f"{summary.critical_debt_count} critical)",
        ),
        (
            "Dependants",
            f"{summary.dependant_count} "
            f"({summary.annual_dependant_provision} a year)",
        ),
        ("Lifetime gifts", str(summary.gift_count)),
        ("Frozen", "yes" if summary.is_frozen else "no"),
    ]
    if not summary.is_solvent:
        lines.insert(6, ("Shortfall", str(summary.insolvency_shortfall)))
    width = max(len(label) for label, _ in lines)
    for label, value in lines:
        click.echo(f"{label:<{width}} : {value}")


@estate.command()
@click.argument("estate_id")
def summary(estate_id: str) -> None:
    """Show the financial totals of ESTATE_ID and what blocks distribution."""
    app = load_app()
    result = queries.estate_summary(estate_id, app.uow, app.clock, app.schedule)
    if result is None:
        raise click.ClickException(f"No estate with id {estate_id!r}")

    _print_summary(result)
    if result.is_ready_for_distribution:
        success("Ready for distribution")
        return
    warn("Not ready for distribution:")
    for blocker in result.blockers:
        click.echo(f"  - {blocker}", err=True)
