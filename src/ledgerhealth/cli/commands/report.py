"""Health report commands."""

from decimal import Decimal

import click

from ledgerhealth.cli.error_handling import handle_domain_error
from ledgerhealth.cli.options import resolve_scope_and_window, scope_options
from ledgerhealth.domain.errors import DomainError
from ledgerhealth.domain.scope import resolve_overview_window
from ledgerhealth.domain.scoring import ScoringService
from ledgerhealth.domain.views import ViewService
from ledgerhealth.utils.amount_parser import parse_amount
from ledgerhealth.utils.date_parser import month_label


def _fmt(value: Decimal | None, places: int = 2) -> str:
    if value is None:
        return "-"
    return f"{value:,.{places}f}"


@click.group()
def report_group():
    """Score units and render dashboard views."""
    pass


@report_group.command("score")
@scope_options
@click.pass_context
def score(ctx, program_id: str | None, unit: str | None, start: str | None, end: str | None):
    """Rank units by composite health score, worst first.

    Examples:
        ledgerhealth report score --from 2024-01-01 --to 2024-04-01
        ledgerhealth report score --unit BCO
    """
    scope, window = resolve_scope_and_window(ctx, program_id, unit, start, end)
    scores = ScoringService(ctx.obj["db"]).score(scope, window)
    if not scores:
        click.echo("No units found.")
        return

    click.echo(f"\n{'Unit':30s} {'Margin':>6s} {'In/Out':>6s} {'Turn':>5s} {'Report':>6s} {'Total':>6s}")
    click.echo("-" * 70)
    for s in scores:
        marker = " !" if s.flagged else ""
        click.echo(
            f"{s.name[:30]:30s} {s.cash_margin:6d} {s.inout_ratio:6d} {s.turnover:5d} "
            f"{s.reporting:6.2f} {s.composite:6.2f}{marker}"
        )
    no_data = sum(1 for s in scores if not s.eligible)
    if no_data:
        click.echo(f"\n{no_data} unit(s) have no complete month in this window")


@report_group.command("heatmap")
@scope_options
@click.pass_context
def heatmap(ctx, program_id: str | None, unit: str | None, start: str | None, end: str | None):
    """Show indicator bands per unit for the months covered."""
    scope, window = resolve_scope_and_window(ctx, program_id, unit, start, end)
    result = ViewService(ctx.obj["db"]).heatmap(scope, window)
    if not result["rows"]:
        click.echo("No units found.")
        return

    if result["months"]:
        click.echo(f"Months: {', '.join(result['months'])}")
    for row in result["rows"]:
        click.echo(
            f"{row['abbr']:8s} margin={row['cash_margin']} inout={row['inout_ratio']} "
            f"turnover={row['inventory_turnover']} reporting={row['reporting']}"
        )


@report_group.command("overview")
@click.option("--period", help="Preset window when --from/--to are not both given: 3m, 6m, 12m or ytd")
@scope_options
@click.pass_context
def overview(ctx, period: str | None, program_id: str | None, unit: str | None, start: str | None, end: str | None):
    """Summarize red, moderate and healthy units per indicator."""
    scope, window = resolve_scope_and_window(ctx, program_id, unit, None, None)
    try:
        window = resolve_overview_window(period, start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    result = ViewService(ctx.obj["db"]).category_health_overview(scope, window)
    click.echo(
        f"Units: {result['unit_count']} (eligible {result['eligible']}, no data {result['no_data']})"
    )
    click.echo(f"Flagged: {result['flagged']}  Moderate: {result['moderate']}  Healthy: {result['healthy']}")
    click.echo("")
    for ind in result["indicators"]:
        click.echo(
            f"{ind['indicator']:20s} red {ind['red']:3d} ({ind['red_pct']}%)  "
            f"moderate {ind['moderate']:3d}  healthy {ind['healthy']:3d}"
        )


@report_group.command("cashflow")
@click.option("--opening-cash", default="0", help="Cash on hand before the first month")
@scope_options
@click.pass_context
def cashflow(ctx, opening_cash: str, program_id: str | None, unit: str | None, start: str | None, end: str | None):
    """Show the monthly cash waterfall with runway."""
    scope, window = resolve_scope_and_window(ctx, program_id, unit, start, end)
    try:
        opening = parse_amount(opening_cash)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    series = ViewService(ctx.obj["db"]).cash_flow_waterfall(scope, window, opening)
    if not series:
        click.echo("No cash reports in this window.")
        return

    click.echo(f"\n{'Month':8s} {'Inflow':>12s} {'Outflow':>12s} {'Net':>12s} {'Cash':>12s} {'Runway':>7s}")
    click.echo("-" * 70)
    for row in series:
        click.echo(
            f"{month_label(row['month']):8s} {_fmt(row['inflow']):>12s} {_fmt(row['outflow']):>12s} "
            f"{_fmt(row['net']):>12s} {_fmt(row['cash_on_hand']):>12s} {_fmt(row['runway_months_ma3'], 1):>7s}"
        )


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
