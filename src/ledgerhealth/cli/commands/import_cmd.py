"""Report import commands."""

import json
from pathlib import Path
from typing import Any

import click

from ledgerhealth.cli.error_handling import handle_domain_error
from ledgerhealth.domain.entities import ReportKind
from ledgerhealth.domain.errors import DomainError
from ledgerhealth.domain.ingestion import IngestionService
from ledgerhealth.domain.units import UnitService
from ledgerhealth.utils.unit_resolver import resolve_unit


def _load_json(ctx: click.Context, path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        click.echo(f"Error: {path} is not valid JSON: {e}", err=True)
        ctx.exit(1)


def _unit_id(ctx: click.Context, payload: Any, unit: str | None) -> str | None:
    if unit:
        return resolve_unit(UnitService(ctx.obj["db"]), unit)
    if isinstance(payload, dict):
        return payload.get("unit_id") or payload.get("se_id")
    return None


@click.group()
def import_group():
    """Import monthly reports from JSON files."""
    pass


def _import_cash(ctx: click.Context, kind: ReportKind, json_file: str, unit: str | None, month: str | None, supersede: bool):
    payload = _load_json(ctx, json_file)
    transactions = payload.get("transactions", []) if isinstance(payload, dict) else payload
    if month is None and isinstance(payload, dict):
        month = payload.get("report_month")

    try:
        unit_id = _unit_id(ctx, payload, unit)
        result = IngestionService(ctx.obj["db"]).import_period(
            unit_id, month, kind, transactions, supersede=supersede
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Month: {result.period_month:%Y-%m}")
    click.echo(f"  Upserted: {result.accepted} rows")
    if result.deleted:
        click.echo(f"  Removed: {result.deleted} stale rows")
    if result.superseded:
        click.echo("  Replaced an earlier import of this period")


@import_group.command("cash-in")
@click.argument("json_file", type=click.Path(exists=True))
@click.option("--unit", help="Unit ID, name or abbreviation (defaults to unit_id in the file)")
@click.option("--month", help="Report month (defaults to report_month in the file)")
@click.option("--supersede", is_flag=True, help="Replace an earlier import of the same month")
@click.pass_context
def import_cash_in(ctx, json_file: str, unit: str | None, month: str | None, supersede: bool):
    """Import a cash-in report.

    JSON_FILE holds either a list of transactions or an object with
    unit_id, report_month and transactions.
    """
    _import_cash(ctx, ReportKind.CASH_IN, json_file, unit, month, supersede)


@import_group.command("cash-out")
@click.argument("json_file", type=click.Path(exists=True))
@click.option("--unit", help="Unit ID, name or abbreviation (defaults to unit_id in the file)")
@click.option("--month", help="Report month (defaults to report_month in the file)")
@click.option("--supersede", is_flag=True, help="Replace an earlier import of the same month")
@click.pass_context
def import_cash_out(ctx, json_file: str, unit: str | None, month: str | None, supersede: bool):
    """Import a cash-out report."""
    _import_cash(ctx, ReportKind.CASH_OUT, json_file, unit, month, supersede)


@import_group.command("inventory")
@click.argument("json_file", type=click.Path(exists=True))
@click.option("--unit", help="Unit ID, name or abbreviation (defaults to unit_id in the file)")
@click.option("--supersede", is_flag=True, help="Replace an earlier import of the same month")
@click.pass_context
def import_inventory(ctx, json_file: str, unit: str | None, supersede: bool):
    """Import an inventory report.

    JSON_FILE is an object with items, bom_lines and report_links.
    """
    payload = _load_json(ctx, json_file)
    if not isinstance(payload, dict):
        click.echo("Error: inventory file must hold a JSON object", err=True)
        ctx.exit(1)

    try:
        unit_id = _unit_id(ctx, payload, unit)
        result = IngestionService(ctx.obj["db"]).import_inventory_period(
            unit_id,
            items=payload.get("items"),
            bom_lines=payload.get("bom_lines"),
            report_links=payload.get("report_links"),
            supersede=supersede,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Month: {result.period_month:%Y-%m}")
    click.echo(f"  Items: {result.upserted_items}")
    click.echo(f"  BOM lines: {result.inserted_bom_lines}")
    click.echo(f"  Linked counts: {result.linked}")


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_group, name="import")
