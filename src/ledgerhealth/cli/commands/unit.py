"""Unit registration commands."""

import click

from ledgerhealth.cli.error_handling import handle_domain_error
from ledgerhealth.domain.entities import Scope
from ledgerhealth.domain.errors import DomainError
from ledgerhealth.domain.units import UnitService


@click.group()
def unit_group():
    """Register and list units."""
    pass


@unit_group.command("add")
@click.argument("name", metavar="UNIT_NAME")
@click.option("--abbr", help="Short display name")
@click.option("--program", help="Program name (created if missing)")
@click.pass_context
def add_unit(ctx, name: str, abbr: str | None, program: str | None):
    """Register a unit.

    Examples:
        ledgerhealth unit add "Bakery Co-op" --abbr BCO
        ledgerhealth unit add "Weavers" --program "Cohort 2024"
    """
    service = UnitService(ctx.obj["db"])
    try:
        program_id = service.get_or_create_program(program) if program else None
        unit_id = service.create_unit(name, abbr=abbr, program_id=program_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created unit '{name}' (ID: {unit_id})")


@unit_group.command("list")
@click.option("--program-id", help="Only units of this program")
@click.pass_context
def list_units(ctx, program_id: str | None):
    """List active units."""
    service = UnitService(ctx.obj["db"])
    units = service.list_units(Scope(program_id=program_id))
    if not units:
        click.echo("No units found.")
        return

    click.echo("\nUnits:")
    click.echo("-" * 80)
    for u in units:
        click.echo(f"{u.id} | {u.name:30s} | {u.display_abbr}")


def register_commands(cli):
    """Register unit commands with main CLI."""
    cli.add_command(unit_group, name="unit")
