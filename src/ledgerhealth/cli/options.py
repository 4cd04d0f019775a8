"""Shared CLI options for scope and window selection."""

import functools

import click

from ledgerhealth.domain.entities import Scope, Window
from ledgerhealth.domain.errors import DomainError
from ledgerhealth.domain.scope import parse_scope, parse_window
from ledgerhealth.domain.units import UnitService
from ledgerhealth.cli.error_handling import handle_domain_error
from ledgerhealth.utils.unit_resolver import resolve_unit


def scope_options(func):
    """Add --from/--to/--program-id/--unit options."""

    @click.option("--from", "start", help="Window start (inclusive), e.g. 2024-01-01")
    @click.option("--to", "end", help="Window end (exclusive), e.g. 2024-04-01")
    @click.option("--program-id", help="Restrict to one program (UUID)")
    @click.option("--unit", help="Restrict to one unit (ID, name or abbreviation)")
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


def resolve_scope_and_window(
    ctx: click.Context, program_id: str | None, unit: str | None, start: str | None, end: str | None
) -> tuple[Scope, Window]:
    """Resolve CLI scope options, or exit with a CLI error."""
    try:
        unit_id = resolve_unit(UnitService(ctx.obj["db"]), unit) if unit else None
        return parse_scope(program_id, unit_id), parse_window(start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)
