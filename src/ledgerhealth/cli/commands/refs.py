"""Reference label commands."""

import click

from ledgerhealth.domain.entities import CategoryKind
from ledgerhealth.domain.registry import ReferenceRegistry


@click.group()
def refs_group():
    """Manage asset and expense reference labels."""
    pass


@refs_group.command("ensure")
@click.option("--asset", "assets", multiple=True, help="Asset label (repeatable)")
@click.option("--expense", "expenses", multiple=True, help="Expense label (repeatable)")
@click.pass_context
def ensure_refs(ctx, assets: tuple[str, ...], expenses: tuple[str, ...]):
    """Resolve labels to canonical categories, creating missing ones.

    Examples:
        ledgerhealth refs ensure --asset "Machines" --expense "Salary"
    """
    result = ReferenceRegistry(ctx.obj["db"]).ensure_refs(list(assets), list(expenses))
    for title, mapping in (("Assets", result["asset_map"]), ("Expenses", result["expense_map"])):
        if not mapping:
            continue
        click.echo(f"\n{title}:")
        for label, category_id in sorted(mapping.items()):
            click.echo(f"  {label:30s} -> {category_id}")


@refs_group.command("list")
@click.option("--kind", type=click.Choice(["asset", "expense"]), help="Only this kind")
@click.pass_context
def list_refs(ctx, kind: str | None):
    """List categories with their recomputed totals."""
    categories = ReferenceRegistry(ctx.obj["db"]).list_categories(CategoryKind(kind) if kind else None)
    if not categories:
        click.echo("No categories found.")
        return
    for c in categories:
        click.echo(f"ID: {c.id:3d} | {c.kind.value:7s} | {c.canonical_name:30s} | {c.total_amount:>12,.2f}")


def register_commands(cli):
    """Register reference commands with main CLI."""
    cli.add_command(refs_group, name="refs")
