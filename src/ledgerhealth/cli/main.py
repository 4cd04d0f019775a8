"""Main CLI entry point."""

import click

from ledgerhealth.config import DEFAULT_LOG_LEVEL, configure_logging
from ledgerhealth.database.factories import create_database

# Import and register all commands at module level
from ledgerhealth.cli.commands import (
    unit,
    import_cmd,
    refs,
    report,
    serve,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides LEDGERHEALTH_DB_PATH environment variable)",
    envvar="LEDGERHEALTH_DB_PATH",
)
@click.option(
    "--database-url",
    help="SQLAlchemy database URL; takes precedence over --db-path",
    envvar="LEDGERHEALTH_DATABASE_URL",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=DEFAULT_LOG_LEVEL,
    envvar="LEDGERHEALTH_LOG_LEVEL",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, database_url: str | None, log_level: str):
    """Ledgerhealth - ledger reconciliation and health scoring.

    Import monthly cash-in, cash-out and inventory reports for your units and
    score their financial health over any window.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        ctx.obj["db"] = create_database(database_url=database_url, database_path=db_path)


# Register all commands
unit.register_commands(cli)
import_cmd.register_commands(cli)
refs.register_commands(cli)
report.register_commands(cli)
serve.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
