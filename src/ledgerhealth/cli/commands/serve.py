"""HTTP server command."""

import click

from ledgerhealth.api.app import create_app


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", default=5000, show_default=True, type=int, help="Port to listen on")
@click.option("--debug", is_flag=True, help="Run with the Flask debugger")
@click.pass_context
def serve(ctx, host: str, port: int, debug: bool):
    """Serve the import and dashboard HTTP API."""
    app = create_app(ctx.obj["db"])
    click.echo(f"Serving on http://{host}:{port}")
    app.run(host=host, port=port, debug=debug)


def register_commands(cli):
    """Register serve command with main CLI."""
    cli.add_command(serve)
