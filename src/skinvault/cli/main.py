"""
Main CLI entry point for skinvault.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.panel import Panel

from skinvault import __version__
from skinvault.api.middleware import RequestIdFilter
from skinvault.cli.commands.api import api_app
from skinvault.cli.commands.cache import app as cache_app
from skinvault.cli.commands.db import db_app
from skinvault.config.settings import settings

console = Console()

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"

app = typer.Typer(
    name="skinvault",
    help="Skin and cape storage with cached avatar renders",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Add subcommands
app.add_typer(api_app, name="api", help="API server commands")
app.add_typer(db_app, name="db", help="Database commands")
app.add_typer(cache_app, name="cache", help="Render cache commands")


def configure_logging(level: str) -> None:
    """Configure the root logger with request IDs in every record."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        handler.addFilter(RequestIdFilter())


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]skinvault[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.command()
def status() -> None:
    """Show configuration status."""
    console.print(
        Panel(
            f"[blue]i[/blue] Database: {'sqlite' if settings.is_sqlite else 'postgresql'}\n"
            f"[blue]i[/blue] Textures: {settings.textures_dir}\n"
            f"[blue]i[/blue] Renders:  {settings.artifacts_dir}\n"
            "[blue]i[/blue] Use 'skinvault --help' for available commands",
            title="Status",
            border_style="green",
        )
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
) -> None:
    """
    skinvault - skin and cape storage with cached avatar renders.
    """
    if version:
        console.print(f"skinvault v{__version__}")
        raise typer.Exit(code=0)

    configure_logging(settings.log_level)

    if ctx.invoked_subcommand is None:
        console.print("[yellow]Use 'skinvault --help' for available commands[/yellow]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
