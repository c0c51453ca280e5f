"""CLI commands for database management."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from sqlalchemy.exc import SQLAlchemyError

from skinvault.config.database import db_manager
from skinvault.config.settings import settings

console = Console()

db_app = typer.Typer(
    name="db",
    help="Database management commands",
    no_args_is_help=True,
)


async def _init_async() -> None:
    try:
        await db_manager.create_tables()
    finally:
        await db_manager.close()


@db_app.command(name="init")
def init() -> None:
    """
    Create the database tables.

    Intended for development databases; use ``alembic upgrade head`` for
    production deployments.

    Examples:
        skinvault db init
    """
    if settings.is_sqlite:
        # SQLite will not create missing parent directories
        db_path = settings.effective_database_url.split("///", 1)[-1]
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    try:
        asyncio.run(_init_async())
    except SQLAlchemyError as e:
        console.print(f"[red]Error: failed to create tables: {e}[/red]")
        raise typer.Exit(code=1)

    console.print("[green]Database tables created[/green]")
