"""CLI commands for API server management."""

from __future__ import annotations

from typing import Optional

import typer

from skinvault.config.settings import settings

api_app = typer.Typer(
    name="api",
    help="API server management commands",
    no_args_is_help=True,
)


@api_app.command()
def start(
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Port to run the server on (default: settings)"
    ),
    production: bool = typer.Option(
        False, "--production", help="Run in production mode"
    ),
) -> None:
    """
    Start the skinvault API server.

    Development mode (default): Auto-reload enabled, info logging.
    Production mode: Multiple workers, warning-level logging.

    Examples:
        skinvault api start
        skinvault api start --port 3000
        skinvault api start --production
    """
    import uvicorn

    port = port or settings.api_port

    if production:
        uvicorn.run(
            "skinvault.api.main:app",
            host=settings.api_host,
            port=port,
            workers=2,
            log_level="warning",
        )
    else:
        uvicorn.run(
            "skinvault.api.main:app",
            host=settings.api_host,
            port=port,
            reload=True,
            log_level="info",
        )
