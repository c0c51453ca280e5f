"""
CLI commands for managing the render artifact cache.

Provides ``skinvault cache status``, ``purge``, ``invalidate`` and ``warm``.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from skinvault.config.database import db_manager
from skinvault.config.settings import settings
from skinvault.container import container
from skinvault.exceptions import InvalidSizeError, StorageError
from skinvault.models.enums import RenderKind
from skinvault.models.identity import normalize_identity
from skinvault.models.render import WarmResult
from skinvault.services.artifact_store import FilesystemArtifactStore
from skinvault.services.render_service import RenderService

console = Console()

# Valid --kind values
_VALID_KINDS = {"avatar", "head", "all"}

app = typer.Typer(
    name="cache",
    help="Manage the render artifact cache.",
    no_args_is_help=True,
)


def _build_artifact_store() -> FilesystemArtifactStore:
    """Return the artifact store configured from application settings."""
    return container.artifact_store


def _build_render_service() -> RenderService:
    """Return the render service configured from application settings."""
    return container.render_service


def format_size(size_bytes: int) -> str:
    """Convert bytes to human-readable format."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


@app.command(name="status")
def status() -> None:
    """
    Display render cache statistics.

    Examples:
        skinvault cache status
    """
    try:
        asyncio.run(_status_async())
    except KeyboardInterrupt:
        console.print("\n[yellow]Status check interrupted by user[/yellow]")
        raise typer.Exit(code=130)


async def _status_async() -> None:
    """Async implementation of the cache status command."""
    stats = await _build_artifact_store().get_stats()

    table = Table(title="Render Cache Status")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Cached renders", f"{stats.artifact_count:,}")
    table.add_row("Players", f"{stats.identity_count:,}")
    table.add_row("Size", format_size(stats.total_size_bytes))

    console.print()
    console.print(table)
    console.print()

    console.print(f"  Cache directory: {settings.artifacts_dir}")
    if stats.oldest_file is not None:
        console.print(f"  Oldest file:     {stats.oldest_file.strftime('%Y-%m-%d')}")
    if stats.newest_file is not None:
        console.print(f"  Newest file:     {stats.newest_file.strftime('%Y-%m-%d')}")
    console.print()


# ---------------------------------------------------------------------------
# purge
# ---------------------------------------------------------------------------


@app.command(name="purge")
def purge(
    force: bool = typer.Option(
        False,
        "--force",
        help="Skip confirmation prompt",
    ),
) -> None:
    """
    Delete every cached render.

    Renders are re-derived from the stored skins on the next request.

    Examples:
        skinvault cache purge
        skinvault cache purge --force
    """
    if not force:
        confirmation = typer.confirm(
            "Are you sure you want to purge all cached renders?",
            default=False,
        )
        if not confirmation:
            console.print("[yellow]Purge cancelled by user[/yellow]")
            raise typer.Exit(code=1)

    try:
        bytes_freed = asyncio.run(_build_artifact_store().purge())
    except KeyboardInterrupt:
        console.print("\n[yellow]Purge interrupted by user[/yellow]")
        raise typer.Exit(code=130)

    console.print()
    console.print(f"[green]Purge complete: freed {format_size(bytes_freed)}[/green]")
    console.print()


# ---------------------------------------------------------------------------
# invalidate
# ---------------------------------------------------------------------------


@app.command(name="invalidate")
def invalidate(
    user_uuid: str = typer.Argument(..., help="Player UUID (hyphens optional)"),
) -> None:
    """
    Drop every cached render of one player.

    Examples:
        skinvault cache invalidate 069a79f4-44e9-4726-a5be-fca90e38aaf5
    """
    try:
        identity = normalize_identity(user_uuid)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=2)

    try:
        removed = asyncio.run(_build_render_service().on_source_changed(identity))
    except StorageError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Removed {removed} cached render(s) for {identity}[/green]")


# ---------------------------------------------------------------------------
# warm
# ---------------------------------------------------------------------------


@app.command(name="warm")
def warm(
    kind: str = typer.Option(
        "all",
        "--kind",
        help='Render kind to warm: "avatar", "head", or "all"',
    ),
    sizes: Optional[List[int]] = typer.Option(
        None,
        "--size",
        "-s",
        help="Render size in pixels (repeatable; default: settings)",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-l",
        help="Maximum number of players to process",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Preview mode: show counts without rendering",
    ),
) -> None:
    """
    Pre-render avatars and heads for every player with a skin.

    The command is resumable: renders that are already cached are skipped.

    Examples:
        skinvault cache warm
        skinvault cache warm --kind head --size 64 --size 128
        skinvault cache warm --limit 100 --dry-run
    """
    if kind not in _VALID_KINDS:
        console.print(
            f'[red]Error: Invalid --kind "{kind}". '
            f"Must be one of: {', '.join(sorted(_VALID_KINDS))}[/red]"
        )
        raise typer.Exit(code=2)

    if limit is not None and limit <= 0:
        console.print("[red]Error: --limit must be a positive integer[/red]")
        raise typer.Exit(code=2)

    kinds = (
        [RenderKind.AVATAR, RenderKind.HEAD] if kind == "all" else [RenderKind(kind)]
    )
    render_sizes = list(sizes) if sizes else [settings.default_render_size]

    try:
        result = asyncio.run(
            _warm_async(kinds=kinds, sizes=render_sizes, limit=limit, dry_run=dry_run)
        )
    except InvalidSizeError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(code=2)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cache warming interrupted by user[/yellow]")
        raise typer.Exit(code=130)

    _display_summary(result, dry_run=dry_run)

    # Exit code: 0 = success, 1 = some renders fell back to placeholders
    if result.placeholders > 0:
        raise typer.Exit(code=1)


async def _warm_async(
    *,
    kinds: List[RenderKind],
    sizes: List[int],
    limit: int | None,
    dry_run: bool,
) -> WarmResult:
    """Async implementation of the cache warm command.

    Parameters
    ----------
    kinds : List[RenderKind]
        Render kinds to produce.
    sizes : List[int]
        Render sizes to produce.
    limit : int | None
        Maximum number of players to process.
    dry_run : bool
        If ``True``, only report counts without rendering.
    """
    service = _build_render_service()

    if dry_run:
        console.print("[yellow]Dry run - no renders will be written.[/yellow]\n")

    result = WarmResult(rendered=0, cached=0, placeholders=0, total=0)
    try:
        async for session in db_manager.get_session():
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=console,
            ) as progress:
                task = progress.add_task("Warming renders", total=None)

                def callback(identity: str, state: str) -> None:
                    progress.update(
                        task, advance=1, description=f"Warming {identity[:8]} ({state})"
                    )

                result = await service.warm(
                    session,
                    kinds=kinds,
                    sizes=sizes,
                    limit=limit,
                    dry_run=dry_run,
                    progress_callback=callback,
                )
    finally:
        await db_manager.close()

    return result


def _display_summary(result: WarmResult, *, dry_run: bool) -> None:
    """Display a summary table of warming results."""
    console.print()

    table = Table(title="Cache Warm Summary")
    table.add_column("To Render" if dry_run else "Rendered", style="green", justify="right")
    table.add_column("Cached", style="blue", justify="right")
    table.add_column("Placeholders", style="yellow", justify="right")
    table.add_column("Total", style="bold", justify="right")
    table.add_row(
        str(result.rendered),
        str(result.cached),
        str(result.placeholders),
        str(result.total),
    )

    console.print(table)
