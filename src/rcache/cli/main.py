"""
CLI for inspecting an rcache directory.

Commands:
    rcache config - Show current configuration
    rcache key KEY - Show the on-disk path a key maps to
    rcache roots NAME VERSION - Show the directories of a namespace
    rcache get NAME VERSION KEY - Print a cached entry
    rcache version - Print version
"""

from __future__ import annotations

from typing import Annotated

import orjson
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from rcache import __version__
from rcache.cache import FilesystemCache, make_disk_key, manager_from_settings
from rcache.config import Settings, clear_settings_cache, get_settings
from rcache.exceptions import DirectoryUnavailableError, ExpiredError, NotFoundError
from rcache.logging import setup_logging

app = typer.Typer(
    name="rcache",
    help="rcache - inspect a namespaced, time-expiring disk cache",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


def _get_settings_safe() -> Settings | None:
    """Get settings, returning None if configuration is invalid."""
    try:
        clear_settings_cache()
        return get_settings()
    except ValueError:
        # pydantic's ValidationError is a ValueError
        return None


def _open_manager() -> FilesystemCache:
    settings = _get_settings_safe()
    if settings is None:
        error_console.print(
            "[red]Error:[/red] Configuration is invalid. "
            "Run 'rcache config' to see what's wrong."
        )
        raise typer.Exit(1)

    try:
        return manager_from_settings(settings)
    except DirectoryUnavailableError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.callback()
def main_callback() -> None:
    """Configure logging from settings before any command runs."""
    settings = _get_settings_safe()
    if settings is not None:
        setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = _get_settings_safe()

    if settings is None:
        error_console.print("[red]Configuration is invalid.[/red]")
        error_console.print()
        error_console.print("Check these environment variables:")
        error_console.print("  - CACHE_DIR (must name a directory)")
        error_console.print("  - CACHE_TTL (seconds or ISO-8601 duration, not negative)")
        error_console.print("  - LOG_LEVEL (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)")
        raise typer.Exit(1)

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key, value in settings.display().items():
        display_value = str(value) if value is not None else "[dim]not set[/dim]"
        table.add_row(key, display_value)

    console.print(table)


@app.command()
def key(
    key: Annotated[str, typer.Argument(help="Cache key to encode")],
) -> None:
    """Show the relative path a key is stored under."""
    console.print(make_disk_key(key), markup=False, highlight=False, soft_wrap=True)


@app.command()
def roots(
    name: Annotated[str, typer.Argument(help="Namespace name")],
    version: Annotated[str, typer.Argument(help="Namespace version")],
) -> None:
    """Show the directories a namespace is stored in.

    Creates the namespace directory if it does not exist yet.
    """
    cache = _open_manager().get_cache(name, version)
    dirs = cache.root_dirs()
    if not dirs:
        error_console.print(f"[yellow]Namespace {name}/{version} is unavailable.[/yellow]")
        raise typer.Exit(1)

    for d in dirs:
        console.print(d, markup=False, highlight=False, soft_wrap=True)


@app.command()
def get(
    name: Annotated[str, typer.Argument(help="Namespace name")],
    version: Annotated[str, typer.Argument(help="Namespace version")],
    key: Annotated[str, typer.Argument(help="Cache key")],
    raw: Annotated[
        bool,
        typer.Option("--raw", "-r", help="Print bytes as stored"),
    ] = False,
) -> None:
    """Print a cached entry, pretty-printing JSON content."""
    cache = _open_manager().get_cache(name, version)

    try:
        with cache.read(key) as f:
            data = f.read()
    except ExpiredError:
        error_console.print(f"[yellow]Expired:[/yellow] {escape(key)}", highlight=False)
        raise typer.Exit(1)
    except NotFoundError:
        error_console.print(f"[yellow]Not found:[/yellow] {escape(key)}", highlight=False)
        raise typer.Exit(1)

    if raw:
        typer.echo(data, nl=False)
        return

    try:
        text = orjson.dumps(orjson.loads(data), option=orjson.OPT_INDENT_2).decode("utf-8")
    except orjson.JSONDecodeError:
        text = data.decode("utf-8", errors="replace")
    console.print(text, markup=False, highlight=False, soft_wrap=True)


@app.command()
def version() -> None:
    """Print the version number."""
    console.print(f"rcache version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
