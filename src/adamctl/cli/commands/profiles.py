from __future__ import annotations

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from adamctl.models import DEFAULT_PORT

from ..common import build_database, load_settings_or_exit

app = typer.Typer(no_args_is_help=True, help="Manage saved device profiles")


@app.command("list")
def list_profiles() -> None:
    """List saved device profiles."""
    settings = load_settings_or_exit()
    db = build_database(settings)
    try:
        profiles = db.load_profiles()
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    console = Console()

    if not profiles:
        console.print("No device profiles defined.")
        console.print(f"Use 'adamctl profiles add' or edit {db.profiles_path}")
        return

    table = Table()
    table.add_column("Name", style="cyan")
    table.add_column("Address", style="green")
    table.add_column("Description")

    for profile in sorted(profiles, key=lambda p: p.name):
        table.add_row(profile.name, f"{profile.host}:{profile.port}", profile.description)

    console.print(table)


@app.command("add")
def add_profile(
    name: str = typer.Argument(..., help="Profile name"),
    host: str = typer.Argument(..., help="Device IP address or hostname"),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", help="Device UDP port"),
    description: str = typer.Option("", "--description", "-d", help="Optional notes"),
) -> None:
    """Add or update a device profile."""
    settings = load_settings_or_exit()
    db = build_database(settings)
    try:
        db.add_profile(name, host, port, description)
    except (ValidationError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    console = Console()
    console.print(f"[green]✓[/green] Saved profile '{name}' → {host}:{port}")


@app.command("remove")
def remove_profile(name: str = typer.Argument(..., help="Profile name")) -> None:
    """Remove a device profile."""
    settings = load_settings_or_exit()
    db = build_database(settings)

    console = Console()
    if db.remove_profile(name):
        console.print(f"[green]✓[/green] Removed profile '{name}'")
    else:
        console.print(f"[yellow]![/yellow] Profile '{name}' not found")
        raise typer.Exit(1)
