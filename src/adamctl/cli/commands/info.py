from __future__ import annotations

import typer
from rich.console import Console

from ..common import build_database, load_settings_or_exit, resolve_config_path_or_exit


def register(app: typer.Typer) -> None:
    @app.command()
    def info() -> None:
        """Show adamctl data directory info and stats."""
        settings = load_settings_or_exit()
        db = build_database(settings)
        try:
            profiles = db.load_profiles()
            sequences = db.load_sequences()
        except ValueError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(1) from exc

        config_path, config_exists = resolve_config_path_or_exit(allow_missing=True)

        console = Console()

        console.print("[bold]adamctl Info[/bold]\n")
        console.print(f"Data directory: {db.path}")
        console.print(f"Config file: {config_path if config_exists else 'defaults'}")

        console.print("\n[bold]Configuration[/bold]")
        console.print(f"Default device: {settings.device.target}")
        console.print(f"Timeout: {settings.device.timeout}s")
        console.print(
            f"Polling: every {settings.polling.interval}s, "
            f"lost after {settings.polling.failure_threshold} failures"
        )

        console.print("\n[bold]Statistics[/bold]")
        console.print(f"Device profiles: {len(profiles)}")
        console.print(f"Trigger sequences: {len(sequences)}")
