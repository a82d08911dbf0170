from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from adamctl.core import run_mock_device
from adamctl.models import DEFAULT_PORT


def register(app: typer.Typer) -> None:
    @app.command()
    def mock(
        name: str = typer.Option("mock-adam-1", "--name", "-n", help="Device name"),
        host: str = typer.Option("0.0.0.0", "--host", "-H", help="Address to bind"),
        port: int = typer.Option(DEFAULT_PORT, "--port", "-p", help="UDP port to listen on"),
        model: str = typer.Option("6060", "--model", help="Model number to report"),
    ) -> None:
        """Run a mock output module for development."""
        console = Console()
        console.print(f"Starting mock device '{name}' on {host}:{port}/udp...")
        console.print("Press Ctrl+C to stop.\n")

        try:
            asyncio.run(run_mock_device(name=name, host=host, port=port, model=model))
        except KeyboardInterrupt:
            console.print("\n[green]Mock device stopped.[/green]")
