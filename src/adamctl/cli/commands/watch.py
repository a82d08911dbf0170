from __future__ import annotations

import asyncio
from datetime import datetime

import typer
from rich.console import Console

from adamctl.core import StatusWatchdog
from adamctl.errors import AdamError
from adamctl.models import CHANNELS, Snapshot

from ..common import build_client, load_settings_or_exit, resolve_target_or_exit
from ..options import HostOption, PortOption, ProfileOption


def _render(snapshot: Snapshot) -> str:
    return " ".join(
        f"DI{ch}=[green]H[/green]" if snapshot[ch].name == "HIGH" else f"DI{ch}=[dim]L[/dim]"
        for ch in CHANNELS
    )


def watch(
    interval: float | None = typer.Option(
        None, "--interval", "-i", min=0.1, help="Polling interval in seconds"
    ),
    threshold: int | None = typer.Option(
        None, "--threshold", "-k", min=1, help="Consecutive failures before giving up"
    ),
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
) -> None:
    """Poll the device status until the connection is lost."""
    settings = load_settings_or_exit()
    target = resolve_target_or_exit(settings, profile, host, port)
    console = Console()
    lost = False

    def on_poll(snapshot: Snapshot | None, error: AdamError | None) -> None:
        stamp = datetime.now().strftime("%H:%M:%S")
        if snapshot is not None:
            console.print(f"[{stamp}] {_render(snapshot)}", highlight=False)
        else:
            console.print(f"[{stamp}] [red]poll failed:[/red] {error}", highlight=False)

    def on_connection_lost() -> None:
        nonlocal lost
        lost = True

    async def _watch() -> None:
        watchdog = StatusWatchdog(
            build_client(settings),
            target,
            interval=interval or settings.polling.interval,
            failure_threshold=threshold or settings.polling.failure_threshold,
            on_connection_lost=on_connection_lost,
            on_poll=on_poll,
        )
        watchdog.start()
        try:
            await watchdog.wait()
        finally:
            watchdog.stop()

    console.print(f"Polling {target}. Press Ctrl+C to stop.\n")
    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        console.print("\n[green]Polling stopped.[/green]")
        return

    if lost:
        console.print("[red]Connection lost.[/red]")
        raise typer.Exit(1)


def register(app: typer.Typer) -> None:
    app.command()(watch)
