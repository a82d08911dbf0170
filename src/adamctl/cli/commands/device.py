from __future__ import annotations

import asyncio
from enum import Enum

import typer
from rich.console import Console

from adamctl.errors import AdamError
from adamctl.models import CommandRecord, OutputState

from ..common import (
    build_client,
    load_settings_or_exit,
    print_record,
    resolve_target_or_exit,
    snapshot_table,
)
from ..options import HostOption, PortOption, ProfileOption


class Level(str, Enum):
    high = "high"
    low = "low"

    @property
    def state(self) -> OutputState:
        return OutputState.HIGH if self is Level.high else OutputState.LOW


def _finish(console: Console, record: CommandRecord) -> None:
    print_record(console, record)
    if not record.success:
        raise typer.Exit(1)


def status(
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
) -> None:
    """Read the state of all six outputs."""
    settings = load_settings_or_exit()
    target = resolve_target_or_exit(settings, profile, host, port)
    client = build_client(settings)
    console = Console()

    record = asyncio.run(client.read_status(target))
    print_record(console, record)
    if not record.success:
        raise typer.Exit(1)
    console.print(snapshot_table(client.snapshot()))


def identify(
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
) -> None:
    """Test the connection by reading firmware, model and name."""
    settings = load_settings_or_exit()
    target = resolve_target_or_exit(settings, profile, host, port)
    client = build_client(settings)

    _finish(Console(), asyncio.run(client.test_connection(target)))


def set_output(
    channel: int = typer.Argument(..., help="Output channel (0-5)"),
    level: Level = typer.Argument(..., help="high or low"),
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
) -> None:
    """Drive one output HIGH or LOW.

    The device command always carries all six outputs, so the current states
    are read first to avoid clobbering the other channels.
    """
    settings = load_settings_or_exit()
    target = resolve_target_or_exit(settings, profile, host, port)
    client = build_client(settings)
    console = Console()

    async def _run() -> CommandRecord:
        try:
            await client.fetch_status(target)
        except AdamError as exc:
            console.print(f"[yellow]![/yellow] Could not read current states: {exc}")
        return await client.set_output(target, channel, level.state)

    try:
        record = asyncio.run(_run())
    except AdamError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from None
    _finish(console, record)


def set_all(
    level: Level = typer.Argument(..., help="high or low"),
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
) -> None:
    """Drive all outputs HIGH or LOW."""
    settings = load_settings_or_exit()
    target = resolve_target_or_exit(settings, profile, host, port)
    client = build_client(settings)

    _finish(Console(), asyncio.run(client.set_all(target, level.state)))


def send(
    command: str = typer.Argument(..., help="Raw command, e.g. '$01M'"),
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
) -> None:
    """Send a raw command and print the reply."""
    settings = load_settings_or_exit()
    target = resolve_target_or_exit(settings, profile, host, port)
    client = build_client(settings)

    _finish(Console(), asyncio.run(client.send_raw(target, command)))


def register(app: typer.Typer) -> None:
    app.command()(status)
    app.command()(identify)
    app.command("set")(set_output)
    app.command("all")(set_all)
    app.command()(send)
