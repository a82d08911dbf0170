from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from adamctl.config import (
    Settings,
    data_dir_from_settings,
    get_settings,
    resolve_config_path,
)
from adamctl.core import DeviceClient, UdpTransport
from adamctl.models import CHANNELS, CommandRecord, DeviceTarget, Snapshot
from adamctl.storage import Database


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_database(settings: Settings, data_dir: Path | None = None) -> Database:
    path = data_dir or data_dir_from_settings(settings)
    return Database(path)


def build_client(settings: Settings) -> DeviceClient:
    return DeviceClient(UdpTransport(timeout=settings.device.timeout))


def resolve_target_or_exit(
    settings: Settings,
    profile: str | None,
    host: str | None,
    port: int | None,
) -> DeviceTarget:
    """Pick the target from a saved profile, explicit options or config."""
    if profile is not None:
        try:
            found = build_database(settings).get_profile(profile)
        except ValueError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(1) from exc
        if found is None:
            typer.echo(f"Error: unknown profile '{profile}'", err=True)
            raise typer.Exit(1)
        base = found.target
    else:
        base = settings.device.target

    try:
        return DeviceTarget(host=host or base.host, port=port or base.port)
    except ValidationError as exc:
        typer.echo(f"Error: invalid target: {exc}", err=True)
        raise typer.Exit(1) from exc


def print_record(console: Console, record: CommandRecord) -> None:
    style = "green" if record.success else "red"
    line = f"[{style}]{record.formatted}[/{style}]"
    if record.description:
        line += f"  {record.description}"
    console.print(line, highlight=False)
    if record.response:
        console.print(f"  response: {record.response}", highlight=False)


def snapshot_table(snapshot: Snapshot) -> Table:
    table = Table()
    table.add_column("Output", style="cyan")
    table.add_column("State")
    for channel in CHANNELS:
        state = snapshot[channel]
        colour = "green" if state.name == "HIGH" else "dim"
        table.add_row(f"DI{channel}", f"[{colour}]{state}[/{colour}]")
    return table
