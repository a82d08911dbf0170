from __future__ import annotations

import asyncio
import logging
import signal

import typer
from rich.console import Console

from adamctl.core import SequenceEngine
from adamctl.errors import AdamError
from adamctl.models import CommandRecord, DeviceTarget, TriggerSequence

from ..common import (
    build_client,
    build_database,
    load_settings_or_exit,
    print_record,
    resolve_target_or_exit,
)
from ..options import HostOption, PortOption, ProfileOption

logger = logging.getLogger(__name__)


async def _execute(
    engine: SequenceEngine,
    target: DeviceTarget,
    sequence: TriggerSequence,
) -> list[CommandRecord]:
    loop = asyncio.get_running_loop()
    installed = True
    try:
        loop.add_signal_handler(signal.SIGINT, engine.cancel)
    except (NotImplementedError, RuntimeError, ValueError):
        logger.debug("Signal handlers unavailable; Ctrl+C will abort without a cancel record")
        installed = False
    try:
        return await engine.run(target, sequence)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def run(
    name: str = typer.Argument(..., help="Sequence name or id"),
    loops: int | None = typer.Option(
        None, "--loops", "-n", min=0, help="Override the loop count (0 = forever)"
    ),
    profile: ProfileOption = None,
    host: HostOption = None,
    port: PortOption = None,
) -> None:
    """Run a saved trigger sequence. Ctrl+C cancels it."""
    settings = load_settings_or_exit()
    target = resolve_target_or_exit(settings, profile, host, port)
    db = build_database(settings)
    console = Console()

    try:
        sequence = db.get_sequence(name)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    if sequence is None:
        console.print(f"[red]Error:[/red] unknown sequence '{name}'")
        raise typer.Exit(1)
    if loops is not None:
        sequence = sequence.model_copy(update={"loop_count": loops})

    engine = SequenceEngine(
        build_client(settings), on_record=lambda record: print_record(console, record)
    )
    console.print(f"Running '{sequence.name}' on {target}. Press Ctrl+C to stop.\n")

    try:
        records = asyncio.run(_execute(engine, target, sequence))
    except AdamError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from None
    except KeyboardInterrupt:
        console.print("\n[yellow]Sequence aborted.[/yellow]")
        raise typer.Exit(130) from None

    failed = sum(1 for record in records if not record.success)
    console.print(f"\n[green]Done:[/green] {len(records)} step(s), {failed} failed")
    if failed:
        raise typer.Exit(1)


def register(app: typer.Typer) -> None:
    app.command()(run)
