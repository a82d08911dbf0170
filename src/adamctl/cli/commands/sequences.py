from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from adamctl.models import (
    OUTPUT_COUNT,
    DelayAction,
    SequenceAction,
    SetHighAction,
    SetLowAction,
    TriggerSequence,
)
from adamctl.storage import Database

from ..common import build_database, load_settings_or_exit

app = typer.Typer(no_args_is_help=True, help="Build and inspect trigger sequences")

ChannelArgument = Annotated[
    int, typer.Argument(min=0, max=OUTPUT_COUNT - 1, help="Output channel (0-5)")
]
SequenceArgument = Annotated[str, typer.Argument(help="Sequence name or id")]


def _loops(sequence: TriggerSequence) -> str:
    return "∞" if sequence.loop_count == 0 else str(sequence.loop_count)


def _database() -> Database:
    return build_database(load_settings_or_exit())


def _load(db: Database) -> list[TriggerSequence]:
    try:
        return db.load_sequences()
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def _find(db: Database, name: str) -> TriggerSequence:
    sequence = next((s for s in _load(db) if s.name == name or str(s.id) == name), None)
    if sequence is None:
        Console().print(f"[red]Error:[/red] unknown sequence '{name}'")
        raise typer.Exit(1)
    return sequence


def _action_at(sequence: TriggerSequence, position: int) -> SequenceAction:
    if not 1 <= position <= sequence.action_count:
        Console().print(
            f"[red]Error:[/red] '{sequence.name}' has no action #{position} "
            f"(it has {sequence.action_count})"
        )
        raise typer.Exit(1)
    return sequence.actions[position - 1]


def _append(name: str, action: SequenceAction) -> None:
    db = _database()
    sequence = _find(db, name)
    sequence.add_action(action)
    db.save_sequence(sequence)
    Console().print(
        f"[green]✓[/green] Added #{sequence.action_count} {action.description} to '{sequence.name}'"
    )


@app.command("list")
def list_sequences() -> None:
    """List saved trigger sequences."""
    sequences = _load(_database())
    console = Console()

    if not sequences:
        console.print("No trigger sequences saved.")
        console.print("Use 'adamctl sequences create' to add one.")
        return

    table = Table()
    table.add_column("Name", style="cyan")
    table.add_column("Actions", justify="right")
    table.add_column("Loops", justify="right")
    table.add_column("Delay / loop", justify="right")
    table.add_column("Description")

    for sequence in sequences:
        table.add_row(
            sequence.name,
            str(sequence.action_count),
            _loops(sequence),
            f"{sequence.total_delay_ms} ms",
            sequence.description,
        )

    console.print(table)


@app.command("show")
def show_sequence(name: SequenceArgument) -> None:
    """Show the actions of one sequence."""
    sequence = _find(_database(), name)
    console = Console()

    console.print(f"[bold]{sequence.name}[/bold] (loops: {_loops(sequence)})")
    if sequence.description:
        console.print(sequence.description)

    table = Table()
    table.add_column("#", justify="right")
    table.add_column("Type", style="cyan")
    table.add_column("Action")
    for index, action in enumerate(sequence.actions, start=1):
        table.add_row(str(index), action.action_type, action.description)
    console.print(table)


@app.command("create")
def create_sequence(
    name: str = typer.Argument(..., help="Sequence name"),
    description: str = typer.Option("", "--description", "-d", help="Optional notes"),
    loops: int = typer.Option(1, "--loops", "-n", min=0, help="Loop count (0 = forever)"),
) -> None:
    """Create an empty trigger sequence."""
    db = _database()
    if any(s.name == name for s in _load(db)):
        Console().print(f"[red]Error:[/red] sequence '{name}' already exists")
        raise typer.Exit(1)

    db.save_sequence(TriggerSequence(name=name, description=description, loop_count=loops))
    Console().print(f"[green]✓[/green] Created sequence '{name}'")


@app.command("edit")
def edit_sequence(
    name: SequenceArgument,
    new_name: str | None = typer.Option(None, "--name", help="Rename the sequence"),
    description: str | None = typer.Option(None, "--description", "-d", help="Replace notes"),
    loops: int | None = typer.Option(None, "--loops", "-n", min=0, help="Loop count (0 = forever)"),
) -> None:
    """Change the name, description or loop count of a sequence."""
    db = _database()
    sequence = _find(db, name)

    if new_name is not None and new_name != sequence.name:
        if any(s.name == new_name for s in _load(db)):
            Console().print(f"[red]Error:[/red] sequence '{new_name}' already exists")
            raise typer.Exit(1)
        sequence.name = new_name
    if description is not None:
        sequence.description = description
    if loops is not None:
        sequence.loop_count = loops
    sequence.touch()

    db.save_sequence(sequence)
    Console().print(f"[green]✓[/green] Updated sequence '{sequence.name}' (loops: {_loops(sequence)})")


@app.command("delete")
def delete_sequence(name: SequenceArgument) -> None:
    """Delete a trigger sequence."""
    db = _database()
    console = Console()
    if db.remove_sequence(name):
        console.print(f"[green]✓[/green] Deleted sequence '{name}'")
    else:
        console.print(f"[yellow]![/yellow] Sequence '{name}' not found")
        raise typer.Exit(1)


@app.command("add-high")
def add_high(name: SequenceArgument, channel: ChannelArgument) -> None:
    """Append a set-HIGH action."""
    _append(name, SetHighAction(channel=channel))


@app.command("add-low")
def add_low(name: SequenceArgument, channel: ChannelArgument) -> None:
    """Append a set-LOW action."""
    _append(name, SetLowAction(channel=channel))


@app.command("add-delay")
def add_delay(
    name: SequenceArgument,
    duration_ms: int = typer.Argument(..., min=0, help="Delay in milliseconds"),
) -> None:
    """Append a delay action."""
    _append(name, DelayAction(duration_ms=duration_ms))


@app.command("remove")
def remove_action(
    name: SequenceArgument,
    position: int = typer.Argument(..., help="Action number as shown by 'sequences show'"),
) -> None:
    """Remove one action from a sequence."""
    db = _database()
    sequence = _find(db, name)
    action = _action_at(sequence, position)

    sequence.remove_action(action.id)
    db.save_sequence(sequence)
    Console().print(f"[green]✓[/green] Removed #{position} {action.description}")


@app.command("move")
def move_action(
    name: SequenceArgument,
    position: int = typer.Argument(..., help="Action number to move"),
    to: int = typer.Argument(..., help="New action number"),
) -> None:
    """Move an action to another position."""
    db = _database()
    sequence = _find(db, name)
    action = _action_at(sequence, position)
    _action_at(sequence, to)

    if sequence.move_action(action.id, to - position):
        db.save_sequence(sequence)
    Console().print(f"[green]✓[/green] {action.description} is now #{to}")
