from __future__ import annotations

from typing import Annotated

import typer

from adamctl.utils.logging import setup_logging

from .commands import config as config_cmd
from .commands import profiles as profiles_cmd
from .commands import sequences as sequences_cmd
from .commands.device import register as register_device
from .commands.info import register as register_info
from .commands.init import register as register_init
from .commands.mock import register as register_mock
from .commands.run import register as register_run
from .commands.watch import register as register_watch

app = typer.Typer(
    help="adamctl - drive ADAM-6060 style digital output modules over UDP",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config")
app.add_typer(profiles_cmd.app, name="profiles")
app.add_typer(sequences_cmd.app, name="sequences")

register_init(app)
register_info(app)
register_device(app)
register_run(app)
register_watch(app)
register_mock(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
) -> None:
    """adamctl CLI."""
    setup_logging()

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"adamctl version {get_version('adamctl')}")
        raise typer.Exit()


def run() -> None:
    app()


if __name__ == "__main__":
    run()
