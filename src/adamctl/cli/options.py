from __future__ import annotations

from typing import Annotated

import typer

ProfileOption = Annotated[
    str | None,
    typer.Option("--profile", "-P", help="Saved device profile name"),
]
HostOption = Annotated[
    str | None,
    typer.Option("--host", "-H", help="Device IP address or hostname"),
]
PortOption = Annotated[
    int | None,
    typer.Option("--port", "-p", min=1, max=65535, help="Device UDP port"),
]
