from __future__ import annotations

from typing import Annotated

import typer

from .connection import run_request
from .output import EXIT_CLIENT_ERROR, die, json_print

rooms_app = typer.Typer()


@rooms_app.command("list")
def list_rooms(ctx: typer.Context) -> None:
    """List all rooms."""
    rooms = run_request(ctx.obj["url"], lambda client: client.list_rooms())
    json_print(rooms)


@rooms_app.command("create")
def create_room(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Room name")],
) -> None:
    """Create a new room."""
    trimmed = name.strip()
    if not trimmed:
        die("Invalid Room Name", "Room name must not be blank", 400, EXIT_CLIENT_ERROR)
    room = run_request(ctx.obj["url"], lambda client: client.create_room(trimmed))
    json_print(room)
