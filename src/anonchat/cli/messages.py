from __future__ import annotations

from typing import Annotated

import typer

from anonchat.connection import MESSAGE_LIMIT

from .connection import run_request
from .output import EXIT_CLIENT_ERROR, die, json_print

messages_app = typer.Typer()


@messages_app.command("list")
def list_messages(
    ctx: typer.Context,
    room: Annotated[str, typer.Argument(help="Room ID")],
    limit: Annotated[
        int, typer.Option(min=1, help="Maximum number of messages")
    ] = MESSAGE_LIMIT,
) -> None:
    """List the most recent messages of a room."""
    messages = run_request(
        ctx.obj["url"], lambda client: client.list_messages(room, limit=limit)
    )
    json_print(messages)


@messages_app.command("send")
def send_message(
    ctx: typer.Context,
    room: Annotated[str, typer.Argument(help="Room ID")],
    content: Annotated[str, typer.Argument(help="Message content")],
    username: Annotated[str, typer.Option(help="Nickname shown with the message")],
) -> None:
    """Send a message to a room."""
    content = content.strip()
    if not content:
        die("Invalid Message", "Message content must not be blank", 400, EXIT_CLIENT_ERROR)
    message = run_request(
        ctx.obj["url"],
        lambda client: client.post_message(room, username, content),
    )
    json_print(message)
