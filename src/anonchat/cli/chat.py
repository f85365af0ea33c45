"""Interactive terminal chat.

The lobby lists rooms and takes commands until the user joins; while joined
the room view redraws on every poll and each typed line is sent.
"""

from __future__ import annotations

import asyncio
import logging
import typing as t
from typing import Annotated

import typer
from rich.console import Console

from anonchat.config import get_config
from anonchat.connection import ChatClient
from anonchat.display import TerminalDisplay, render_room_list
from anonchat.exceptions import RoomCreationError
from anonchat.session import SessionController

from .connection import get_client

log = logging.getLogger(__name__)

LineReader = t.Callable[[str], t.Awaitable[str]]

LOBBY_HELP = (
    "[dim]<number> select a room, +<name> create a room, /nick <name> pick a "
    "nickname, /join enter the room, /refresh reload rooms, /quit exit[/dim]"
)


def _console_reader(console: Console) -> LineReader:
    async def read_line(prompt: str) -> str:
        return await asyncio.to_thread(console.input, prompt)

    return read_line


async def _lobby(session: SessionController, console: Console, read_line: LineReader) -> bool:
    """Handle one lobby command. Returns False when the user wants to quit."""
    console.print(render_room_list(session))
    selected = session.current_room.name if session.current_room else "-"
    console.print(f"Room: [bold]{selected}[/bold]  Nickname: [bold]{session.username or '-'}[/bold]")
    console.print(LOBBY_HELP)

    line = (await read_line("> ")).strip()
    if line == "/quit":
        return False
    if line == "/refresh":
        await session.refresh_rooms()
    elif line == "/nick" or line.startswith("/nick "):
        session.set_nickname(line[len("/nick") :].strip())
    elif line == "/join":
        if not session.join():
            console.print("[yellow]Pick a room and a nickname first.[/yellow]")
    elif line.startswith("+"):
        try:
            await session.create_room(line[1:])
        except RoomCreationError as e:
            console.print(f"[bold red]{e}[/bold red]")
    elif line.isdigit():
        index = int(line) - 1
        if 0 <= index < len(session.rooms):
            session.select_room(session.rooms[index])
        else:
            console.print(f"[yellow]No room #{line}.[/yellow]")
    elif line:
        console.print(f"[yellow]Unknown command: {line}[/yellow]")
    return True


async def _in_room(session: SessionController, read_line: LineReader) -> bool:
    """Handle one line typed inside a room. Returns False on /quit."""
    line = await read_line("")
    command = line.strip()
    if command == "/quit":
        return False
    if command == "/leave":
        session.leave()
        return True
    view = session.room_view
    view.set_input(line)
    await view.send_message()
    return True


async def run_chat(
    client: ChatClient,
    console: Console,
    nickname: str | None = None,
    room_id: str | None = None,
    read_line: LineReader | None = None,
) -> None:
    """Run the interactive chat until the user quits or input ends."""
    config = get_config()
    read_line = read_line or _console_reader(console)
    display = TerminalDisplay(console, height=config.viewport_height)

    async with client, SessionController(
        client, display=display, poll_interval=config.poll_interval
    ) as session:
        if nickname:
            session.set_nickname(nickname)
        if room_id is not None:
            room = next((r for r in session.rooms if str(r.id) == room_id), None)
            if room is None:
                console.print(f"[yellow]Room {room_id} not found.[/yellow]")
            else:
                session.select_room(room)
                session.join()

        try:
            while True:
                if session.has_joined:
                    keep_going = await _in_room(session, read_line)
                else:
                    keep_going = await _lobby(session, console, read_line)
                if not keep_going:
                    break
        except EOFError:
            log.debug("Input closed, leaving chat")


def chat_cmd(
    ctx: typer.Context,
    nickname: Annotated[
        str | None, typer.Option(help="Nickname for this session")
    ] = None,
    room: Annotated[
        str | None, typer.Option(help="Room ID to join right away")
    ] = None,
) -> None:
    """Chat interactively in a room."""
    asyncio.run(run_chat(get_client(ctx.obj["url"]), Console(), nickname, room))
