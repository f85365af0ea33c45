"""Rendering of rooms and messages.

The controllers only talk to a ``ChatDisplay``; ``TerminalDisplay`` is the
rich-based implementation used by the interactive CLI.
"""

from __future__ import annotations

import typing as t

from rich.align import Align
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from anonchat.schemas import Message

if t.TYPE_CHECKING:
    from anonchat.room_view import RoomViewController
    from anonchat.session import SessionController

LOADING_ROOMS = "Loading rooms..."
NO_ROOMS = "No rooms yet. Create one below."
LOADING_MESSAGES = "Loading messages..."
NO_MESSAGES = "No messages yet. Be the first to say hi!"

Ownership = t.Literal["own", "other"]


class ChatDisplay(t.Protocol):
    """Receives the message list of an active room."""

    def render(self, view: RoomViewController) -> None: ...

    def scroll_to_bottom(self) -> None: ...


def classify(message: Message, username: str) -> Ownership:
    """Own vs. other, decided only by comparing the nickname strings."""
    return "own" if message.username == username else "other"


def room_list_placeholder(session: SessionController) -> str | None:
    """Text shown instead of the room list, or None if there are rooms."""
    if session.loading_rooms:
        return LOADING_ROOMS
    if not session.rooms:
        return NO_ROOMS
    return None


def message_list_placeholder(view: RoomViewController) -> str | None:
    """Text shown instead of the message list, or None if there are messages."""
    if view.loading:
        return LOADING_MESSAGES
    if not view.messages:
        return NO_MESSAGES
    return None


def render_room_list(session: SessionController) -> RenderableType:
    """Numbered room table; the selected room is highlighted."""
    placeholder = room_list_placeholder(session)
    if placeholder is not None:
        return Text(placeholder, style="dim")

    table = Table(title="Choose a room", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("id", style="dim")
    current = session.current_room
    for index, room in enumerate(session.rooms, start=1):
        selected = current is not None and current.id == room.id
        table.add_row(
            str(index), room.name, str(room.id), style="bold blue" if selected else None
        )
    return table


def render_message(message: Message, username: str) -> RenderableType:
    header = Text(message.username, style="dim")
    # Text keeps newlines and runs of spaces as typed
    body = Text(message.content)
    if classify(message, username) == "own":
        bubble = Panel(Group(header, body), expand=False, style="on dark_green")
        return Align.right(bubble)
    bubble = Panel(Group(header, body), expand=False)
    return Align.left(bubble)


class TerminalDisplay:
    """Fixed-height viewport over the message list of a room.

    ``offset`` is the number of messages hidden above the viewport; the
    bottom of the list is reached at ``max_offset``.

    Parameters
    ----------
    console
        Rich console to draw on.
    height
        Number of messages visible at once.
    """

    def __init__(self, console: Console | None = None, height: int = 20) -> None:
        self.console = console or Console()
        self.height = height
        self.offset = 0
        self.view: RoomViewController | None = None
        self._drawn: tuple | None = None
        self._bottom = 0

    @property
    def max_offset(self) -> int:
        if self.view is None:
            return 0
        return max(0, len(self.view.messages) - self.height)

    def visible_messages(self) -> list[Message]:
        if self.view is None:
            return []
        return self.view.messages[self.offset : self.offset + self.height]

    def render(self, view: RoomViewController) -> None:
        """Draw ``view``. A viewport resting at the bottom follows new messages."""
        following = self.offset >= self._bottom
        self.view = view
        if following:
            self.offset = self.max_offset
        else:
            self.offset = min(self.offset, self.max_offset)
        self._bottom = self.max_offset
        self.draw()

    def scroll_to_bottom(self) -> None:
        self.offset = self._bottom = self.max_offset
        self.draw()

    def draw(self, force: bool = False) -> None:
        """Redraw the room unless nothing visible changed since the last draw."""
        view = self.view
        if view is None:
            return
        key = (view.room.id, view.loading, tuple(view.messages), self.offset)
        if key == self._drawn and not force:
            return
        self._drawn = key

        placeholder = message_list_placeholder(view)
        if placeholder is not None:
            body: RenderableType = Text(placeholder, style="dim")
        else:
            body = Group(
                *(render_message(m, view.username) for m in self.visible_messages())
            )

        self.console.clear()
        self.console.print(
            Panel(
                body,
                title=f"Room: {view.room.name}",
                subtitle="type a message, /leave to go back, /quit to exit",
            )
        )
