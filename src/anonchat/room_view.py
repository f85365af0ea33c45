"""Active-room state: message list, composition field and the poll loop."""

from __future__ import annotations

import asyncio
import logging

import httpx

from anonchat.connection import MESSAGE_LIMIT, ChatClient
from anonchat.display import ChatDisplay, classify
from anonchat.schemas import Message, Room

log = logging.getLogger(__name__)

POLL_INTERVAL = 2.0


class RoomViewController:
    """Message list of one room, refreshed on a fixed delay while active.

    One instance is bound to exactly one room and one nickname. It is created
    when a room becomes active and discarded when the room changes or the
    user leaves; nothing is shared between instances.

    Every refresh replaces ``messages`` wholesale with the server's answer.
    Refreshes started by the poll loop and by ``send_message`` are not
    serialized, so the response that resolves last wins.

    Parameters
    ----------
    client
        Backend connection.
    room
        The room to display.
    username
        The session's nickname, used for posting and own/other rendering.
    display
        Optional renderer notified after each applied refresh.
    poll_interval
        Delay between two polls, in seconds.
    """

    def __init__(
        self,
        client: ChatClient,
        room: Room,
        username: str,
        display: ChatDisplay | None = None,
        poll_interval: float = POLL_INTERVAL,
    ) -> None:
        self.client = client
        self.room = room
        self.username = username
        self.display = display
        self.poll_interval = poll_interval

        self.messages: list[Message] = []
        self.loading = True
        self.input = ""

        self._task: asyncio.Task | None = None
        self._closed = False

    def __repr__(self) -> str:
        return f"RoomViewController(room={self.room.id!r}, username={self.username!r})"

    @property
    def active(self) -> bool:
        """Whether the poll loop is running."""
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Refresh immediately, then keep refreshing every ``poll_interval``.

        Must be called from a running event loop.
        """
        if self._closed:
            raise RuntimeError(f"{self!r} was already stopped")
        if self.active:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._poll(), name=f"anonchat-poll-{self.room.id}"
        )
        log.debug(f"Started polling room {self.room.id} every {self.poll_interval}s")
        if self.display is not None:
            self.display.render(self)

    def stop(self) -> None:
        """Cancel the poll loop. No request is issued for this room afterwards."""
        self._closed = True
        if self._task is not None:
            self._task.cancel()
            log.debug(f"Stopped polling room {self.room.id}")

    async def aclose(self) -> None:
        """Stop and wait until the poll loop has finished."""
        self.stop()
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _poll(self) -> None:
        while True:
            await self.refresh_messages()
            await asyncio.sleep(self.poll_interval)

    async def refresh_messages(self) -> None:
        """Replace the message list with the room's most recent messages.

        Failures keep the previous list but still redraw, without scrolling,
        so the cleared loading flag shows. Answers arriving after ``stop()``
        are dropped.
        """
        if self._closed:
            return
        try:
            messages = await self.client.list_messages(self.room.id, limit=MESSAGE_LIMIT)
        except (httpx.HTTPError, ValueError) as e:
            log.warning(f"Failed to fetch messages for room {self.room.id}: {e}")
            self.loading = False
            if not self._closed and self.display is not None:
                self.display.render(self)
            return
        finally:
            self.loading = False

        if self._closed:
            return
        self.messages = messages
        if self.display is not None:
            self.display.render(self)
            self.display.scroll_to_bottom()

    def set_input(self, text: str) -> None:
        self.input = text

    async def send_message(self) -> bool:
        """Post the composition field to the room.

        The field is cleared before the request goes out and is not restored
        if posting fails. On success the list is refetched; the new message
        shows up once the server returns it.

        Returns
        -------
        bool
            True if the message was accepted by the backend.
        """
        content = self.input.strip()
        if not content:
            return False

        self.input = ""
        try:
            await self.client.post_message(self.room.id, self.username, content)
        except (httpx.HTTPError, ValueError) as e:
            log.warning(f"Failed to send message to room {self.room.id}: {e}")
            return False

        await self.refresh_messages()
        if self.display is not None and not self._closed:
            self.display.scroll_to_bottom()
        return True

    def is_own(self, message: Message) -> bool:
        return classify(message, self.username) == "own"
