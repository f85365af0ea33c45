"""Top-level navigation state: room list, room choice, nickname, join flag.

Example
-------
>>> async with ChatClient() as client, SessionController(client) as session:
...     await session.create_room("General")
...     session.set_nickname("Fox")
...     session.join()
"""

from __future__ import annotations

import logging

import httpx

from anonchat.connection import ChatClient
from anonchat.display import ChatDisplay
from anonchat.exceptions import RoomCreationError
from anonchat.room_view import POLL_INTERVAL, RoomViewController
from anonchat.schemas import Room

log = logging.getLogger(__name__)


class SessionController:
    """Client-side session of one anonymous user.

    Nothing here is persisted. The room list is a snapshot that is only ever
    replaced wholesale. ``has_joined`` can only become true with a selected
    room and a non-blank nickname; leaving resets the flag but keeps both.

    While joined, the session owns one ``RoomViewController`` for the current
    room. It is replaced when another room is selected and torn down on
    leave, so polling never targets a room that is no longer shown.

    Parameters
    ----------
    client
        Backend connection, shared with the room views.
    display
        Renderer handed to each room view.
    poll_interval
        Poll delay handed to each room view, in seconds.
    """

    def __init__(
        self,
        client: ChatClient,
        display: ChatDisplay | None = None,
        poll_interval: float = POLL_INTERVAL,
    ) -> None:
        self.client = client
        self.display = display
        self.poll_interval = poll_interval

        self.rooms: list[Room] = []
        self.loading_rooms = True
        self.room_name = ""
        self.current_room: Room | None = None
        self.username = ""
        self.has_joined = False
        self.room_view: RoomViewController | None = None

    async def __aenter__(self) -> SessionController:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Load the room list for the first time."""
        await self.refresh_rooms()

    async def close(self) -> None:
        """Tear down the active room view, if any."""
        if self.room_view is not None:
            await self.room_view.aclose()
            self.room_view = None

    async def refresh_rooms(self) -> None:
        """Replace the room list with the backend's. Failures keep the old list."""
        self.loading_rooms = True
        try:
            self.rooms = await self.client.list_rooms()
        except (httpx.HTTPError, ValueError) as e:
            log.warning(f"Failed to fetch rooms: {e}")
        finally:
            self.loading_rooms = False

    def set_room_name(self, text: str) -> None:
        self.room_name = text

    async def create_room(self, name: str | None = None) -> Room | None:
        """Create a room from the room name field and select it.

        Parameters
        ----------
        name
            Replaces the room name field before creating, if given.

        Returns
        -------
        Room | None
            The selected new room, or None if the name was blank.

        Raises
        ------
        RoomCreationError
            If the backend answered with an error status or was unreachable.
            The name field, room list and selection are left untouched.
        """
        if name is not None:
            self.room_name = name
        trimmed = self.room_name.strip()
        if not trimmed:
            return None

        try:
            created = await self.client.create_room(trimmed)
        except httpx.HTTPStatusError as e:
            log.warning(f"Backend refused room {trimmed!r}: {e}")
            raise RoomCreationError("Failed to create room") from e
        except (httpx.RequestError, ValueError) as e:
            raise RoomCreationError(str(e) or "Failed to create room") from e

        self.room_name = ""
        await self.refresh_rooms()
        # Prefer the refetched entry so the selection is a member of the list
        room = next((r for r in self.rooms if r.id == created.id), created)
        self.select_room(room)
        log.info(f"Created room {room.name!r} ({room.id})")
        return room

    def select_room(self, room: Room) -> None:
        """Select a room. Does not reset ``has_joined``."""
        previous = self.current_room
        self.current_room = room
        if self.has_joined and (previous is None or previous.id != room.id):
            self._activate_room_view()

    def set_nickname(self, text: str) -> None:
        """Store the nickname field as typed; trimming happens at join time."""
        self.username = text

    @property
    def can_join(self) -> bool:
        return bool(self.username.strip()) and self.current_room is not None

    def join(self) -> bool:
        """Enter the selected room. Pure client-side transition.

        Returns
        -------
        bool
            False if the nickname is blank or no room is selected.
        """
        if not self.can_join:
            return False
        if self.has_joined:
            return True
        self.has_joined = True
        self._activate_room_view()
        log.info(f"Joined room {self.current_room.id} as {self.username!r}")
        return True

    def leave(self) -> None:
        """Leave the room view. Room choice and nickname are kept."""
        self.has_joined = False
        self._deactivate_room_view()
        log.info("Left room")

    def _activate_room_view(self) -> None:
        self._deactivate_room_view()
        self.room_view = RoomViewController(
            self.client,
            self.current_room,
            self.username,
            display=self.display,
            poll_interval=self.poll_interval,
        )
        self.room_view.start()

    def _deactivate_room_view(self) -> None:
        if self.room_view is not None:
            self.room_view.stop()
            self.room_view = None
