"""HTTP access to the chat backend.

Provides ``ChatClient``, a thin wrapper around ``httpx.AsyncClient`` with
the backend base URL and one method per backend call. Errors are raised,
never swallowed: callers decide whether a failure is silent or user-facing.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter

from anonchat.config import DEFAULT_BACKEND_URL
from anonchat.schemas import Message, MessageCreate, ObjectId, Room, RoomCreate

log = logging.getLogger(__name__)

# The frontend always asks for the 100 most recent messages
MESSAGE_LIMIT = 100

_rooms_adapter = TypeAdapter(list[Room])
_messages_adapter = TypeAdapter(list[Message])


def _as_list(payload: Any, what: str) -> list:
    """Coerce a list payload, treating anything else as an empty collection."""
    if isinstance(payload, list):
        return payload
    log.warning(f"Expected a list of {what}, got {type(payload).__name__}; using []")
    return []


class ChatClient:
    """REST connection to a chat backend.

    Parameters
    ----------
    base_url
        Backend base URL, e.g. ``http://localhost:8000``.
    timeout
        Per-request timeout in seconds.
    transport
        Optional httpx transport, mainly for tests.

    Raises
    ------
    httpx.RequestError
        From every call, when the backend is unreachable.
    httpx.HTTPStatusError
        From every call, on a non-success status.
    ValueError
        From every call, when the body is not valid JSON or does not match
        the expected schema.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def __repr__(self) -> str:
        return f"ChatClient(base_url={self.base_url!r})"

    async def __aenter__(self) -> ChatClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Make an HTTP request and return the decoded JSON body."""
        log.debug(f"{method} {path} {kwargs.get('params') or ''}")
        resp = await self.client.request(method, path, **kwargs)
        resp.raise_for_status()
        return resp.json()

    async def list_rooms(self) -> list[Room]:
        """Fetch all rooms, in server order."""
        data = await self.request("GET", "/api/rooms")
        return _rooms_adapter.validate_python(_as_list(data, "rooms"))

    async def create_room(self, name: str) -> Room:
        """Create a room and return it with its server-assigned id."""
        body = RoomCreate(name=name)
        data = await self.request("POST", "/api/rooms", json=body.model_dump())
        return Room.model_validate(data)

    async def list_messages(
        self, room_id: ObjectId, limit: int = MESSAGE_LIMIT
    ) -> list[Message]:
        """Fetch up to ``limit`` most recent messages of a room, in server order."""
        data = await self.request(
            "GET", "/api/messages", params={"room_id": room_id, "limit": limit}
        )
        return _messages_adapter.validate_python(_as_list(data, "messages"))

    async def post_message(
        self, room_id: ObjectId, username: str, content: str
    ) -> Message:
        """Post a message to a room."""
        body = MessageCreate(room_id=room_id, username=username, content=content)
        data = await self.request("POST", "/api/messages", json=body.model_dump())
        return Message.model_validate(data)

    async def check_backend(self) -> dict[str, Any]:
        """Fetch the backend's diagnostic report."""
        return await self.request("GET", "/test")

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
