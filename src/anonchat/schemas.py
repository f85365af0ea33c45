from __future__ import annotations

from pydantic import BaseModel, Field

# Server-assigned identifiers are opaque: Mongo-style strings or integers
ObjectId = int | str

# =============================================================================
# Room Schemas
# =============================================================================


class RoomCreate(BaseModel):
    """Request body for creating a new room."""

    name: str = Field(min_length=1)


class Room(BaseModel):
    """A named chat channel as returned by the backend."""

    id: ObjectId
    name: str

    model_config = {"frozen": True}


# =============================================================================
# Message Schemas
# =============================================================================


class MessageCreate(BaseModel):
    """Request body for posting a message."""

    room_id: ObjectId
    username: str
    content: str = Field(min_length=1)


class Message(BaseModel):
    """One chat utterance scoped to a room.

    ``content`` keeps internal whitespace and newlines; only the client-side
    send path trims it.
    """

    id: ObjectId
    room_id: ObjectId
    username: str
    content: str

    model_config = {"frozen": True}
