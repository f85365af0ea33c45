"""Shared fixtures: an in-memory chat backend served through ASGITransport."""

from __future__ import annotations

import itertools
import os
import typing as t
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from anonchat.connection import ChatClient

# Short enough to observe several polls inside a test
FAST_POLL = 0.05


class _RoomBody(BaseModel):
    name: str


class _MessageBody(BaseModel):
    room_id: str
    username: str
    content: str


@dataclass
class FakeBackend:
    """State of the fake backend plus a log of every request it served."""

    rooms: list[dict] = field(default_factory=list)
    messages: list[dict] = field(default_factory=list)
    requests: list[tuple[str, str, dict]] = field(default_factory=list)
    fail_room_creation: bool = False
    _ids: t.Iterator[int] = field(default_factory=lambda: itertools.count(1))

    def add_room(self, name: str) -> dict:
        room = {"id": f"room-{next(self._ids)}", "name": name}
        self.rooms.append(room)
        return room

    def add_message(self, room_id: str, username: str, content: str) -> dict:
        message = {
            "id": f"msg-{next(self._ids)}",
            "room_id": room_id,
            "username": username,
            "content": content,
        }
        self.messages.append(message)
        return message

    def message_requests(self, room_id: str | None = None) -> list[dict]:
        """Query params of every GET /api/messages, optionally for one room."""
        return [
            params
            for method, path, params in self.requests
            if method == "GET"
            and path == "/api/messages"
            and (room_id is None or params.get("room_id") == room_id)
        ]

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p, _ in self.requests if m == method and p == path)


def create_backend_app(backend: FakeBackend) -> FastAPI:
    app = FastAPI()

    @app.middleware("http")
    async def record(request: Request, call_next):
        backend.requests.append(
            (request.method, request.url.path, dict(request.query_params))
        )
        return await call_next(request)

    @app.get("/api/rooms")
    async def list_rooms():
        return backend.rooms

    @app.post("/api/rooms")
    async def create_room(body: _RoomBody):
        if backend.fail_room_creation or not body.name.strip():
            raise HTTPException(status_code=400, detail="Room name required")
        return backend.add_room(body.name)

    @app.get("/api/messages")
    async def list_messages(room_id: str, limit: int = 50):
        scoped = [m for m in backend.messages if m["room_id"] == room_id]
        return scoped[-limit:]

    @app.post("/api/messages")
    async def post_message(body: _MessageBody):
        if not any(r["id"] == body.room_id for r in backend.rooms):
            raise HTTPException(status_code=404, detail="Room not found")
        return backend.add_message(body.room_id, body.username, body.content)

    @app.get("/test")
    async def test_backend():
        return {"backend": "running", "rooms": len(backend.rooms)}

    return app


@pytest.fixture(name="backend")
def backend_fixture() -> FakeBackend:
    return FakeBackend()


@pytest.fixture(name="transport")
def transport_fixture(backend: FakeBackend) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=create_backend_app(backend))


@pytest_asyncio.fixture(name="client")
async def client_fixture(transport: httpx.ASGITransport) -> AsyncIterator[ChatClient]:
    """A ChatClient talking to the fake backend."""
    client = ChatClient(base_url="http://test", transport=transport)
    yield client
    await client.close()


def make_mock_client(handler: t.Callable[[httpx.Request], httpx.Response]) -> ChatClient:
    """A ChatClient whose requests are answered by ``handler``."""
    return ChatClient(base_url="http://test", transport=httpx.MockTransport(handler))


@pytest.fixture(name="mock_client")
def mock_client_fixture():
    """Factory for ChatClients backed by an httpx.MockTransport handler."""
    return make_mock_client


@pytest.fixture
def clean_env():
    """Save and restore environment variables after test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
    from anonchat import config as config_module

    config_module._config = None
