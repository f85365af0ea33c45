"""Tests for SessionController navigation state and room-view lifecycle."""

import asyncio

import httpx
import pytest
import pytest_asyncio
from conftest import FAST_POLL

from anonchat.exceptions import RoomCreationError
from anonchat.schemas import Room
from anonchat.session import SessionController


@pytest_asyncio.fixture(name="session")
async def session_fixture(client):
    session = SessionController(client, poll_interval=FAST_POLL)
    yield session
    await session.close()


@pytest.mark.asyncio
async def test_initial_state(session: SessionController):
    assert session.loading_rooms is True
    assert session.rooms == []
    assert session.current_room is None
    assert session.username == ""
    assert session.has_joined is False
    assert session.room_view is None


@pytest.mark.asyncio
async def test_context_manager_loads_rooms(client, backend):
    backend.add_room("General")

    async with SessionController(client) as session:
        assert session.loading_rooms is False
        assert [r.name for r in session.rooms] == ["General"]

    assert backend.count("GET", "/api/rooms") == 1


@pytest.mark.asyncio
async def test_refresh_rooms_replaces_wholesale(session, backend):
    first = backend.add_room("A")
    backend.add_room("B")
    await session.refresh_rooms()
    assert [r.name for r in session.rooms] == ["A", "B"]

    backend.rooms.remove(first)
    await session.refresh_rooms()

    assert [r.name for r in session.rooms] == ["B"]


@pytest.mark.asyncio
async def test_refresh_rooms_failure_keeps_list(mock_client):
    responses = [
        httpx.Response(200, json=[{"id": 1, "name": "General"}]),
        httpx.Response(503, text="unavailable"),
    ]
    client = mock_client(lambda request: responses.pop(0))
    session = SessionController(client)

    await session.refresh_rooms()
    await session.refresh_rooms()

    assert session.rooms == [Room(id=1, name="General")]
    assert session.loading_rooms is False
    await client.close()


@pytest.mark.asyncio
async def test_refresh_rooms_non_list_payload(mock_client):
    client = mock_client(lambda request: httpx.Response(200, json={"rooms": []}))
    session = SessionController(client)
    session.rooms = [Room(id=1, name="stale")]

    await session.refresh_rooms()

    assert session.rooms == []
    await client.close()


@pytest.mark.asyncio
async def test_create_room_trims_and_selects(session, backend):
    room = await session.create_room("  General  ")

    assert backend.rooms == [{"id": "room-1", "name": "General"}]
    assert room == Room(id="room-1", name="General")
    assert session.current_room == room
    assert session.rooms == [room]
    assert session.room_name == ""


@pytest.mark.asyncio
async def test_create_room_refetches_list(session, backend):
    backend.add_room("Existing")

    await session.create_room("General")

    assert backend.count("GET", "/api/rooms") == 1
    assert [r.name for r in session.rooms] == ["Existing", "General"]


@pytest.mark.asyncio
async def test_create_room_uses_name_field(session, backend):
    session.set_room_name("Lobby")

    await session.create_room()

    assert backend.rooms[0]["name"] == "Lobby"


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
async def test_create_room_blank_name_is_ignored(session, backend, name):
    result = await session.create_room(name)

    assert result is None
    assert backend.requests == []
    assert session.current_room is None


@pytest.mark.asyncio
async def test_create_room_error_status(session, backend):
    backend.fail_room_creation = True
    backend.add_room("General")
    await session.refresh_rooms()
    session.select_room(session.rooms[0])

    with pytest.raises(RoomCreationError, match="Failed to create room"):
        await session.create_room("Other")

    assert session.room_name == "Other"
    assert [r.name for r in session.rooms] == ["General"]
    assert session.current_room == session.rooms[0]


@pytest.mark.asyncio
async def test_create_room_connection_error(mock_client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = mock_client(handler)
    session = SessionController(client)

    with pytest.raises(RoomCreationError, match="connection refused"):
        await session.create_room("General")

    assert session.room_name == "General"
    await client.close()


@pytest.mark.asyncio
async def test_create_room_selects_created_room_when_refetch_fails(mock_client):
    def handler(request):
        if request.method == "POST":
            return httpx.Response(200, json={"id": 7, "name": "General"})
        return httpx.Response(500, json={"detail": "boom"})

    client = mock_client(handler)
    session = SessionController(client)
    session.rooms = [Room(id=1, name="Old")]
    session.set_room_name("General")

    room = await session.create_room()

    assert room == Room(id=7, name="General")
    assert session.current_room == Room(id=7, name="General")
    assert session.rooms == [Room(id=1, name="Old")]
    assert session.room_name == ""
    await client.close()


@pytest.mark.asyncio
async def test_select_room_keeps_joined(session):
    session.set_nickname("Fox")
    session.select_room(Room(id="a", name="A"))
    session.join()

    session.select_room(Room(id="b", name="B"))

    assert session.has_joined is True
    assert session.current_room.id == "b"


@pytest.mark.asyncio
async def test_nickname_is_stored_raw(session):
    session.set_nickname("  Fox ")

    assert session.username == "  Fox "


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("nickname", "room"),
    [
        ("", None),
        ("Fox", None),
        ("", Room(id="a", name="General")),
        ("   ", Room(id="a", name="General")),
    ],
)
async def test_join_guard(session, nickname, room):
    session.set_nickname(nickname)
    if room is not None:
        session.select_room(room)

    assert session.can_join is False
    assert session.join() is False
    assert session.has_joined is False
    assert session.room_view is None


@pytest.mark.asyncio
async def test_join_activates_room_view(session, backend):
    room = Room.model_validate(backend.add_room("General"))
    session.set_nickname("Fox")
    session.select_room(room)

    assert session.join() is True

    assert session.has_joined is True
    view = session.room_view
    assert view.room == room
    assert view.username == "Fox"
    assert view.active is True


@pytest.mark.asyncio
async def test_join_does_not_touch_network(session, backend):
    session.set_nickname("Fox")
    session.select_room(Room(id="room-9", name="General"))

    session.join()

    # Only the room view's own poll may talk to the backend
    assert all(path == "/api/messages" for _, path, _ in backend.requests)


@pytest.mark.asyncio
async def test_leave_keeps_room_and_nickname(session, backend):
    room = Room.model_validate(backend.add_room("General"))
    await session.refresh_rooms()
    session.set_nickname("Fox")
    session.select_room(room)
    session.join()

    session.leave()

    assert session.has_joined is False
    assert session.current_room == room
    assert session.username == "Fox"
    assert session.rooms == [room]
    assert session.room_view is None


@pytest.mark.asyncio
async def test_leave_stops_polling(session, backend):
    room = Room.model_validate(backend.add_room("General"))
    session.set_nickname("Fox")
    session.select_room(room)
    session.join()
    await asyncio.sleep(FAST_POLL * 2)

    session.leave()
    seen = len(backend.message_requests(room.id))
    await asyncio.sleep(FAST_POLL * 4)

    assert len(backend.message_requests(room.id)) == seen


@pytest.mark.asyncio
async def test_switching_room_tears_down_old_view(session, backend):
    first = Room.model_validate(backend.add_room("First"))
    second = Room.model_validate(backend.add_room("Second"))
    session.set_nickname("Fox")
    session.select_room(first)
    session.join()
    old_view = session.room_view
    await asyncio.sleep(FAST_POLL * 2)

    session.select_room(second)
    seen_first = len(backend.message_requests(first.id))
    await asyncio.sleep(FAST_POLL * 4)

    assert old_view.closed is True
    assert session.room_view is not old_view
    assert session.room_view.room == second
    assert len(backend.message_requests(first.id)) == seen_first
    assert len(backend.message_requests(second.id)) >= 1


@pytest.mark.asyncio
async def test_rejoin_fetches_fresh(session, backend):
    room = Room.model_validate(backend.add_room("General"))
    backend.add_message(room.id, "Owl", "hello")
    session.set_nickname("Fox")
    session.select_room(room)
    session.join()
    await asyncio.sleep(FAST_POLL / 2)
    session.leave()

    session.join()
    new_view = session.room_view
    assert new_view.messages == []
    assert new_view.loading is True
    await asyncio.sleep(FAST_POLL / 2)

    assert [m.content for m in new_view.messages] == ["hello"]


@pytest.mark.asyncio
async def test_close_tears_down_room_view(client, backend):
    room = Room.model_validate(backend.add_room("General"))
    session = SessionController(client, poll_interval=FAST_POLL)
    session.set_nickname("Fox")
    session.select_room(room)
    session.join()
    view = session.room_view

    await session.close()

    assert view.active is False
    assert session.room_view is None
