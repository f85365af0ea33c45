"""Minimal anonymous group-chat client polling a REST backend."""
import importlib.metadata
import logging

from anonchat.connection import ChatClient
from anonchat.room_view import RoomViewController
from anonchat.schemas import Message, Room
from anonchat.session import SessionController

__all__ = ["ChatClient", "Message", "Room", "RoomViewController", "SessionController"]

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())

__version__ = importlib.metadata.version("anonchat")
