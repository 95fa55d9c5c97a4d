from __future__ import annotations

from .rooms import register_socket_handlers as register_room_handlers
from .chat import register_socket_handlers as register_chat_handlers


def register_socket_handlers() -> None:
    register_room_handlers()
    register_chat_handlers()
