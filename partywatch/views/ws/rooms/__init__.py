from __future__ import annotations

from .view import register as register_room_view
from .video import register as register_room_video
from .disconnect import register as register_disconnect

__all__ = ["register_socket_handlers"]


def register_socket_handlers() -> None:
    register_room_view()
    register_room_video()
    register_disconnect()
