from __future__ import annotations

import logging

from flask import request

from ....errors import AuthRequiredError, PartyWatchError
from ....extensions import socketio
from ....helpers.redis import track_socket_connection
from ....helpers.services import get_services
from ....helpers.ws import emit_error, get_user_id_from_socket
from .common import (
    close_views_for_socket,
    open_view_for_socket,
    remember_socket_user,
    room_id_from,
)


def register() -> None:
    @socketio.on("room.view.open")
    def _on_room_view_open(data: dict):
        try:
            user_id = get_user_id_from_socket()
            if not user_id:
                raise AuthRequiredError("Authentication required")
            room_id = room_id_from(data)
            services = get_services()
            services.directory.get_room(room_id)
            services.membership.require_participant(room_id, user_id)
            track_socket_connection(user_id, request.sid)
            remember_socket_user(request.sid, user_id)

            entry = open_view_for_socket(request.sid, room_id)
            socketio.emit(
                "room.view.snapshot",
                {
                    **entry.view.snapshot(),
                    "messages": services.chat.list_messages(room_id),
                },
                to=request.sid,
            )
        except PartyWatchError as e:
            emit_error("room.error", e, room_id=(data or {}).get("room_id"))
        except Exception:
            logging.exception("room.view.open handler error")
            socketio.emit("room.error", {"error": "Failed to open room"}, to=request.sid)

    @socketio.on("room.view.close")
    def _on_room_view_close(data: dict):
        try:
            close_views_for_socket(request.sid, room_id_from(data))
        except PartyWatchError as e:
            emit_error("room.error", e)
        except Exception:
            logging.exception("room.view.close handler error")
