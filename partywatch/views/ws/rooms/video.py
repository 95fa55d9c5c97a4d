from __future__ import annotations

import logging

from flask import request

from ....errors import AuthRequiredError, PartyWatchError
from ....extensions import socketio
from ....helpers.services import get_services
from ....helpers.ws import emit_error, get_user_id_from_socket
from ...middleware import string_param
from .common import get_view_for_socket, room_id_from


def register() -> None:
    @socketio.on("room.video.set")
    def _on_room_video_set(data: dict):
        try:
            user_id = get_user_id_from_socket()
            if not user_id:
                raise AuthRequiredError("Authentication required")
            room_id = room_id_from(data)
            get_services().sync.update_video_url(
                room_id,
                string_param(data or {}, "video_url"),
                user_id=user_id,
                view=get_view_for_socket(request.sid, room_id),
            )
        except PartyWatchError as e:
            emit_error("room.error", e, room_id=(data or {}).get("room_id"))
        except Exception:
            logging.exception("room.video.set handler error")
            socketio.emit("room.error", {"error": "Failed to update video"}, to=request.sid)
