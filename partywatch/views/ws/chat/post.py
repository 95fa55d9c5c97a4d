from __future__ import annotations

import logging

from flask import request

from ....errors import AuthRequiredError, PartyWatchError
from ....extensions import socketio
from ....helpers.services import get_services
from ....helpers.ws import emit_error, get_user_id_from_socket
from ...middleware import check_message_length, string_param
from ..rooms.common import room_id_from


def register() -> None:
    @socketio.on("chat.post")
    def _on_chat_post(data: dict):
        try:
            user_id = get_user_id_from_socket()
            if not user_id:
                raise AuthRequiredError("Authentication required")
            text = check_message_length(string_param(data or {}, "text"))
            get_services().chat.post_message(room_id_from(data), user_id, text)
        except PartyWatchError as e:
            emit_error("chat.error", e, room_id=(data or {}).get("room_id"))
        except Exception:
            logging.exception("chat.post handler error")
            socketio.emit("chat.error", {"error": "Failed to send message"}, to=request.sid)
