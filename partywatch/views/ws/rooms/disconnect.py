from __future__ import annotations

import logging

from flask import request

from ....extensions import socketio
from ....helpers.redis import remove_socket_connection
from .common import close_views_for_socket, forget_socket_user


def register() -> None:
    @socketio.on("disconnect")
    def _on_disconnect(*_args):
        try:
            closed = close_views_for_socket(request.sid)
            # The token may already be revoked by a sign-out; use the id recorded at open time
            user_id = forget_socket_user(request.sid)
            if user_id:
                remove_socket_connection(user_id, request.sid)
            logging.debug("disconnect: sid=%s user=%s closed_views=%s", request.sid, user_id, closed)
        except Exception:
            logging.exception("disconnect handler error")
