from __future__ import annotations

import logging
from typing import Optional

from flask import request

from ..extensions import socketio
from .redis import get_user_socket_connections
from .services import get_services


def get_user_id_from_socket() -> Optional[int]:
    try:
        session = get_services().identity.current_session(request.args.get("token"))
        return session.user_id if session else None
    except Exception:
        logging.exception("get_user_id_from_socket: failed to get user id from socket")
        return None


def emit_error(event: str, error: Exception, **extra) -> None:
    payload = error.to_dict() if hasattr(error, "to_dict") else {"error": str(error)}
    socketio.emit(event, {**payload, **extra}, to=request.sid)


def emit_to_user_sockets(user_id: int, event: str, data: Optional[dict] = None) -> None:
    """Emit a socket event to all connections of a specific user."""
    for socket_id in get_user_socket_connections(user_id):
        socketio.emit(event, data or {}, to=socket_id)
