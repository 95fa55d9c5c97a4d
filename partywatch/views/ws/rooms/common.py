"""Open room views per socket, and their relay to the socket."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from ....extensions import socketio
from ....lib.change_feed import Subscription
from ....services import RoomView
from ....helpers.services import get_services
from ...middleware import parse_room_id


@dataclass
class SocketRoomView:
    view: RoomView
    chat_handle: Optional[Subscription] = None


def room_id_from(data) -> int:
    return parse_room_id((data or {}).get("room_id"))


# sid -> room_id -> open view
_views: dict[str, dict[int, SocketRoomView]] = {}
# sid -> user id the socket was tracked under in redis
_socket_users: dict[str, int] = {}
_views_lock = threading.Lock()


def remember_socket_user(sid: str, user_id: int) -> None:
    with _views_lock:
        _socket_users[sid] = user_id


def forget_socket_user(sid: str) -> Optional[int]:
    with _views_lock:
        return _socket_users.pop(sid, None)


def open_view_for_socket(sid: str, room_id: int) -> SocketRoomView:
    services = get_services()
    # Reopening replaces the previous view so every reconnect starts from a full snapshot
    close_views_for_socket(sid, room_id)

    def _emit_room(view: RoomView) -> None:
        socketio.emit(
            "room.state",
            {"room_id": view.room_id, "room": view.room, "embed_url": view.embed_url},
            to=sid,
        )

    def _emit_presence(view: RoomView) -> None:
        socketio.emit(
            "presence.update",
            {"room_id": view.room_id, "participants": view.participants},
            to=sid,
        )

    view = services.sync.open_room_view(
        room_id, on_room_change=_emit_room, on_participants_change=_emit_presence
    )
    entry = SocketRoomView(view=view)
    try:
        entry.chat_handle = services.chat.subscribe_to_new_messages(
            view.room_id,
            lambda messages: socketio.emit(
                "chat.messages", {"room_id": view.room_id, "messages": messages}, to=sid
            ),
        )
    except Exception:
        services.sync.close_room_view(view)
        raise
    with _views_lock:
        _views.setdefault(sid, {})[view.room_id] = entry
    return entry


def close_views_for_socket(sid: str, room_id: Optional[int] = None) -> int:
    """Release the socket's views (all of them when ``room_id`` is None)."""
    with _views_lock:
        by_room = _views.get(sid, {})
        if room_id is None:
            entries = list(by_room.values())
            _views.pop(sid, None)
        else:
            entry = by_room.pop(room_id, None)
            entries = [entry] if entry else []
            if not by_room:
                _views.pop(sid, None)
    if not entries:
        return 0
    services = get_services()
    for entry in entries:
        try:
            services.sync.close_room_view(entry.view)
            services.chat.unsubscribe(entry.chat_handle)
        except Exception:
            logging.exception("close_views_for_socket: failed to release view for sid=%s", sid)
    return len(entries)


def get_view_for_socket(sid: str, room_id: int) -> Optional[RoomView]:
    with _views_lock:
        entry = _views.get(sid, {}).get(room_id)
    return entry.view if entry else None

