from __future__ import annotations

import logging
from typing import Callable, Optional

from ..errors import AuthRequiredError, RoomNotFoundError, ValidationError
from ..lib.change_feed import INSERT, Subscription
from ..lib.store import Store
from ..models import Room, RoomMessage, User
from ..models.auth.user import FALLBACK_PROFILE
from .membership import MembershipManager

MESSAGE_TABLE = RoomMessage.__tablename__


class ChatLog:
    """Append-only room chat.

    Text length is capped at the input boundary (HTTP/socket handlers); this
    class only rejects empty text.
    """

    def __init__(self, store: Store, membership: Optional[MembershipManager] = None) -> None:
        self.store = store
        self.membership = membership or MembershipManager(store)

    def _get_room(self, room_id) -> Room:
        room = self.store.get(Room, room_id)
        if not room:
            raise RoomNotFoundError(f"room {room_id} not found")
        return room

    def post_message(self, room_id, user_id: Optional[int], text: Optional[str]) -> RoomMessage:
        if not user_id:
            raise AuthRequiredError("sign in to chat")
        text = (text or "").strip()
        if not text:
            raise ValidationError("message is empty", code="message_empty")
        room = self._get_room(room_id)
        self.membership.require_participant(room.id, user_id)

        message = RoomMessage(room_id=room.id, user_id=user_id, message=text)
        self.store.add(message)
        self.store.commit()
        return message

    def list_messages(self, room_id) -> list[dict]:
        messages = (
            self.store.query(RoomMessage)
            .filter(RoomMessage.room_id == room_id)
            .order_by(RoomMessage.created_at.asc(), RoomMessage.id.asc())
            .all()
        )
        if not messages:
            return []

        # One batch lookup for every distinct author instead of a join per message
        author_ids = {m.user_id for m in messages}
        profiles = {
            user.id: user.profile()
            for user in self.store.query(User).filter(User.id.in_(author_ids)).all()
        }
        missing = author_ids - profiles.keys()
        if missing:
            logging.warning("list_messages: no profile for authors %s in room %s", sorted(missing), room_id)
        return [m.to_dict(profiles.get(m.user_id, dict(FALLBACK_PROFILE))) for m in messages]

    def subscribe_to_new_messages(
        self, room_id, on_change: Callable[[list[dict]], None]
    ) -> Subscription:
        """Call ``on_change`` with a fresh full message list on every insert in the room."""
        room_key = self._get_room(room_id).id

        def _on_insert(_change) -> None:
            on_change(self.list_messages(room_key))

        return self.store.feed.subscribe(
            MESSAGE_TABLE, [INSERT], _on_insert, column_filter=("room_id", room_key)
        )

    def unsubscribe(self, handle: Optional[Subscription]) -> None:
        self.store.feed.unsubscribe(handle)
