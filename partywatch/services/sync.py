"""
Live view of one room shared by every connected viewer.

Consistency policy:
- Room row notifications replace the local room snapshot wholesale
  (last writer wins, no merge, no version check).
- Participant notifications trigger a full roster refetch; the payload does
  not carry the joined display identity.
- A closed view ignores any callback that was already in flight.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..errors import RoomNotFoundError, ValidationError
from ..lib.change_feed import ALL_EVENTS, DELETE, ChangeEvent, Subscription
from ..lib.links import to_embeddable
from ..lib.store import Store
from ..models import Room, RoomParticipant
from .membership import MembershipManager

ROOM_TABLE = Room.__tablename__
PARTICIPANT_TABLE = RoomParticipant.__tablename__


@dataclass(eq=False)
class RoomView:
    room_id: int
    room: dict
    participants: list[dict]
    on_room_change: Optional[Callable[["RoomView"], None]] = None
    on_participants_change: Optional[Callable[["RoomView"], None]] = None
    handles: list[Subscription] = field(default_factory=list)
    closed: bool = False

    @property
    def embed_url(self) -> Optional[str]:
        url = self.room.get("video_url")
        return to_embeddable(url) if url else None

    def snapshot(self) -> dict:
        return {
            "room": dict(self.room),
            "participants": list(self.participants),
            "embed_url": self.embed_url,
        }


class RoomStateSynchronizer:
    def __init__(self, store: Store, membership: Optional[MembershipManager] = None) -> None:
        self.store = store
        self.membership = membership or MembershipManager(store)

    def _participants_payload(self, room_id) -> list[dict]:
        return [p.to_dict() for p in self.membership.list_participants(room_id)]

    def open_room_view(
        self,
        room_id,
        on_room_change: Optional[Callable[[RoomView], None]] = None,
        on_participants_change: Optional[Callable[[RoomView], None]] = None,
    ) -> RoomView:
        room = self.store.get(Room, room_id)
        if not room:
            raise RoomNotFoundError(f"room {room_id} not found")
        view = RoomView(
            room_id=room.id,
            room=room.to_dict(),
            participants=self._participants_payload(room.id),
            on_room_change=on_room_change,
            on_participants_change=on_participants_change,
        )
        feed = self.store.feed
        view.handles.append(
            feed.subscribe(
                ROOM_TABLE,
                ALL_EVENTS,
                lambda change: self.apply_room_change(view, change),
                column_filter=("id", view.room_id),
            )
        )
        view.handles.append(
            feed.subscribe(
                PARTICIPANT_TABLE,
                ALL_EVENTS,
                lambda change: self.refresh_participants(view),
                column_filter=("room_id", view.room_id),
            )
        )
        logging.debug("open_room_view: room=%s handles=%s", view.room_id, [h.id for h in view.handles])
        return view

    def close_room_view(self, view: Optional[RoomView]) -> None:
        if view is None or view.closed:
            return
        view.closed = True
        for handle in view.handles:
            self.store.feed.unsubscribe(handle)
        view.handles.clear()

    def apply_room_change(self, view: RoomView, change: ChangeEvent) -> None:
        if view.closed or change.event_type == DELETE or not change.new:
            return
        view.room = dict(change.new)
        if view.on_room_change:
            view.on_room_change(view)

    def refresh_participants(self, view: RoomView) -> None:
        if view.closed:
            return
        view.participants = self._participants_payload(view.room_id)
        if view.on_participants_change:
            view.on_participants_change(view)

    def update_video_url(
        self,
        room_id,
        url: Optional[str],
        user_id: Optional[int] = None,
        view: Optional[RoomView] = None,
    ) -> Room:
        """Write ``video_url``. Any participant may set it, not only the owner.

        When ``view`` is given the new URL is applied to it before the write and
        reverted if the write fails.
        """
        url = (url or "").strip()
        if not url:
            raise ValidationError("video url is required", code="video_url_required")
        room = self.store.get(Room, room_id)
        if not room:
            raise RoomNotFoundError(f"room {room_id} not found")
        if user_id is not None:
            self.membership.require_participant(room.id, user_id)

        previous = view.room.get("video_url") if view else None
        if view and not view.closed:
            view.room = {**view.room, "video_url": url}
        room.video_url = url
        try:
            self.store.commit()
        except Exception:
            if view and not view.closed and view.room.get("video_url") == url:
                view.room = {**view.room, "video_url": previous}
            raise
        logging.info("update_video_url: room=%s user=%s", room_id, user_id)
        return room
