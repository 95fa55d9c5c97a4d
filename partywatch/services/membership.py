from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import joinedload

from ..errors import (
    AuthRequiredError,
    ConflictError,
    PermissionDeniedError,
    RoomNotFoundError,
    TransportError,
)
from ..lib.store import Store
from ..models import Room, RoomParticipant
from .directory import RoomDirectory


@dataclass
class JoinResult:
    room_id: int
    user_id: int
    already_member: bool

    def to_dict(self) -> dict:
        return {
            "room_id": self.room_id,
            "user_id": self.user_id,
            "already_member": self.already_member,
        }


class MembershipManager:
    def __init__(self, store: Store, directory: Optional[RoomDirectory] = None) -> None:
        self.store = store
        self.directory = directory or RoomDirectory(store)

    def _find(self, room_id, user_id) -> Optional[RoomParticipant]:
        return (
            self.store.query(RoomParticipant)
            .filter_by(room_id=room_id, user_id=user_id)
            .first()
        )

    def is_participant(self, room_id, user_id) -> bool:
        if not user_id:
            return False
        return self._find(room_id, user_id) is not None

    def require_participant(self, room_id, user_id) -> None:
        if not user_id:
            raise AuthRequiredError("sign in required")
        if not self.is_participant(room_id, user_id):
            raise PermissionDeniedError(
                f"user {user_id} is not a participant of room {room_id}",
                code="not_a_participant",
            )

    def join_room(self, room_id, user_id: Optional[int]) -> JoinResult:
        """Idempotent join. The unique constraint settles concurrent joins."""
        if not user_id:
            raise AuthRequiredError("sign in to join a room")
        if not self.store.get(Room, room_id):
            raise RoomNotFoundError(f"room {room_id} not found")

        if self._find(room_id, user_id):
            return JoinResult(room_id=room_id, user_id=user_id, already_member=True)

        self.store.add(RoomParticipant(room_id=room_id, user_id=user_id))
        try:
            self.store.commit()
        except ConflictError:
            # A concurrent join for the same pair committed first
            if self._find(room_id, user_id):
                logging.info("join_room: concurrent join for room=%s user=%s", room_id, user_id)
                return JoinResult(room_id=room_id, user_id=user_id, already_member=True)
            raise TransportError("join failed")
        logging.info("join_room: user %s joined room %s", user_id, room_id)
        return JoinResult(room_id=room_id, user_id=user_id, already_member=False)

    def join_by_invite_code(self, code: Optional[str], user_id: Optional[int]) -> JoinResult:
        if not user_id:
            raise AuthRequiredError("sign in to join a room")
        room_id = self.directory.resolve_invite_code(code)
        return self.join_room(room_id, user_id)

    def list_participants(self, room_id) -> list[RoomParticipant]:
        """Participants with their user loaded; no ordering is promised."""
        return (
            self.store.query(RoomParticipant)
            .options(joinedload(RoomParticipant.user))
            .filter(RoomParticipant.room_id == room_id)
            .order_by(RoomParticipant.created_at.asc(), RoomParticipant.id.asc())
            .all()
        )
