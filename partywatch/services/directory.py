from __future__ import annotations

import logging
from typing import Callable, Optional

from sqlalchemy.orm import joinedload

from ..errors import (
    AuthRequiredError,
    ConflictError,
    NotFoundError,
    RoomNotFoundError,
    TransportError,
    ValidationError,
)
from ..lib.store import Store
from ..lib.utils import generate_invite_code, normalize_invite_code
from ..models import Room, RoomParticipant

MAX_CODE_ATTEMPTS = 5


class RoomDirectory:
    """Creates rooms, hands out invite codes and resolves them back to rooms."""

    def __init__(
        self,
        store: Store,
        name_max_length: int = 50,
        code_length: int = 8,
        code_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.store = store
        self.name_max_length = name_max_length
        self.code_factory = code_factory or (lambda: generate_invite_code(code_length))

    def create_room(self, owner_id: Optional[int], name: Optional[str]) -> Room:
        """Persist a room and its owner's participant row in one transaction."""
        if not owner_id:
            raise AuthRequiredError("sign in to create a room")
        name = (name or "").strip()
        if not name:
            raise ValidationError("room name is required", code="room_name_required")
        if len(name) > self.name_max_length:
            raise ValidationError(
                f"room name must be at most {self.name_max_length} characters",
                code="room_name_too_long",
            )

        for attempt in range(MAX_CODE_ATTEMPTS):
            code = normalize_invite_code(self.code_factory())
            if self.store.query(Room.id).filter_by(invite_code=code).first():
                logging.info("create_room: invite code collision on attempt %s", attempt + 1)
                continue
            room = Room(name=name, invite_code=code, owner_id=owner_id)
            self.store.add(room)
            room.participants.append(RoomParticipant(user_id=owner_id))
            try:
                self.store.commit()
            except ConflictError:
                # Another writer claimed the same code between the check and the commit
                logging.warning("create_room: invite code %s taken concurrently, retrying", code)
                continue
            logging.info(
                "create_room: room %s created by user %s (code=%s)", room.id, owner_id, code
            )
            return room
        raise TransportError("could not allocate a unique invite code")

    def resolve_invite_code(self, code: Optional[str]) -> int:
        """Room id for ``code``; codes are stored upper-case so lookup is case-insensitive."""
        normalized = normalize_invite_code(code)
        if not normalized:
            raise ValidationError("invite code is required", code="invite_code_required")
        row = self.store.query(Room.id).filter_by(invite_code=normalized).first()
        if not row:
            raise NotFoundError("invalid invite code", code="invalid_invite_code")
        return row[0]

    def get_room(self, room_id) -> Room:
        room = self.store.get(Room, room_id)
        if not room:
            raise RoomNotFoundError(f"room {room_id} not found")
        return room

    def list_rooms_owned_by(self, user_id: Optional[int]) -> list[Room]:
        if not user_id:
            raise AuthRequiredError("sign in to list your rooms")
        return (
            self.store.query(Room)
            .options(joinedload(Room.owner))
            .filter(Room.owner_id == user_id)
            .order_by(Room.created_at.desc(), Room.id.desc())
            .all()
        )
