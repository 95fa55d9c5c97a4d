# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped

from ...extensions import db
from ...lib.utils import now_ms

if TYPE_CHECKING:
    from ..auth.user import User


# Grants a user live access to a room's state and chat
class RoomParticipant(db.Model):
    # Surrogate primary key id
    id: Mapped[int] = db.Column(db.Integer, primary_key=True)
    # Parent room id; indexed for fast roster queries
    room_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("room.id"), nullable=False, index=True
    )
    # Member user id; indexed for "rooms I am in" lookups
    user_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("user.id"), nullable=False, index=True
    )
    # Epoch milliseconds when the user joined
    created_at: Mapped[int] = db.Column(db.BigInteger, nullable=False, default=now_ms)

    # Relationship back to the user entity for display identity
    user: Mapped["User"] = db.relationship("User")

    # The real guard against duplicate joins; the pre-check only narrows the race
    __table_args__ = (
        db.UniqueConstraint("room_id", "user_id", name="uq_room_participant_room_user"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "room_id": self.room_id,
            "user_id": self.user_id,
            "created_at": self.created_at,
            "profile": self.user.profile() if self.user else None,
        }
