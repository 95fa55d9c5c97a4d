# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Mapped

from ...extensions import db
from ...lib.utils import now_ms


# Append-only chat line; ordered by (created_at, id)
class RoomMessage(db.Model):
    # Surrogate primary key id; breaks created_at ties
    id: Mapped[int] = db.Column(db.Integer, primary_key=True)
    # Owning room id
    room_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("room.id"), nullable=False, index=True
    )
    # Sender user id
    user_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("user.id"), nullable=False, index=True
    )
    # Message text content
    message: Mapped[str] = db.Column(db.Text, nullable=False)
    # Server-assigned epoch milliseconds
    created_at: Mapped[int] = db.Column(
        db.BigInteger, nullable=False, default=now_ms, index=True
    )

    def to_dict(self, profile: Optional[dict] = None) -> dict:
        data = {
            "id": self.id,
            "room_id": self.room_id,
            "user_id": self.user_id,
            "message": self.message,
            "created_at": self.created_at,
        }
        if profile is not None:
            data["author"] = profile
        return data
