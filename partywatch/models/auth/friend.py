# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped

from ...extensions import db
from ...lib.utils import now_ms

if TYPE_CHECKING:
    from .user import User


class FriendStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


# One directed friendship edge; a friendship is the (A, B) + (B, A) pair
class Friend(db.Model):
    # Surrogate primary key id
    id: Mapped[int] = db.Column(db.Integer, primary_key=True)
    # Edge origin
    user_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("user.id"), nullable=False, index=True
    )
    # Edge target
    friend_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("user.id"), nullable=False, index=True
    )
    # pending | accepted
    status: Mapped[str] = db.Column(
        db.String(16), nullable=False, default=FriendStatus.ACCEPTED.value
    )
    # Epoch milliseconds when the edge was written
    created_at: Mapped[int] = db.Column(db.BigInteger, nullable=False, default=now_ms)

    # Target user, for friend lists
    friend: Mapped["User"] = db.relationship("User", foreign_keys=[friend_id])

    # At most one edge per direction
    __table_args__ = (
        db.UniqueConstraint("user_id", "friend_id", name="uq_friend_user_friend"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "friend_id": self.friend_id,
            "status": self.status,
            "created_at": self.created_at,
        }
