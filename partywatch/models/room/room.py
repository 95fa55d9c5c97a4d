# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from sqlalchemy.orm import Mapped

from ...extensions import db
from ...lib.utils import now_ms

if TYPE_CHECKING:
    from ..auth.user import User
    from .participant import RoomParticipant


# A room is a watch party with a shared video URL and a chat, joined by invite code
class Room(db.Model):
    # Surrogate primary key id
    id: Mapped[int] = db.Column(db.Integer, primary_key=True)
    # Display name, 1..50 characters after trimming
    name: Mapped[str] = db.Column(db.String(50), nullable=False)
    # Upper-case invite token; unique and indexed for code lookups
    invite_code: Mapped[str] = db.Column(
        db.String(32), unique=True, index=True, nullable=False
    )
    # Owner (room author) user id
    owner_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("user.id"), nullable=False, index=True
    )
    # Currently loaded video, as entered by a participant
    video_url: Mapped[Optional[str]] = db.Column(db.String(2048), nullable=True)
    # Playback flag; carried in the row but not driven by the server
    is_playing: Mapped[bool] = db.Column(db.Boolean, nullable=False, default=False)
    # Playback offset in seconds; carried in the row but not driven by the server
    playback_position: Mapped[float] = db.Column(db.Float, nullable=False, default=0.0)
    # Epoch milliseconds when the room was created
    created_at: Mapped[int] = db.Column(
        db.BigInteger, nullable=False, default=now_ms, index=True
    )

    # ORM relationship to participants, cascade deletion when room is removed
    participants: Mapped[list["RoomParticipant"]] = db.relationship(
        "RoomParticipant", backref="room", lazy=True, cascade="all, delete-orphan"
    )
    # ORM relationship to owner user
    owner: Mapped["User"] = db.relationship("User", foreign_keys=[owner_id], lazy=True)

    def to_dict(self, with_owner: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "invite_code": self.invite_code,
            "owner_id": self.owner_id,
            "video_url": self.video_url,
            "is_playing": self.is_playing,
            "playback_position": self.playback_position,
            "created_at": self.created_at,
        }
        if with_owner:
            data["owner"] = self.owner.profile() if self.owner else None
        return data
