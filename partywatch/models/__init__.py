# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

from .auth.user import User
from .auth.friend import Friend, FriendStatus
from .room.room import Room
from .room.participant import RoomParticipant
from .room.message import RoomMessage

__all__ = [
    "User",
    "Friend",
    "FriendStatus",
    "Room",
    "RoomParticipant",
    "RoomMessage",
]
