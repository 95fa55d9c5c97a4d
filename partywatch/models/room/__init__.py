from .room import Room
from .participant import RoomParticipant
from .message import RoomMessage

__all__ = ["Room", "RoomParticipant", "RoomMessage"]
