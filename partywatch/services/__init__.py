from __future__ import annotations

from .identity import AuthSession, IdentityProvider
from .directory import RoomDirectory
from .membership import JoinResult, MembershipManager
from .sync import RoomStateSynchronizer, RoomView
from .chat import ChatLog
from .friends import AddFriendResult, FriendGraph, FriendshipOutcome

__all__ = [
    "AuthSession",
    "IdentityProvider",
    "RoomDirectory",
    "JoinResult",
    "MembershipManager",
    "RoomStateSynchronizer",
    "RoomView",
    "ChatLog",
    "AddFriendResult",
    "FriendGraph",
    "FriendshipOutcome",
]
