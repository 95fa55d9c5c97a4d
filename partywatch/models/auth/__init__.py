from .user import User
from .friend import Friend, FriendStatus

__all__ = ["User", "Friend", "FriendStatus"]
