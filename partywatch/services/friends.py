from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import and_, or_

from ..errors import AuthRequiredError, ConflictError, UserNotFoundError, ValidationError
from ..lib.store import Store
from ..models import Friend, FriendStatus, User


class FriendshipOutcome(str, enum.Enum):
    ADDED = "added"
    ALREADY_FRIENDS = "already_friends"
    REQUEST_PENDING = "request_pending"


@dataclass
class AddFriendResult:
    outcome: FriendshipOutcome
    user_id: int
    friend_id: int

    @property
    def created(self) -> bool:
        return self.outcome is FriendshipOutcome.ADDED

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "user_id": self.user_id,
            "friend_id": self.friend_id,
        }


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class FriendGraph:
    """Friend search and symmetric friendship edges.

    Adding a friend currently auto-accepts: both directed edges are written
    as ``accepted`` in one transaction. ``pending`` edges are only reported.
    """

    def __init__(self, store: Store, search_limit: int = 10) -> None:
        self.store = store
        self.search_limit = search_limit

    def search_users(self, query: Optional[str], excluding_user_id: Optional[int]) -> list[User]:
        query = (query or "").strip()
        if not query:
            return []
        q = self.store.query(User).filter(
            User.username.ilike(f"%{_escape_like(query)}%", escape="\\")
        )
        if excluding_user_id:
            q = q.filter(User.id != excluding_user_id)
        return q.order_by(User.username.asc()).limit(self.search_limit).all()

    def existing_edge(self, user_id: int, other_id: int) -> Optional[Friend]:
        """Any edge between the pair, in either direction."""
        return (
            self.store.query(Friend)
            .filter(
                or_(
                    and_(Friend.user_id == user_id, Friend.friend_id == other_id),
                    and_(Friend.user_id == other_id, Friend.friend_id == user_id),
                )
            )
            .order_by(Friend.id.asc())
            .first()
        )

    def _outcome_for(self, edge: Friend) -> FriendshipOutcome:
        if edge.status == FriendStatus.PENDING.value:
            return FriendshipOutcome.REQUEST_PENDING
        return FriendshipOutcome.ALREADY_FRIENDS

    def add_friend(self, user_id: Optional[int], other_id) -> AddFriendResult:
        if not user_id:
            raise AuthRequiredError("sign in to add friends")
        try:
            other_id = int(other_id)
        except (TypeError, ValueError):
            raise ValidationError("friend id is required", code="friend_id_required")
        if other_id == user_id:
            raise ValidationError("you cannot add yourself", code="friend_self")
        if not self.store.get(User, other_id):
            raise UserNotFoundError(f"user {other_id} not found")

        edge = self.existing_edge(user_id, other_id)
        if edge:
            return AddFriendResult(self._outcome_for(edge), user_id, other_id)

        self.store.add(Friend(user_id=user_id, friend_id=other_id, status=FriendStatus.ACCEPTED.value))
        self.store.add(Friend(user_id=other_id, friend_id=user_id, status=FriendStatus.ACCEPTED.value))
        try:
            self.store.commit()
        except ConflictError:
            edge = self.existing_edge(user_id, other_id)
            if not edge:
                raise
            logging.info("add_friend: concurrent add for %s <-> %s", user_id, other_id)
            return AddFriendResult(self._outcome_for(edge), user_id, other_id)
        logging.info("add_friend: %s <-> %s", user_id, other_id)
        return AddFriendResult(FriendshipOutcome.ADDED, user_id, other_id)

    def list_friends(self, user_id: Optional[int]) -> list[User]:
        if not user_id:
            raise AuthRequiredError("sign in to see your friends")
        return (
            self.store.query(User)
            .join(Friend, Friend.friend_id == User.id)
            .filter(Friend.user_id == user_id, Friend.status == FriendStatus.ACCEPTED.value)
            .order_by(User.username.asc())
            .all()
        )
