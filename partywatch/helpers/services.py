from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db, feed
from ..lib.store import Store
from ..services import (
    ChatLog,
    FriendGraph,
    IdentityProvider,
    MembershipManager,
    RoomDirectory,
    RoomStateSynchronizer,
)


@dataclass
class Services:
    store: Store
    identity: IdentityProvider
    directory: RoomDirectory
    membership: MembershipManager
    sync: RoomStateSynchronizer
    chat: ChatLog
    friends: FriendGraph


def get_services() -> Services:
    """Wire every component to one Store over the app's scoped session and feed."""
    config = current_app.config
    store = Store(db.session, feed)
    directory = RoomDirectory(
        store,
        name_max_length=config["ROOM_NAME_MAX_LENGTH"],
        code_length=config["INVITE_CODE_LENGTH"],
    )
    membership = MembershipManager(store, directory)
    return Services(
        store=store,
        identity=IdentityProvider(store, config["JWT_SECRET"], config["ACCESS_TOKEN_EXPIRES"]),
        directory=directory,
        membership=membership,
        sync=RoomStateSynchronizer(store, membership),
        chat=ChatLog(store, membership),
        friends=FriendGraph(store, search_limit=config["FRIEND_SEARCH_LIMIT"]),
    )
