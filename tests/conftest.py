from __future__ import annotations

import itertools

import pytest
from werkzeug.security import generate_password_hash

from partywatch import create_app
from partywatch.config import Config
from partywatch.extensions import db, feed
from partywatch.lib.store import Store
from partywatch.models import User
from partywatch.services import (
    ChatLog,
    FriendGraph,
    IdentityProvider,
    MembershipManager,
    RoomDirectory,
    RoomStateSynchronizer,
)
from partywatch.views.ws.rooms import common as socket_views


class PartyWatchTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SOCKETIO_ASYNC_MODE = "threading"
    SOCKETIO_MESSAGE_QUEUE = ""
    REDIS_URL = ""
    JWT_SECRET = "test-secret"
    PUBLIC_ORIGIN = "https://party.example"
    LOG_LEVEL = "WARNING"


@pytest.fixture
def app():
    feed.clear()
    app = create_app(PartyWatchTestConfig)
    yield app
    socket_views._views.clear()
    socket_views._socket_users.clear()
    feed.clear()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture
def store(ctx):
    return Store(db.session, feed)


@pytest.fixture
def directory(store):
    return RoomDirectory(store)


@pytest.fixture
def membership(store, directory):
    return MembershipManager(store, directory)


@pytest.fixture
def sync(store, membership):
    return RoomStateSynchronizer(store, membership)


@pytest.fixture
def chat(store, membership):
    return ChatLog(store, membership)


@pytest.fixture
def friends(store):
    return FriendGraph(store)


@pytest.fixture
def identity(store):
    return IdentityProvider(store, "test-secret", expires_seconds=3600)


@pytest.fixture
def make_user(store):
    counter = itertools.count(1)

    def _make(username=None, avatar_url=None):
        n = next(counter)
        user = User(
            email=f"user{n}@example.com",
            username=username or f"user{n}",
            avatar_url=avatar_url,
            password_hash=generate_password_hash("secret1"),
        )
        store.add(user)
        store.commit()
        return user

    return _make


@pytest.fixture
def client(app):
    return app.test_client()


def signup(client, username, email=None, password="secret1"):
    resp = client.post(
        "/api/auth.signup",
        json={"email": email or f"{username}@example.com", "password": password, "username": username},
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def auth_headers(session: dict) -> dict:
    return {"Authorization": f"Bearer {session['access_token']}"}
