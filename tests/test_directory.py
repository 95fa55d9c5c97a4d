from __future__ import annotations

import pytest

from partywatch.errors import (
    AuthRequiredError,
    NotFoundError,
    RoomNotFoundError,
    TransportError,
    ValidationError,
)
from partywatch.models import Room, RoomParticipant
from partywatch.services import RoomDirectory


@pytest.mark.parametrize("name", ["", "   ", None, "x" * 51, " " + "y" * 51 + " "])
def test_create_room_rejects_bad_names(directory, make_user, store, name):
    owner = make_user()
    with pytest.raises(ValidationError):
        directory.create_room(owner.id, name)
    assert store.query(Room).count() == 0


def test_create_room_trims_and_accepts_fifty_characters(directory, make_user):
    owner = make_user()
    room = directory.create_room(owner.id, "  " + "n" * 50 + "  ")
    assert room.name == "n" * 50


def test_create_room_requires_a_user(directory, store):
    with pytest.raises(AuthRequiredError):
        directory.create_room(None, "Movie Night")
    assert store.query(Room).count() == 0


def test_created_room_resolves_by_invite_code_and_includes_owner(directory, membership, make_user):
    owner = make_user()
    room = directory.create_room(owner.id, "Movie Night")

    assert len(room.invite_code) == 8
    assert room.invite_code == room.invite_code.upper()
    assert directory.resolve_invite_code(room.invite_code) == room.id
    assert directory.resolve_invite_code(room.invite_code.lower()) == room.id
    assert directory.resolve_invite_code(f"  {room.invite_code} ") == room.id
    assert [p.user_id for p in membership.list_participants(room.id)] == [owner.id]


def test_invite_codes_are_unique_across_rooms(directory, make_user):
    owner = make_user()
    codes = {directory.create_room(owner.id, f"Room {i}").invite_code for i in range(20)}
    assert len(codes) == 20


def test_resolve_unknown_code(directory):
    with pytest.raises(NotFoundError):
        directory.resolve_invite_code("NOPE0000")
    with pytest.raises(ValidationError):
        directory.resolve_invite_code("   ")


def test_code_collision_retries_with_a_fresh_code(store, make_user):
    owner = make_user()
    codes = iter(["SAMECODE", "SAMECODE", "OTHER001"])
    directory = RoomDirectory(store, code_factory=lambda: next(codes))

    first = directory.create_room(owner.id, "First")
    second = directory.create_room(owner.id, "Second")

    assert first.invite_code == "SAMECODE"
    assert second.invite_code == "OTHER001"


def test_gives_up_when_no_unique_code_can_be_found(store, make_user):
    owner = make_user()
    directory = RoomDirectory(store, code_factory=lambda: "STUCK000")
    directory.create_room(owner.id, "First")

    with pytest.raises(TransportError):
        directory.create_room(owner.id, "Second")
    assert store.query(Room).count() == 1
    assert store.query(RoomParticipant).count() == 1


def test_list_rooms_owned_by_newest_first_with_owner(directory, make_user):
    owner = make_user(username="alice", avatar_url="https://img.example/a.png")
    other = make_user()
    first = directory.create_room(owner.id, "First")
    second = directory.create_room(owner.id, "Second")
    directory.create_room(other.id, "Not mine")

    rooms = directory.list_rooms_owned_by(owner.id)

    assert [r.id for r in rooms] == [second.id, first.id]
    payload = rooms[0].to_dict(with_owner=True)
    assert payload["owner"] == {"username": "alice", "avatar_url": "https://img.example/a.png"}


def test_get_room_unknown(directory):
    with pytest.raises(RoomNotFoundError):
        directory.get_room(12345)
