from __future__ import annotations

import pytest

from partywatch.errors import (
    PermissionDeniedError,
    RoomNotFoundError,
    TransportError,
    ValidationError,
)
from partywatch.lib.change_feed import UPDATE, ChangeEvent
from partywatch.models import Room


@pytest.fixture
def room_setup(directory, membership, make_user):
    owner = make_user(username="alice")
    guest = make_user(username="bob")
    room = directory.create_room(owner.id, "Movie Night")
    membership.join_room(room.id, guest.id)
    return room, owner, guest


def test_open_view_snapshot(sync, room_setup):
    room, owner, guest = room_setup
    view = sync.open_room_view(room.id)

    snapshot = view.snapshot()
    assert snapshot["room"]["name"] == "Movie Night"
    assert snapshot["embed_url"] is None
    assert {p["user_id"] for p in snapshot["participants"]} == {owner.id, guest.id}
    assert len(view.handles) == 2


def test_open_view_unknown_room(sync):
    with pytest.raises(RoomNotFoundError):
        sync.open_room_view(404)


def test_room_update_replaces_every_viewers_snapshot(sync, room_setup):
    room, owner, guest = room_setup
    changes = []
    mine = sync.open_room_view(room.id)
    theirs = sync.open_room_view(room.id, on_room_change=changes.append)

    sync.update_video_url(room.id, "https://youtu.be/dQw4w9WgXcQ", user_id=guest.id)

    assert mine.room["video_url"] == "https://youtu.be/dQw4w9WgXcQ"
    assert theirs.room["video_url"] == "https://youtu.be/dQw4w9WgXcQ"
    assert theirs.embed_url == "https://www.youtube.com/embed/dQw4w9WgXcQ"
    assert changes == [theirs]


def test_room_notification_is_last_writer_wins(sync, room_setup):
    room, _, _ = room_setup
    view = sync.open_room_view(room.id)
    view.room["local_only"] = True

    sync.apply_room_change(view, ChangeEvent("room", UPDATE, {"id": room.id, "name": "Renamed"}))

    assert view.room == {"id": room.id, "name": "Renamed"}


def test_other_rooms_do_not_touch_the_view(sync, directory, room_setup):
    room, owner, _ = room_setup
    other = directory.create_room(owner.id, "Other")
    view = sync.open_room_view(room.id)

    sync.update_video_url(other.id, "https://example.com/a.mp4", user_id=owner.id)

    assert view.room["video_url"] is None


def test_participant_change_refetches_roster(sync, membership, make_user, room_setup):
    room, _, _ = room_setup
    rosters = []
    view = sync.open_room_view(
        room.id, on_participants_change=lambda v: rosters.append(list(v.participants))
    )
    carol = make_user(username="carol")

    membership.join_room(room.id, carol.id)

    assert len(rosters) == 1
    assert {p["profile"]["username"] for p in view.participants} == {"alice", "bob", "carol"}


def test_closed_view_ignores_late_callbacks(sync, store, room_setup):
    room, owner, _ = room_setup
    view = sync.open_room_view(room.id)
    handles = list(view.handles)
    sync.close_room_view(view)
    sync.close_room_view(view)

    assert all(not h.active for h in handles)
    assert store.feed.subscriber_count() == 0

    before = dict(view.room)
    sync.apply_room_change(view, ChangeEvent("room", UPDATE, {"id": room.id, "name": "late"}))
    sync.refresh_participants(view)
    sync.update_video_url(room.id, "https://example.com/after-close.mp4", user_id=owner.id)

    assert view.room == before


@pytest.mark.parametrize("url", ["", "   ", None])
def test_update_video_url_rejects_blank(sync, room_setup, url):
    room, owner, _ = room_setup
    with pytest.raises(ValidationError):
        sync.update_video_url(room.id, url, user_id=owner.id)


def test_update_video_url_requires_participant(sync, make_user, store, room_setup):
    room, _, _ = room_setup
    stranger = make_user()
    with pytest.raises(PermissionDeniedError):
        sync.update_video_url(room.id, "https://example.com/a.mp4", user_id=stranger.id)
    assert store.get(Room, room.id).video_url is None


def test_update_video_url_unknown_room(sync, room_setup):
    _, owner, _ = room_setup
    with pytest.raises(RoomNotFoundError):
        sync.update_video_url(999, "https://example.com/a.mp4", user_id=owner.id)


def test_optimistic_write_is_reverted_on_failure(sync, store, room_setup, monkeypatch):
    room, owner, _ = room_setup
    view = sync.open_room_view(room.id)

    def failing_commit():
        assert view.room["video_url"] == "https://example.com/new.mp4"
        raise TransportError("store commit failed")

    monkeypatch.setattr(store, "commit", failing_commit)
    with pytest.raises(TransportError):
        sync.update_video_url(room.id, "https://example.com/new.mp4", user_id=owner.id, view=view)

    assert view.room["video_url"] is None
