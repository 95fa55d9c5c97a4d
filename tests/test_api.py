from __future__ import annotations

from partywatch.extensions import db

from .conftest import auth_headers, signup


def test_health(client):
    assert client.get("/api/health").get_json() == {"ok": True}


def test_unauthenticated_requests_are_rejected(client):
    resp = client.post("/api/room.create", json={"name": "Movie Night"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "unauthorized"

    resp = client.post(
        "/api/room.create",
        json={"name": "Movie Night"},
        headers={"Authorization": "Bearer nonsense"},
    )
    assert resp.status_code == 401


def test_session_endpoints(client):
    ann = signup(client, "ann")
    resp = client.get("/api/auth.session", headers=auth_headers(ann))
    assert resp.get_json()["username"] == "ann"

    resp = client.post("/api/auth.signin", json={"email": "ann@example.com", "password": "secret1"})
    assert resp.status_code == 200
    fresh = resp.get_json()

    assert client.post("/api/auth.signout", headers=auth_headers(fresh)).status_code == 200
    assert client.get("/api/auth.session", headers=auth_headers(fresh)).status_code == 401
    assert client.get("/api/auth.session", headers=auth_headers(ann)).status_code == 401


def test_room_lifecycle(client):
    host = signup(client, "host")
    guest = signup(client, "guest")

    resp = client.post("/api/room.create", json={"name": "  Movie Night "}, headers=auth_headers(host))
    assert resp.status_code == 201
    room = resp.get_json()
    assert room["name"] == "Movie Night"

    resp = client.post(
        "/api/room.join",
        json={"invite_code": room["invite_code"].lower()},
        headers=auth_headers(guest),
    )
    assert resp.get_json() == {"room_id": room["id"], "user_id": guest["user_id"], "already_member": False}
    resp = client.post(
        "/api/room.join", json={"invite_code": room["invite_code"]}, headers=auth_headers(guest)
    )
    assert resp.get_json()["already_member"] is True

    resp = client.get(f"/api/room.participants?room_id={room['id']}", headers=auth_headers(guest))
    names = sorted(p["profile"]["username"] for p in resp.get_json()["participants"])
    assert names == ["guest", "host"]

    resp = client.post(
        "/api/room.video",
        json={"room_id": room["id"], "video_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"},
        headers=auth_headers(guest),
    )
    assert resp.status_code == 200
    assert resp.get_json()["embed_url"] == "https://www.youtube.com/embed/dQw4w9WgXcQ"

    resp = client.get(f"/api/room.get?room_id={room['id']}", headers=auth_headers(host))
    data = resp.get_json()
    assert data["video_url"] == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    assert data["owner"]["username"] == "host"

    resp = client.get("/api/room.list", headers=auth_headers(host))
    assert [r["id"] for r in resp.get_json()["rooms"]] == [room["id"]]
    assert client.get("/api/room.list", headers=auth_headers(guest)).get_json()["rooms"] == []

    resp = client.get(f"/api/room.invite_link?room_id={room['id']}", headers=auth_headers(host))
    assert resp.get_json()["link"] == f"https://party.example/room/{room['id']}?invite={room['invite_code']}"


def test_room_errors(client):
    host = signup(client, "host")
    stranger = signup(client, "stranger")

    resp = client.post("/api/room.create", json={"name": "x" * 51}, headers=auth_headers(host))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "room_name_too_long"

    resp = client.post("/api/room.join", json={"invite_code": "NOPE0000"}, headers=auth_headers(host))
    assert resp.status_code == 404

    resp = client.post("/api/room.join", json={}, headers=auth_headers(host))
    assert resp.status_code == 400

    room = client.post("/api/room.create", json={"name": "Mine"}, headers=auth_headers(host)).get_json()
    resp = client.get(f"/api/room.get?room_id={room['id']}", headers=auth_headers(stranger))
    assert resp.status_code == 403
    resp = client.get("/api/room.get?room_id=999", headers=auth_headers(host))
    assert resp.status_code == 404
    resp = client.get("/api/room.get?room_id=abc", headers=auth_headers(host))
    assert resp.status_code == 400
    resp = client.post(
        "/api/room.video", json={"room_id": room["id"], "video_url": "  "}, headers=auth_headers(host)
    )
    assert resp.status_code == 400


def test_chat_over_http(client):
    host = signup(client, "host")
    room = client.post("/api/room.create", json={"name": "Chat"}, headers=auth_headers(host)).get_json()

    resp = client.post("/api/chat.post", json={"room_id": room["id"], "text": "hello"}, headers=auth_headers(host))
    assert resp.status_code == 201

    resp = client.post(
        "/api/chat.post", json={"room_id": room["id"], "text": "y" * 501}, headers=auth_headers(host)
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "message_too_long"

    resp = client.post("/api/chat.post", json={"room_id": room["id"], "text": "  "}, headers=auth_headers(host))
    assert resp.status_code == 400

    messages = client.get(f"/api/chat.list?room_id={room['id']}", headers=auth_headers(host)).get_json()["messages"]
    assert [(m["message"], m["author"]["username"]) for m in messages] == [("hello", "host")]


def test_friends_over_http(client):
    ann = signup(client, "ann")
    ben = signup(client, "benny")

    users = client.get("/api/friends.search?q=BEN", headers=auth_headers(ann)).get_json()["users"]
    assert [u["username"] for u in users] == ["benny"]
    assert "email" not in users[0]

    resp = client.post("/api/friends.add", json={"friend_id": ben["user_id"]}, headers=auth_headers(ann))
    assert resp.get_json()["outcome"] == "added"
    resp = client.post("/api/friends.add", json={"friend_id": ben["user_id"]}, headers=auth_headers(ann))
    assert resp.get_json()["outcome"] == "already_friends"

    friends = client.get("/api/friends.list", headers=auth_headers(ben)).get_json()["friends"]
    assert [f["username"] for f in friends] == ["ann"]


def test_non_string_fields_are_rejected(client):
    host = signup(client, "host")
    room = client.post("/api/room.create", json={"name": "Typed"}, headers=auth_headers(host)).get_json()

    cases = [
        ("/api/room.create", {"name": 123}, "name_invalid"),
        ("/api/room.join", {"invite_code": 12345678}, "invite_code_invalid"),
        ("/api/room.video", {"room_id": room["id"], "video_url": 5}, "video_url_invalid"),
        ("/api/chat.post", {"room_id": room["id"], "text": 5}, "text_invalid"),
        ("/api/chat.post", {"room_id": room["id"], "text": ["hi"]}, "text_invalid"),
    ]
    for path, body, code in cases:
        resp = client.post(path, json=body, headers=auth_headers(host))
        assert resp.status_code == 400, path
        assert resp.get_json()["error"] == code

    resp = client.post(
        "/api/auth.signup", json={"email": "x@example.com", "password": "secret1", "username": 42}
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "username_invalid"


def test_room_id_must_be_an_integer(client):
    host = signup(client, "host")
    room = client.post("/api/room.create", json={"name": "Ids"}, headers=auth_headers(host)).get_json()
    assert room["id"] == 1

    for raw in (True, 1.5, "1.0", [1]):
        resp = client.post("/api/chat.post", json={"room_id": raw, "text": "hi"}, headers=auth_headers(host))
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "room_id_invalid"

    resp = client.post("/api/chat.post", json={"room_id": 1.0, "text": "hi"}, headers=auth_headers(host))
    assert resp.status_code == 201


def test_store_read_failure_is_a_transport_error(app, client):
    host = signup(client, "host")
    room = client.post("/api/room.create", json={"name": "Broken"}, headers=auth_headers(host)).get_json()
    with app.app_context():
        db.session.execute(db.text("DROP TABLE room_message"))
        db.session.commit()

    resp = client.get(f"/api/chat.list?room_id={room['id']}", headers=auth_headers(host))

    assert resp.status_code == 503
    assert resp.get_json()["error"] == "transport_error"
    # The failed read left the session usable for the next request
    resp = client.get(f"/api/room.get?room_id={room['id']}", headers=auth_headers(host))
    assert resp.status_code == 200
