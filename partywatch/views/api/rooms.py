from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ...helpers.services import get_services
from ...lib.links import build_invite_link, to_embeddable
from ..middleware import json_body, require_user, room_id_arg, string_param

rooms_bp = Blueprint("rooms", __name__, url_prefix="/api")


@rooms_bp.post("/room.create")
@require_user
def room_create(user_id: int):
    services = get_services()
    room = services.directory.create_room(user_id, string_param(json_body(), "name"))
    return jsonify(room.to_dict()), 201


@rooms_bp.get("/room.list")
@require_user
def room_list(user_id: int):
    rooms = get_services().directory.list_rooms_owned_by(user_id)
    return jsonify({"rooms": [room.to_dict(with_owner=True) for room in rooms]})


@rooms_bp.post("/room.join")
@require_user
def room_join(user_id: int):
    code = string_param(json_body(), "invite_code", required=True)
    result = get_services().membership.join_by_invite_code(code, user_id)
    return jsonify(result.to_dict())


@rooms_bp.get("/room.get")
@require_user
def room_get(user_id: int):
    services = get_services()
    room = services.directory.get_room(room_id_arg())
    services.membership.require_participant(room.id, user_id)
    data = room.to_dict(with_owner=True)
    data["embed_url"] = to_embeddable(room.video_url) if room.video_url else None
    return jsonify(data)


@rooms_bp.get("/room.participants")
@require_user
def room_participants(user_id: int):
    services = get_services()
    room = services.directory.get_room(room_id_arg())
    services.membership.require_participant(room.id, user_id)
    participants = services.membership.list_participants(room.id)
    return jsonify({"participants": [p.to_dict() for p in participants]})


@rooms_bp.post("/room.video")
@require_user
def room_video(user_id: int):
    data = json_body()
    room = get_services().sync.update_video_url(
        room_id_arg(data), string_param(data, "video_url"), user_id=user_id
    )
    return jsonify({**room.to_dict(), "embed_url": to_embeddable(room.video_url)})


@rooms_bp.get("/room.invite_link")
@require_user
def room_invite_link(user_id: int):
    services = get_services()
    room = services.directory.get_room(room_id_arg())
    services.membership.require_participant(room.id, user_id)
    link = build_invite_link(current_app.config["PUBLIC_ORIGIN"], room.id, room.invite_code)
    return jsonify({"room_id": room.id, "invite_code": room.invite_code, "link": link})
