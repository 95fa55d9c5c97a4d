from __future__ import annotations

from flask import Blueprint, jsonify

from ...helpers.services import get_services
from ..middleware import check_message_length, json_body, require_user, room_id_arg, string_param

chat_bp = Blueprint("chat", __name__, url_prefix="/api")


@chat_bp.get("/chat.list")
@require_user
def chat_list(user_id: int):
    services = get_services()
    room = services.directory.get_room(room_id_arg())
    services.membership.require_participant(room.id, user_id)
    return jsonify({"messages": services.chat.list_messages(room.id)})


@chat_bp.post("/chat.post")
@require_user
def chat_post(user_id: int):
    data = json_body()
    text = check_message_length(string_param(data, "text"))
    message = get_services().chat.post_message(room_id_arg(data), user_id, text)
    return jsonify(message.to_dict()), 201
