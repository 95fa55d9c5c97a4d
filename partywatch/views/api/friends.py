from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ...helpers.services import get_services
from ...helpers.ws import emit_to_user_sockets
from ..middleware import json_body, require_param, require_user

friends_bp = Blueprint("friends", __name__, url_prefix="/api")


@friends_bp.get("/friends.search")
@require_user
def friends_search(user_id: int):
    users = get_services().friends.search_users(request.args.get("q"), user_id)
    return jsonify({"users": [u.to_dict() for u in users]})


@friends_bp.post("/friends.add")
@require_user
def friends_add(user_id: int):
    friend_id = require_param(json_body(), "friend_id")
    result = get_services().friends.add_friend(user_id, friend_id)
    if result.created:
        try:
            emit_to_user_sockets(result.friend_id, "friends.update", {"friend_id": user_id})
        except Exception:
            logging.exception("friends.add: failed to notify user %s", result.friend_id)
    return jsonify(result.to_dict())


@friends_bp.get("/friends.list")
@require_user
def friends_list(user_id: int):
    friends = get_services().friends.list_friends(user_id)
    return jsonify({"friends": [u.to_dict() for u in friends]})
