from __future__ import annotations

from flask import Blueprint, jsonify

from ... import bearer_token
from ...errors import AuthRequiredError
from ...helpers.services import get_services
from ..middleware import json_body, require_user, string_param

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.post("/auth.signup")
def auth_signup():
    data = json_body()
    session = get_services().identity.sign_up(
        string_param(data, "email"),
        string_param(data, "password"),
        string_param(data, "username"),
    )
    return jsonify(session.to_dict()), 201


@auth_bp.post("/auth.signin")
def auth_signin():
    data = json_body()
    session = get_services().identity.sign_in(
        string_param(data, "email"), string_param(data, "password")
    )
    return jsonify(session.to_dict())


@auth_bp.post("/auth.signout")
@require_user
def auth_signout(user_id: int):
    get_services().identity.sign_out(user_id)
    return jsonify({"ok": True})


@auth_bp.get("/auth.session")
def auth_session():
    session = get_services().identity.current_session(bearer_token())
    if not session:
        raise AuthRequiredError("no active session")
    return jsonify(session.to_dict())
