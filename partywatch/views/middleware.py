from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional

from flask import current_app, request

from .. import get_user_id_from_auth_header
from ..errors import AuthRequiredError, ValidationError


def require_user(handler: Callable) -> Callable:
    """
    Decorator for HTTP views that need a signed-in user.

    Resolves the bearer token and passes ``user_id`` as the first argument.
    Rejects the request with AuthRequiredError before any store write happens.

    Usage:
        @rooms_bp.post("/room.create")
        @require_user
        def room_create(user_id):
            ...
    """
    @wraps(handler)
    def wrapper(*args, **kwargs):
        user_id = get_user_id_from_auth_header()
        if not user_id:
            raise AuthRequiredError("sign in required")
        return handler(user_id, *args, **kwargs)
    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def require_param(data: dict, name: str) -> Any:
    value = data.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required", code=f"{name}_required")
    return value


def string_param(data: dict, name: str, required: bool = False) -> Optional[str]:
    """``data[name]`` as a str, None when absent; any other JSON type is rejected."""
    value = require_param(data, name) if required else data.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string", code=f"{name}_invalid")
    return value


def parse_room_id(raw: Any) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError("room_id is required", code="room_id_required")
    # bool is an int subclass and int() truncates floats
    if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
        raise ValidationError("room_id must be an integer", code="room_id_invalid")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError("room_id must be an integer", code="room_id_invalid")


def room_id_arg(data: Optional[dict] = None) -> int:
    return parse_room_id((data if data is not None else request.args).get("room_id"))


def check_message_length(text: Optional[str]) -> str:
    """Input boundary for chat text; the chat log itself does not re-check the cap."""
    text = text or ""
    limit = current_app.config["MESSAGE_MAX_LENGTH"]
    if len(text.strip()) > limit:
        raise ValidationError(f"message must be at most {limit} characters", code="message_too_long")
    return text
