from __future__ import annotations

import re
from typing import Union
from urllib.parse import parse_qs, urlencode, urlparse

from ..errors import ValidationError

# Share links (youtu.be/<id>), watch links (?v=<id>), /v/, /e/, /embed/ paths
YOUTUBE_URL_RE = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^\"&?/\s]{11})"
)

ROOM_PATH_RE = re.compile(r"^/room/([^/]+)/?$")


def to_embeddable(url: str) -> str:
    """Rewrite a recognised YouTube link to its /embed/ form; pass anything else through."""
    match = YOUTUBE_URL_RE.search(url or "")
    if match:
        return f"https://www.youtube.com/embed/{match.group(1)}"
    return url


def build_invite_link(origin: str, room_id: Union[int, str], invite_code: str) -> str:
    query = urlencode({"invite": invite_code})
    return f"{origin.rstrip('/')}/room/{room_id}?{query}"


def parse_invite_link(link: str) -> tuple[Union[int, str], str]:
    """Return ``(room_id, invite_code)`` from a link built by :func:`build_invite_link`."""
    parsed = urlparse((link or "").strip())
    match = ROOM_PATH_RE.match(parsed.path or "")
    if not match:
        raise ValidationError("not a room invite link", code="invalid_invite_link")
    invite = (parse_qs(parsed.query).get("invite") or [""])[0]
    if not invite:
        raise ValidationError("invite link has no invite code", code="invalid_invite_link")
    raw_id = match.group(1)
    room_id: Union[int, str] = int(raw_id) if raw_id.isdigit() else raw_id
    return room_id, invite
