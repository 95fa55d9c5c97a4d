from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Optional

import redis
from flask import current_app


INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits

_redis_clients: dict[str, redis.Redis] = {}


# Return current epoch time in milliseconds
def now_ms() -> int:
    return int(time.time() * 1000)


def generate_invite_code(length: int = 8) -> str:
    """Random upper-case alphanumeric token; codes are stored and matched upper-cased."""
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def normalize_invite_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def get_redis_client() -> Optional[redis.Redis]:
    """Shared redis client for REDIS_URL, or None when redis is not configured."""
    url = (current_app.config.get("REDIS_URL") or "").strip()
    if not url:
        return None
    client = _redis_clients.get(url)
    if client is None:
        try:
            client = redis.Redis.from_url(url, decode_responses=True)
        except Exception as e:
            logging.warning(f"get_redis_client: invalid REDIS_URL: {e}")
            return None
        _redis_clients[url] = client
    return client
