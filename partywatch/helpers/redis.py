"""Per-user socket id sets in redis, used to reach every tab a user has open.

All helpers degrade to no-ops when REDIS_URL is not configured.
"""

from __future__ import annotations

import logging

from ..lib.utils import get_redis_client

SOCKET_SET_TTL_SECONDS = 24 * 60 * 60


def user_sockets_key(user_id: int) -> str:
    return f"partywatch:user:sockets:{user_id}"


def track_socket_connection(user_id: int, socket_id: str) -> None:
    client = get_redis_client()
    if client is None:
        return
    key = user_sockets_key(user_id)
    try:
        pipe = client.pipeline()
        pipe.sadd(key, socket_id)
        pipe.expire(key, SOCKET_SET_TTL_SECONDS)
        pipe.execute()
    except Exception as e:
        logging.warning("track_socket_connection: redis error for user %s: %s", user_id, e)


def remove_socket_connection(user_id: int, socket_id: str) -> None:
    client = get_redis_client()
    if client is None:
        return
    key = user_sockets_key(user_id)
    try:
        client.srem(key, socket_id)
        # Drop the empty set so stale users do not linger until the TTL
        if client.scard(key) == 0:
            client.delete(key)
    except Exception as e:
        logging.warning("remove_socket_connection: redis error for user %s: %s", user_id, e)


def get_user_socket_connections(user_id: int) -> set[str]:
    client = get_redis_client()
    if client is None:
        return set()
    try:
        return set(client.smembers(user_sockets_key(user_id)))
    except Exception as e:
        logging.warning("get_user_socket_connections: redis error for user %s: %s", user_id, e)
        return set()
