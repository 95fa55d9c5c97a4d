from __future__ import annotations

from .post import register as register_chat_post

__all__ = ["register_socket_handlers"]


def register_socket_handlers() -> None:
    register_chat_post()
