from __future__ import annotations

from flask import Flask

from .auth import auth_bp
from .chat import chat_bp
from .friends import friends_bp
from .rooms import rooms_bp

__all__ = ["auth_bp", "chat_bp", "friends_bp", "rooms_bp", "register_blueprints"]


def register_blueprints(app: Flask) -> None:
    app.register_blueprint(auth_bp)
    app.register_blueprint(rooms_bp)
    app.register_blueprint(chat_bp)
    app.register_blueprint(friends_bp)
