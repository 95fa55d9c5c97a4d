from __future__ import annotations

import logging
import os
from typing import Optional, Union

from flask import Flask, jsonify, request
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError

from .config import Config
from .errors import PartyWatchError, TransportError
from .extensions import db, socketio

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    resolved = getattr(logging, level, logging.INFO)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger().setLevel(resolved)
    # engineio/socketio log every packet at INFO
    for name in ("engineio", "engineio.server", "socketio", "socketio.server"):
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_sqlite_pragmas() -> None:
    engine = db.engine
    if engine.dialect.name != "sqlite" or engine.url.database in (None, "", ":memory:"):
        return
    with engine.begin() as conn:
        # WAL lets socket readers proceed while a request is writing
        conn.execute(db.text("PRAGMA journal_mode=WAL"))
        conn.execute(db.text("PRAGMA busy_timeout=15000"))


def parse_cors_origins(value: str) -> Union[str, list[str]]:
    if value.strip() == "*":
        return "*"
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.lower().startswith("bearer "):
        return None
    return header.split(" ", 1)[1].strip() or None


def get_user_id_from_auth_header() -> Optional[int]:
    from .helpers.services import get_services

    token = bearer_token()
    if not token:
        return None
    session = get_services().identity.current_session(token)
    return session.user_id if session else None


def create_app(config_object: type = Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    database_uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if database_uri.startswith("sqlite:///"):
        os.makedirs(os.path.dirname(database_uri[len("sqlite:///"):]) or ".", exist_ok=True)

    init_extensions(app)

    with app.app_context():
        from . import models  # noqa: F401  (registers tables on db.metadata)

        db.create_all()
        configure_sqlite_pragmas()

    register_routes(app)
    return app


def init_extensions(app: Flask) -> None:
    origins = parse_cors_origins(app.config["CORS_ORIGINS"])
    message_queue = app.config.get("SOCKETIO_MESSAGE_QUEUE") or None

    db.init_app(app)
    CORS(app, resources={r"/api/*": {"origins": origins}})
    socketio.init_app(
        app,
        cors_allowed_origins=origins,
        message_queue=message_queue,
        async_mode=app.config.get("SOCKETIO_ASYNC_MODE") or "gevent",
    )
    logging.info(
        "create_app: socketio async_mode=%s message_queue=%s",
        socketio.async_mode,
        message_queue or "(none)",
    )


def register_routes(app: Flask) -> None:
    from .views.api import register_blueprints
    from .views.ws import register_socket_handlers

    @app.get("/api/health")
    def health():
        return jsonify({"ok": True})

    @app.errorhandler(PartyWatchError)
    def _handle_partywatch_error(error: PartyWatchError):
        if error.status >= 500:
            logging.error("request failed: %s %s -> %s", request.method, request.path, error.message)
        return jsonify(error.to_dict()), error.status

    @app.errorhandler(SQLAlchemyError)
    def _handle_store_error(error: SQLAlchemyError):
        # Reads go straight through store.query, so their failures land here
        logging.exception("store error: %s %s", request.method, request.path)
        try:
            db.session.rollback()
        except SQLAlchemyError:
            logging.exception("store error: rollback failed")
        failure = TransportError("store unavailable")
        return jsonify(failure.to_dict()), failure.status

    register_blueprints(app)
    register_socket_handlers()
