import os
from datetime import timedelta

from dotenv import load_dotenv

# A .env next to the working directory overrides nothing already exported
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


class Config:
    APP_NAME = os.getenv("APP_NAME", "PartyWatch")

    # Flask session signing; replace in every deployed environment
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    # Signs access tokens; shares SECRET_KEY unless set separately
    JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
    # Lifetime of an access token, in seconds (14 days)
    ACCESS_TOKEN_EXPIRES = _env_int(
        "ACCESS_TOKEN_EXPIRES_SECONDS", int(timedelta(days=14).total_seconds())
    )

    # Repository root; the default sqlite file lives in <root>/instance/
    _ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        f"sqlite:///{os.path.join(_ROOT, 'instance', f'{APP_NAME.lower()}.db')}",
    )
    SQLALCHEMY_ECHO = _env_flag("SQLALCHEMY_ECHO")

    # Origin the web client is served from; invite links point here
    PUBLIC_ORIGIN = os.getenv("PUBLIC_ORIGIN", "http://localhost:8080").rstrip("/")

    # "*" or a comma-separated origin list, shared by HTTP and Socket.IO
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Broker DSN for Socket.IO fan-out across workers; empty runs single-process
    SOCKETIO_MESSAGE_QUEUE = os.getenv("SOCKETIO_MESSAGE_QUEUE", "")
    # "gevent" when empty; tests run with "threading"
    SOCKETIO_ASYNC_MODE = os.getenv("SOCKETIO_ASYNC_MODE", "")

    # Per-user socket tracking; empty disables it
    REDIS_URL = os.getenv("REDIS_URL", "")

    DEBUG = _env_flag("DEBUG")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Limits
    ROOM_NAME_MAX_LENGTH = _env_int("ROOM_NAME_MAX_LENGTH", 50)
    # Checked at the HTTP/socket input boundary, not by the chat log
    MESSAGE_MAX_LENGTH = _env_int("MESSAGE_MAX_LENGTH", 500)
    INVITE_CODE_LENGTH = _env_int("INVITE_CODE_LENGTH", 8)
    FRIEND_SEARCH_LIMIT = _env_int("FRIEND_SEARCH_LIMIT", 10)
