"""Error taxonomy shared by the services, HTTP views and socket handlers."""

from __future__ import annotations

from typing import Optional


class PartyWatchError(Exception):
    """Base error. ``code`` is the machine readable tag sent to clients."""

    code = "error"
    status = 500

    def __init__(self, message: str = "", code: Optional[str] = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class ValidationError(PartyWatchError):
    code = "validation_error"
    status = 400


class NotFoundError(PartyWatchError):
    code = "not_found"
    status = 404


class RoomNotFoundError(NotFoundError):
    code = "room_not_found"


class UserNotFoundError(NotFoundError):
    code = "user_not_found"


class ConflictError(PartyWatchError):
    """Unique constraint hit. Services resolve it to the existing state."""

    code = "conflict"
    status = 409


class TransportError(PartyWatchError):
    code = "transport_error"
    status = 503


class AuthRequiredError(PartyWatchError):
    code = "unauthorized"
    status = 401


class AuthError(PartyWatchError):
    code = "auth_failed"
    status = 401


class PermissionDeniedError(PartyWatchError):
    code = "forbidden"
    status = 403
