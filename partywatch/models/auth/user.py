# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Mapped

from ...extensions import db
from ...lib.utils import now_ms

# Identity shown for authors whose profile could not be loaded
FALLBACK_PROFILE = {"username": "User", "avatar_url": None}


# User accounts and their public profile
class User(db.Model):
    # Mark fields that must never leave the server
    __private__ = ["email", "password_hash", "token_version"]
    # Surrogate primary key integer id
    id: Mapped[int] = db.Column(db.Integer, primary_key=True)
    # Login email; unique, stored lower-cased
    email: Mapped[str] = db.Column(db.String(255), unique=True, nullable=False)
    # Werkzeug password hash
    password_hash: Mapped[str] = db.Column(db.String(255), nullable=False)
    # Display name; unique and indexed for search
    username: Mapped[str] = db.Column(
        db.String(32), unique=True, nullable=False, index=True
    )
    # Profile picture URL
    avatar_url: Mapped[Optional[str]] = db.Column(db.String(1024), nullable=True)
    # Bumped on sign-out; tokens carrying an older version are rejected
    token_version: Mapped[int] = db.Column(db.Integer, nullable=False, default=0)
    # Epoch milliseconds when the account was created
    created_at: Mapped[int] = db.Column(db.BigInteger, nullable=False, default=now_ms)

    def profile(self) -> dict:
        return {"username": self.username, "avatar_url": self.avatar_url}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "avatar_url": self.avatar_url,
        }
