"""Accounts and bearer tokens.

Tokens are HS256 JWTs with ``sub`` (user id) and ``ver`` (the user's token
version). Signing out bumps the version, which invalidates every token issued
before it.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Optional

import jwt
from sqlalchemy import func
from werkzeug.security import check_password_hash, generate_password_hash

from ..errors import AuthError, AuthRequiredError, ConflictError, ValidationError
from ..lib.store import Store
from ..models import User

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 6


@dataclass
class AuthSession:
    user_id: int
    username: str
    avatar_url: Optional[str] = None
    access_token: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "avatar_url": self.avatar_url,
            "access_token": self.access_token,
        }


class IdentityProvider:
    def __init__(self, store: Store, secret: str, expires_seconds: int = 14 * 24 * 3600) -> None:
        self.store = store
        self.secret = secret
        self.expires_seconds = expires_seconds

    def sign_up(self, email: str, password: str, username: str) -> AuthSession:
        email = (email or "").strip().lower()
        username = (username or "").strip()
        password = password or ""
        if not (USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH):
            raise ValidationError(
                f"username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters"
            )
        if not EMAIL_RE.match(email):
            raise ValidationError("invalid email address")
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(f"password must be at least {PASSWORD_MIN_LENGTH} characters")

        if self.store.query(User).filter_by(email=email).first():
            raise AuthError("email already registered", code="email_taken")
        if self.store.query(User).filter(func.lower(User.username) == username.lower()).first():
            raise AuthError("username already taken", code="username_taken")

        user = User(
            email=email,
            username=username,
            password_hash=generate_password_hash(password),
        )
        self.store.add(user)
        try:
            self.store.commit()
        except ConflictError as e:
            # Lost a race against a concurrent sign-up with the same email/username
            raise AuthError("account already exists", code="account_exists") from e
        logging.info("sign_up: created user %s (%s)", user.id, username)
        return self._session_for(user)

    def sign_in(self, email: str, password: str) -> AuthSession:
        email = (email or "").strip().lower()
        user = self.store.query(User).filter_by(email=email).first()
        if not user or not check_password_hash(user.password_hash, password or ""):
            raise AuthError("invalid email or password", code="invalid_credentials")
        return self._session_for(user)

    def sign_out(self, user_id: Optional[int]) -> None:
        if not user_id:
            raise AuthRequiredError("sign in required")
        user = self.store.get(User, user_id)
        if not user:
            return
        user.token_version = (user.token_version or 0) + 1
        self.store.commit()

    def decode_token(self, token: Optional[str]) -> Optional[dict]:
        if not token:
            return None
        try:
            return jwt.decode(token, self.secret, algorithms=["HS256"])
        except jwt.PyJWTError:
            logging.debug("decode_token: rejected token")
            return None

    def current_session(self, token: Optional[str]) -> Optional[AuthSession]:
        payload = self.decode_token(token)
        if not payload:
            return None
        try:
            user_id = int(payload.get("sub"))
        except (TypeError, ValueError):
            return None
        user = self.store.get(User, user_id)
        if not user or int(payload.get("ver", -1)) != (user.token_version or 0):
            return None
        return AuthSession(user_id=user.id, username=user.username, avatar_url=user.avatar_url)

    def issue_token(self, user: User) -> str:
        now = int(time.time())
        payload = {
            "sub": str(user.id),
            "ver": user.token_version or 0,
            "iat": now,
            "exp": now + self.expires_seconds,
        }
        return jwt.encode(payload, self.secret, algorithm="HS256")

    def _session_for(self, user: User) -> AuthSession:
        return AuthSession(
            user_id=user.id,
            username=user.username,
            avatar_url=user.avatar_url,
            access_token=self.issue_token(user),
        )
