"""
Password hashing, bearer tokens and role checks.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from .errors import AuthenticationError, AuthorizationError, InvalidCredentials
from .storage import ROLES, DuckDBStorage, Role, StorageBackend, UserRecord, utcnow

logger = logging.getLogger(__name__)

_PBKDF2_ITERATIONS = 260_000
_JWT_ALGORITHM = "HS256"


def hash_password(password: str, *, salt: str | None = None) -> str:
    """Return ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), _PBKDF2_ITERATIONS
    )
    return f"pbkdf2_sha256${_PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, hashed_password: str) -> bool:
    """Constant-time comparison against a stored hash."""
    try:
        scheme, iterations, salt, expected = hashed_password.split("$")
    except ValueError:
        return False
    if scheme != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations)
    )
    return hmac.compare_digest(digest.hex(), expected)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as carried in a token."""

    user_id: str
    email: str
    role: Role


def create_token(user: UserRecord, *, secret: str, ttl: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user.id,
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALGORITHM)


def decode_token(token: str, *, secret: str) -> Principal:
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[_JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid token") from exc

    role = claims.get("role")
    if role not in ROLES:
        raise AuthenticationError("Invalid token")
    return Principal(user_id=str(claims["sub"]), email=str(claims.get("email", "")), role=role)


def check_role(principal: Principal, required: str | tuple[str, ...]) -> None:
    """Raise unless the principal holds one of the required roles.

    Admins pass every check.
    """
    if principal.role == "admin":
        return
    allowed = (required,) if isinstance(required, str) else required
    if principal.role not in allowed:
        raise AuthorizationError("Insufficient role / permission")


class AuthService:
    """Registration and login against the user table."""

    def __init__(
        self,
        storage: StorageBackend,
        *,
        secret: str,
        token_ttl: timedelta = timedelta(days=7),
    ) -> None:
        self.storage = storage
        self.secret = secret
        self.token_ttl = token_ttl

    def register(self, email: str, password: str, role: Role = "editor") -> UserRecord:
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        user = UserRecord(
            id=DuckDBStorage.make_user_id(),
            email=email.strip().lower(),
            password_hash=hash_password(password),
            role=role,
            created_at=utcnow(),
        )
        self.storage.create_user(user)
        logger.info("Registered user %s with role %s", user.id, role)
        return user

    def login(self, email: str, password: str) -> str:
        user = self.storage.get_user_by_email(email.strip().lower())
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentials("Invalid credentials")
        return create_token(user, secret=self.secret, ttl=self.token_ttl)

    def authenticate(self, token: str) -> Principal:
        return decode_token(token, secret=self.secret)
