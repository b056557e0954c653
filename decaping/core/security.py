"""Password hashing and bearer token helpers."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.hash import bcrypt

from decaping.core import clock
from decaping.core.config import Settings
from decaping.core.errors import AuthenticationError
from decaping.models.enums import UserRole

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    """Caller identity: the stored user behind a verified token."""

    id: int
    username: str
    role: str
    name: str
    session_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @classmethod
    def from_user(cls, user, session_id: Optional[int] = None) -> "AuthUser":
        return cls(
            id=user.id,
            username=user.username,
            role=user.role,
            name=user.name,
            session_id=session_id,
        )


def hash_password(password: str, rounds: int) -> str:
    return bcrypt.using(rounds=rounds).hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    # Stored values are always bcrypt hashes; anything else never matches.
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        logger.warning("Stored credential is not a valid bcrypt hash")
        return False


def create_access_token(user, settings: Settings, session_id: int | None = None) -> str:
    """Issue a signed token for ``user`` valid for ACCESS_TOKEN_EXPIRE_HOURS."""
    issued_at = clock.now()
    claims = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role,
        "name": user.name,
        "sid": session_id,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)).timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Dict[str, Any]:
    """Verify signature and expiry; raise AuthenticationError otherwise."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.info("Token rejected: %s", e)
        raise AuthenticationError("Invalid or expired token")

    sub = payload.get("sub")
    if not sub or not str(sub).isdigit():
        raise AuthenticationError("Token missing subject claim")
    return payload
