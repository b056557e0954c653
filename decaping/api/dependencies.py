"""Shared FastAPI dependencies for settings, authentication and store access."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from decaping.core.config import Settings
from decaping.core.errors import AuthenticationError
from decaping.core.security import AuthUser, decode_access_token
from decaping.database.session import get_db
from decaping.services.audit import AuditService
from decaping.services.permissions import Action, authorize
from decaping.store.entity_store import EntityStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> EntityStore:
    return EntityStore(db, site_timezone=settings.SITE_TIMEZONE)


def get_audit(store: EntityStore = Depends(get_store)) -> AuditService:
    return AuditService(store)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
    store: EntityStore = Depends(get_store),
) -> AuthUser:
    """Verify the bearer token and return the caller as currently stored.

    Role and name come from the user record, so a demotion takes effect on
    the next request; a deleted user's tokens stop working.
    """
    if not credentials:
        raise AuthenticationError("Missing authorization header")
    payload = decode_access_token(credentials.credentials, settings)
    user = store.users.get(int(payload["sub"]))
    if user is None:
        raise AuthenticationError("User no longer exists")
    return AuthUser.from_user(user, session_id=payload.get("sid"))


def require(action: Action):
    """Dependency factory gating a route on ``action`` before the body is read."""

    def checker(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        authorize(user, action)
        return user

    return checker


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None
