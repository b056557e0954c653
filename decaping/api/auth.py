"""Login, logout and caller identity."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from pydantic import Field

from decaping.api.activities import ConnectionLogResponse
from decaping.api.dependencies import client_ip, get_audit, get_current_user, get_settings, get_store
from decaping.api.schemas import CamelModel
from decaping.core.config import Settings
from decaping.core.errors import AuthenticationError, NotFoundError
from decaping.core.security import AuthUser, create_access_token, verify_password
from decaping.services.audit import AuditService
from decaping.store.entity_store import EntityStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TokenUser(CamelModel):
    id: int
    username: str
    name: str
    role: str


class LoginResponse(CamelModel):
    token: str
    user: TokenUser


class MeResponse(TokenUser):
    last_login: datetime | None = None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    user = store.users.get_by_username(body.username)
    if not user or not verify_password(body.password, user.password):
        logger.warning("Failed login for %s from %s", body.username, client_ip(request))
        raise AuthenticationError("Invalid username or password")

    session = audit.record_login(
        user.id,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    token = create_access_token(user, settings, session_id=session.id)
    store.commit()

    return LoginResponse(token=token, user=TokenUser.model_validate(user))


@router.post("/logout", response_model=ConnectionLogResponse)
def logout(
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    """Close the session the caller's token was issued for."""
    session = audit.record_logout(user.id, session_id=user.session_id)
    if session is None:
        raise NotFoundError("Open session")
    store.commit()
    return session


@router.get("/me", response_model=MeResponse)
def me(
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    # get_current_user has already checked the record exists
    return store.users.get(user.id)
