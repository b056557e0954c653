"""User management (admin only), with each user's activity and connection history."""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, Request, Response, status
from pydantic import Field, field_validator

from decaping.api.activities import ActivityResponse, ConnectionLogResponse
from decaping.api.dependencies import client_ip, get_audit, get_settings, get_store, require
from decaping.api.schemas import CamelModel, PatchModel, reject_null
from decaping.core.config import Settings
from decaping.core.errors import ConflictError, NotFoundError
from decaping.core.security import AuthUser, hash_password
from decaping.models.enums import UserRole
from decaping.services.audit import AuditService
from decaping.services.permissions import Action
from decaping.store.entity_store import EntityStore

router = APIRouter(prefix="/users", tags=["users"])

admin_only = require(Action.MANAGE_USERS)


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class UserResponse(CamelModel):
    id: int
    username: str
    name: str
    role: str
    last_login: datetime | None = None


class UserCreateRequest(CamelModel):
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    name: str = Field(min_length=2)
    role: UserRole = Field(UserRole.SUPERVISOR, validate_default=True)


class UserPatch(PatchModel):
    username: str | None = Field(None, min_length=3)
    password: str | None = Field(None, min_length=6)
    name: str | None = Field(None, min_length=2)
    role: UserRole | None = None

    @field_validator("username", "password", "name", "role", mode="before")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


def _get_user_or_404(store: EntityStore, user_id: int):
    user = store.users.get(user_id)
    if not user:
        raise NotFoundError("User")
    return user


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.get("", response_model=List[UserResponse])
def list_users(
    admin: AuthUser = Depends(admin_only),
    store: EntityStore = Depends(get_store),
):
    return store.users.list()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    admin: AuthUser = Depends(admin_only),
    store: EntityStore = Depends(get_store),
):
    return _get_user_or_404(store, user_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreateRequest,
    request: Request,
    admin: AuthUser = Depends(admin_only),
    settings: Settings = Depends(get_settings),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    if store.users.get_by_username(body.username):
        raise ConflictError(f"Username {body.username} is already taken")

    user = store.users.create(
        {
            "username": body.username,
            "password": hash_password(body.password, settings.BCRYPT_ROUNDS),
            "name": body.name,
            "role": body.role,
        }
    )
    audit.record_activity(
        "user_created",
        f"User {user.username} created with role {user.role}",
        admin.id,
        related_entity_id=user.id,
        related_entity_type="user",
        ip_address=client_ip(request),
    )
    store.commit()
    return user


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserPatch,
    request: Request,
    admin: AuthUser = Depends(admin_only),
    settings: Settings = Depends(get_settings),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    _get_user_or_404(store, user_id)
    changes = body.changes()

    if "username" in changes:
        existing = store.users.get_by_username(changes["username"])
        if existing and existing.id != user_id:
            raise ConflictError(f"Username {changes['username']} is already taken")
    if "password" in changes:
        changes["password"] = hash_password(changes["password"], settings.BCRYPT_ROUNDS)

    user = store.users.update(user_id, changes)
    audit.record_activity(
        "user_updated",
        f"User {user.username} updated",
        admin.id,
        related_entity_id=user.id,
        related_entity_type="user",
        ip_address=client_ip(request),
    )
    store.commit()
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    request: Request,
    admin: AuthUser = Depends(admin_only),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    user = _get_user_or_404(store, user_id)
    username = user.username

    store.users.delete(user_id)
    audit.record_activity(
        "user_deleted",
        f"User {username} deleted",
        admin.id,
        related_entity_id=user_id,
        related_entity_type="user",
        ip_address=client_ip(request),
    )
    store.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user_id}/activities", response_model=List[ActivityResponse])
def list_user_activities(
    user_id: int,
    limit: int | None = Query(None, ge=0, le=1000),
    admin: AuthUser = Depends(admin_only),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    _get_user_or_404(store, user_id)
    return audit.list_activities_by_user(user_id, limit)


@router.get("/{user_id}/connection-logs", response_model=List[ConnectionLogResponse])
def list_user_connection_logs(
    user_id: int,
    limit: int | None = Query(None, ge=0, le=1000),
    admin: AuthUser = Depends(admin_only),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    _get_user_or_404(store, user_id)
    return audit.list_connection_logs_by_user(user_id, limit)
