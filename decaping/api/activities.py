"""Audit trail routes: the activity feed and (admin only) connection logs."""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query

from decaping.api.dependencies import get_audit, get_current_user, require
from decaping.api.schemas import CamelModel
from decaping.core.security import AuthUser
from decaping.services.audit import AuditService
from decaping.services.permissions import Action

router = APIRouter(tags=["audit"])


class ActivityResponse(CamelModel):
    id: int
    type: str
    description: str
    user_id: int
    timestamp: datetime | None = None
    related_entity_id: int | None = None
    related_entity_type: str | None = None
    ip_address: str | None = None
    action_status: str


class ConnectionLogResponse(CamelModel):
    id: int
    user_id: int
    timestamp: datetime | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    status: str
    logout_time: datetime | None = None
    session_duration: int | None = None


@router.get("/activities", response_model=List[ActivityResponse])
def list_activities(
    limit: int | None = Query(None, ge=0, le=1000),
    user: AuthUser = Depends(get_current_user),
    audit: AuditService = Depends(get_audit),
):
    return audit.list_activities(limit)


@router.get("/connection-logs", response_model=List[ConnectionLogResponse])
def list_connection_logs(
    limit: int | None = Query(None, ge=0, le=1000),
    user: AuthUser = Depends(require(Action.VIEW_AUDIT)),
    audit: AuditService = Depends(get_audit),
):
    return audit.list_connection_logs(limit)
