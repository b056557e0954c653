"""Safety incident reporting routes."""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Request, status
from pydantic import Field

from decaping.api.dependencies import client_ip, get_audit, get_current_user, get_store, require
from decaping.api.schemas import CamelModel, UTCDatetime
from decaping.core.errors import NotFoundError
from decaping.core.security import AuthUser
from decaping.services.audit import AuditService
from decaping.services.permissions import Action
from decaping.store.entity_store import EntityStore

router = APIRouter(prefix="/safety-incidents", tags=["safety"])


class SafetyIncidentResponse(CamelModel):
    id: int
    date: datetime
    incident_type: str
    description: str
    severity: str
    location: str
    reported_by: int
    status: str
    created_at: datetime


class SafetyIncidentCreateRequest(CamelModel):
    # reportedBy is the caller
    date: UTCDatetime
    incident_type: str = Field(min_length=1)
    description: str = Field(min_length=1)
    severity: str = Field(min_length=1)
    location: str = Field(min_length=1)
    status: str = Field("open", min_length=1)


@router.get("", response_model=List[SafetyIncidentResponse])
def list_safety_incidents(
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    return store.safety_incidents.list()


@router.get("/{incident_id}", response_model=SafetyIncidentResponse)
def get_safety_incident(
    incident_id: int,
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    incident = store.safety_incidents.get(incident_id)
    if not incident:
        raise NotFoundError("Safety incident")
    return incident


@router.post("", response_model=SafetyIncidentResponse, status_code=status.HTTP_201_CREATED)
def report_safety_incident(
    body: SafetyIncidentCreateRequest,
    request: Request,
    user: AuthUser = Depends(require(Action.CREATE_SAFETY_INCIDENT)),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    incident = store.safety_incidents.create({**body.model_dump(), "reported_by": user.id})

    audit.record_activity(
        "safety_incident_reported",
        f"Safety incident reported: {incident.incident_type}",
        user.id,
        related_entity_id=incident.id,
        related_entity_type="safety_incident",
        ip_address=client_ip(request),
    )
    store.commit()
    return incident
