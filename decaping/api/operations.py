"""Decaping operation records routes."""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import Field, field_validator

from decaping.api.dependencies import client_ip, get_audit, get_current_user, get_store, require
from decaping.api.schemas import CamelModel, PatchModel, UTCDatetime, reject_null
from decaping.core.errors import NotFoundError
from decaping.core.security import AuthUser
from decaping.models.enums import DecapingMethod, MachineState
from decaping.services.audit import AuditService
from decaping.services.permissions import Action, authorize
from decaping.store.entity_store import EntityStore

router = APIRouter(prefix="/operations", tags=["operations"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class OperationResponse(CamelModel):
    id: int
    operation_id: str
    date: datetime
    decaping_method: str
    machine_id: int
    shift: int
    panel: str
    section: str
    level: str
    machine_state: str
    running_hours: float
    stop_hours: float
    excavated_volume: float
    observations: str | None = None
    user_id: int
    created_at: datetime

    discharge_distance: float | None = None
    truck_count: int | None = None
    excavator_count: int | None = None

    bulldozer_count: int | None = None
    equipment_state: str | None = None
    excavated_meterage: float | None = None

    machine_count: int | None = None
    intervention_type: str | None = None


class OperationCreateRequest(CamelModel):
    # operationId and userId are assigned by the server
    date: UTCDatetime
    decaping_method: DecapingMethod
    machine_id: int = Field(gt=0)
    shift: int = Field(ge=1, le=3)
    panel: str = Field(min_length=1)
    section: str = Field(min_length=1)
    level: str = Field(min_length=1)
    machine_state: MachineState
    running_hours: float = Field(ge=0)
    stop_hours: float = Field(ge=0)
    excavated_volume: float = Field(ge=0)
    observations: str | None = None

    discharge_distance: float | None = Field(None, ge=0)
    truck_count: int | None = Field(None, ge=0)
    excavator_count: int | None = Field(None, ge=0)

    bulldozer_count: int | None = Field(None, ge=0)
    equipment_state: str | None = None
    excavated_meterage: float | None = Field(None, ge=0)

    machine_count: int | None = Field(None, ge=0)
    intervention_type: str | None = None


class OperationPatch(PatchModel):
    date: UTCDatetime | None = None
    decaping_method: DecapingMethod | None = None
    machine_id: int | None = Field(None, gt=0)
    shift: int | None = Field(None, ge=1, le=3)
    panel: str | None = Field(None, min_length=1)
    section: str | None = Field(None, min_length=1)
    level: str | None = Field(None, min_length=1)
    machine_state: MachineState | None = None
    running_hours: float | None = Field(None, ge=0)
    stop_hours: float | None = Field(None, ge=0)
    excavated_volume: float | None = Field(None, ge=0)
    observations: str | None = None

    discharge_distance: float | None = Field(None, ge=0)
    truck_count: int | None = Field(None, ge=0)
    excavator_count: int | None = Field(None, ge=0)

    bulldozer_count: int | None = Field(None, ge=0)
    equipment_state: str | None = None
    excavated_meterage: float | None = Field(None, ge=0)

    machine_count: int | None = Field(None, ge=0)
    intervention_type: str | None = None

    @field_validator(
        "date", "decaping_method", "machine_id", "shift", "panel", "section", "level",
        "machine_state", "running_hours", "stop_hours", "excavated_volume",
        mode="before",
    )
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.get("", response_model=List[OperationResponse])
def list_operations(
    method: DecapingMethod | None = Query(None),
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    if method:
        return store.operations.list_by_method(method.value)
    return store.operations.list()


@router.get("/{operation_id}", response_model=OperationResponse)
def get_operation(
    operation_id: int,
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    op = store.operations.get(operation_id)
    if not op:
        raise NotFoundError("Operation")
    return op


@router.post("", response_model=OperationResponse, status_code=status.HTTP_201_CREATED)
def create_operation(
    body: OperationCreateRequest,
    request: Request,
    user: AuthUser = Depends(require(Action.CREATE_OPERATION)),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    op = store.operations.create({**body.model_dump(), "user_id": user.id})

    audit.record_activity(
        "operation_created",
        f"Operation {op.operation_id} created for {op.decaping_method}",
        user.id,
        related_entity_id=op.id,
        related_entity_type="operation",
        ip_address=client_ip(request),
    )
    store.commit()
    return op


@router.patch("/{operation_id}", response_model=OperationResponse)
def update_operation(
    operation_id: int,
    body: OperationPatch,
    request: Request,
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    op = store.operations.get(operation_id)
    if not op:
        raise NotFoundError("Operation")

    # Only the creator (or an admin) may edit a record
    authorize(user, Action.UPDATE_OPERATION, owner_id=op.user_id)

    op = store.operations.update(operation_id, body.changes())

    audit.record_activity(
        "operation_updated",
        f"Operation {op.operation_id} updated",
        user.id,
        related_entity_id=op.id,
        related_entity_type="operation",
        ip_address=client_ip(request),
    )
    store.commit()
    return op
