"""Machine registry routes."""

import json
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import Field, field_validator

from decaping.api.dependencies import client_ip, get_audit, get_current_user, get_store, require
from decaping.api.schemas import CamelModel, PatchModel, reject_null
from decaping.core.errors import NotFoundError
from decaping.core.security import AuthUser
from decaping.models.enums import DecapingMethod, MachineState, MachineType
from decaping.services.audit import AuditService
from decaping.services.permissions import Action
from decaping.store.entity_store import EntityStore

router = APIRouter(prefix="/machines", tags=["machines"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class MachineResponse(CamelModel):
    id: int
    name: str
    type: str
    decaping_method: str
    specifications: str | None = None
    current_state: str
    is_active: bool


def _serialise_specs(value: Any) -> Any:
    # Structured specs are stored as JSON text.
    if isinstance(value, dict):
        return json.dumps(value)
    return value


class MachineCreateRequest(CamelModel):
    name: str = Field(min_length=1)
    type: MachineType
    decaping_method: DecapingMethod
    specifications: str | Dict[str, Any] | None = None
    current_state: MachineState = Field(MachineState.RUNNING, validate_default=True)
    is_active: bool = True


class MachinePatch(PatchModel):
    name: str | None = Field(None, min_length=1)
    type: MachineType | None = None
    decaping_method: DecapingMethod | None = None
    specifications: str | Dict[str, Any] | None = None
    current_state: MachineState | None = None
    is_active: bool | None = None

    @field_validator("name", "type", "decaping_method", "current_state", "is_active", mode="before")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.get("", response_model=List[MachineResponse])
def list_machines(
    method: DecapingMethod | None = Query(None),
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    if method:
        return store.machines.list_by_method(method.value)
    return store.machines.list()


@router.get("/{machine_id}", response_model=MachineResponse)
def get_machine(
    machine_id: int,
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    machine = store.machines.get(machine_id)
    if not machine:
        raise NotFoundError("Machine")
    return machine


@router.post("", response_model=MachineResponse, status_code=status.HTTP_201_CREATED)
def create_machine(
    body: MachineCreateRequest,
    request: Request,
    user: AuthUser = Depends(require(Action.CREATE_MACHINE)),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    fields = body.model_dump()
    fields["specifications"] = _serialise_specs(fields["specifications"])
    machine = store.machines.create(fields)

    audit.record_activity(
        "machine_created",
        f"Machine {machine.name} created",
        user.id,
        related_entity_id=machine.id,
        related_entity_type="machine",
        ip_address=client_ip(request),
    )
    store.commit()
    return machine


@router.patch("/{machine_id}", response_model=MachineResponse)
def update_machine(
    machine_id: int,
    body: MachinePatch,
    request: Request,
    user: AuthUser = Depends(require(Action.UPDATE_MACHINE)),
    store: EntityStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
):
    changes = body.changes()
    if "specifications" in changes:
        changes["specifications"] = _serialise_specs(changes["specifications"])

    machine = store.machines.update(machine_id, changes)
    if not machine:
        raise NotFoundError("Machine")

    audit.record_activity(
        "machine_updated",
        f"Machine {machine.name} updated",
        user.id,
        related_entity_id=machine.id,
        related_entity_type="machine",
        ip_address=client_ip(request),
    )
    store.commit()
    return machine
