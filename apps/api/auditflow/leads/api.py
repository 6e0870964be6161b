from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from auditflow.core.database import get_db
from auditflow.leads.schemas import LeadCreate, LeadRead, LeadStatus, LeadUpdate
from auditflow.leads.service import lead_service
from auditflow.leads.workflow import lead_workflow_service
from auditflow.platform.security.context import Principal
from auditflow.platform.security.gate import require_capability


router = APIRouter(prefix="/leads", tags=["leads"])


@router.post("", response_model=LeadRead, status_code=status.HTTP_201_CREATED)
def create_lead(
    payload: LeadCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("lead", "create")),
) -> LeadRead:
    return lead_service.create(db, principal, payload)


@router.get("", response_model=list[LeadRead])
def list_leads(
    status_filter: LeadStatus | None = Query(default=None, alias="status"),
    assigned_to: uuid.UUID | None = Query(default=None, alias="assignedTo"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("lead", "read")),
) -> list[LeadRead]:
    return lead_service.list_leads(db, principal, status=status_filter, assigned_to=assigned_to)


@router.get("/{lead_id}", response_model=LeadRead)
def get_lead(
    lead_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("lead", "read")),
) -> LeadRead:
    return lead_service.get(db, principal, lead_id)


@router.api_route("/{lead_id}", methods=["PUT", "PATCH"], response_model=LeadRead)
def update_lead(
    lead_id: uuid.UUID,
    payload: LeadUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("lead", "update")),
) -> LeadRead:
    return lead_service.update(db, principal, lead_id, payload)


@router.delete("/{lead_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lead(
    lead_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("lead", "delete")),
) -> Response:
    lead_service.delete(db, principal, lead_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{lead_id}/qualify", response_model=LeadRead)
def qualify_lead(
    lead_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("lead", "qualify")),
) -> LeadRead:
    return LeadRead.model_validate(lead_workflow_service.qualify(db, principal, lead_id))


@router.post("/{lead_id}/start-progress", response_model=LeadRead)
def start_lead_progress(
    lead_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("lead", "start_progress")),
) -> LeadRead:
    return LeadRead.model_validate(lead_workflow_service.start_progress(db, principal, lead_id))


@router.post("/{lead_id}/convert", response_model=LeadRead)
def convert_lead(
    lead_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("lead", "convert")),
) -> LeadRead:
    return LeadRead.model_validate(lead_workflow_service.convert(db, principal, lead_id))


@router.post("/{lead_id}/close", response_model=LeadRead)
def close_lead(
    lead_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("lead", "close")),
) -> LeadRead:
    return LeadRead.model_validate(lead_workflow_service.close(db, principal, lead_id))
