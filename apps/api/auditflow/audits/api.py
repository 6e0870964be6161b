from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from auditflow.api.crud_router import build_crud_router
from auditflow.audits.schemas import (
    AuditCreate,
    AuditRead,
    AuditStatus,
    AuditUpdate,
    BusinessIntelligenceCreate,
    BusinessIntelligenceRead,
    BusinessIntelligenceUpdate,
    ChecklistResponseCreate,
    ChecklistResponseRead,
    ChecklistResponseUpdate,
    FollowUpActionCreate,
    FollowUpActionRead,
    FollowUpActionUpdate,
    ObservationCreate,
    ObservationRead,
    ObservationUpdate,
)
from auditflow.audits.service import (
    audit_service,
    business_intelligence_service,
    checklist_response_service,
    follow_up_action_service,
    observation_service,
)
from auditflow.audits.workflow import audit_workflow_service
from auditflow.core.database import get_db
from auditflow.platform.security.context import Principal
from auditflow.platform.security.gate import require_capability


router = APIRouter(prefix="/audits", tags=["audits"])


@router.post("", response_model=AuditRead, status_code=status.HTTP_201_CREATED)
def create_audit(
    payload: AuditCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("audit", "create")),
) -> AuditRead:
    return audit_service.create(db, principal, payload)


@router.get("", response_model=list[AuditRead])
def list_audits(
    status_filter: AuditStatus | None = Query(default=None, alias="status"),
    auditor_id: uuid.UUID | None = Query(default=None, alias="auditorId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("audit", "read")),
) -> list[AuditRead]:
    return audit_service.list_audits(db, principal, status=status_filter, auditor_id=auditor_id)


@router.get("/{audit_id}", response_model=AuditRead)
def get_audit(
    audit_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("audit", "read")),
) -> AuditRead:
    return audit_service.get(db, principal, audit_id)


@router.api_route("/{audit_id}", methods=["PUT", "PATCH"], response_model=AuditRead)
def update_audit(
    audit_id: uuid.UUID,
    payload: AuditUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("audit", "update")),
) -> AuditRead:
    return audit_service.update(db, principal, audit_id, payload)


@router.delete("/{audit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_audit(
    audit_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("audit", "delete")),
) -> Response:
    audit_service.delete(db, principal, audit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{audit_id}/submit-for-review", response_model=AuditRead)
def submit_audit_for_review(
    audit_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("audit", "submit_for_review")),
) -> AuditRead:
    return AuditRead.model_validate(audit_workflow_service.submit_for_review(db, principal, audit_id))


@router.post("/{audit_id}/approve", response_model=AuditRead)
def approve_audit(
    audit_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("audit", "approve")),
) -> AuditRead:
    return AuditRead.model_validate(audit_workflow_service.approve(db, principal, audit_id))


@router.post("/{audit_id}/reject", response_model=AuditRead)
def reject_audit(
    audit_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("audit", "reject")),
) -> AuditRead:
    return AuditRead.model_validate(audit_workflow_service.reject(db, principal, audit_id))


@router.post("/{audit_id}/close", response_model=AuditRead)
def close_audit(
    audit_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("audit", "close")),
) -> AuditRead:
    return AuditRead.model_validate(audit_workflow_service.close(db, principal, audit_id))


checklist_responses_router = build_crud_router(
    prefix="/audit-checklist-responses",
    tag="audits",
    entity="audit_detail",
    service=checklist_response_service,
    create_model=ChecklistResponseCreate,
    update_model=ChecklistResponseUpdate,
    read_model=ChecklistResponseRead,
    parent_query="auditId",
    parent_field="audit_id",
)
observations_router = build_crud_router(
    prefix="/observations",
    tag="audits",
    entity="audit_detail",
    service=observation_service,
    create_model=ObservationCreate,
    update_model=ObservationUpdate,
    read_model=ObservationRead,
    parent_query="auditId",
    parent_field="audit_id",
)
business_intelligence_router = build_crud_router(
    prefix="/business-intelligence",
    tag="audits",
    entity="audit_detail",
    service=business_intelligence_service,
    create_model=BusinessIntelligenceCreate,
    update_model=BusinessIntelligenceUpdate,
    read_model=BusinessIntelligenceRead,
    parent_query="auditId",
    parent_field="audit_id",
)
follow_up_actions_router = build_crud_router(
    prefix="/follow-up-actions",
    tag="audits",
    entity="audit_detail",
    service=follow_up_action_service,
    create_model=FollowUpActionCreate,
    update_model=FollowUpActionUpdate,
    read_model=FollowUpActionRead,
    parent_query="auditId",
    parent_field="audit_id",
)
