from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, NoReturn

from sqlalchemy import ColumnElement
from sqlalchemy.orm import Session

from auditflow import events
from auditflow.audits.models import Audit
from auditflow.audits.repository import (
    AuditRepository,
    BusinessIntelligenceRepository,
    ChecklistResponseRepository,
    FollowUpActionRepository,
    ObservationRepository,
)
from auditflow.audits.schemas import (
    AuditRead,
    BusinessIntelligenceRead,
    ChecklistResponseRead,
    FollowUpActionRead,
    ObservationRead,
)
from auditflow.core.errors import InvalidTransitionError
from auditflow.iam.repository import UserRepository
from auditflow.masterdata.repository import AuditTypeRepository, ChecklistItemRepository, IndustryRepository
from auditflow.platform.crud import CrudService
from auditflow.platform.security.context import Principal
from auditflow.platform.security.repository import TenantScopedRepository
from auditflow.services.activity import write_activity_log


def _audit_references() -> dict[str, TenantScopedRepository]:
    return {
        "industry_id": IndustryRepository(),
        "audit_type_id": AuditTypeRepository(),
        "auditor_id": UserRepository(),
    }


@dataclass(slots=True)
class AuditService(CrudService):
    repository: AuditRepository = field(default_factory=AuditRepository)
    read_model: type[AuditRead] = AuditRead
    references: dict[str, TenantScopedRepository] = field(default_factory=_audit_references)

    def list_audits(
        self,
        session: Session,
        principal: Principal,
        *,
        status: str | None = None,
        auditor_id: uuid.UUID | None = None,
    ) -> list[AuditRead]:
        criteria: list[ColumnElement[bool]] = []
        if status is not None:
            criteria.append(Audit.status == status)
        if auditor_id is not None:
            criteria.append(Audit.auditor_id == auditor_id)
        return self.list(session, principal, *criteria)

    def after_create(self, session: Session, principal: Principal, row: Any) -> None:
        write_activity_log(
            session,
            principal,
            action="create",
            entity_type="audit",
            entity_id=str(row.id),
            to_status=row.status,
        )

    def create(self, session: Session, principal: Principal, dto: Any) -> AuditRead:
        created = CrudService.create(self, session, principal, dto)
        events.publish(
            {
                "event_type": "audit.created",
                "tenant_id": principal.tenant_id,
                "entity_type": "audit",
                "entity_id": str(created.id),
                "actor_id": principal.user_id,
                "payload": {"audit_number": created.audit_number, "status": created.status},
            }
        )
        return created

    def update_guard(self) -> ColumnElement[bool] | None:
        return Audit.status != "closed"

    def reject_update(self, session: Session, principal: Principal, entity_id: uuid.UUID) -> NoReturn:
        raise InvalidTransitionError(
            "audit",
            "update",
            current_status="closed",
            allowed_from=["draft", "review", "approved"],
            message="closed audits cannot be edited",
        )


audit_service = AuditService()
checklist_response_service = CrudService(
    repository=ChecklistResponseRepository(),
    read_model=ChecklistResponseRead,
    references={"checklist_item_id": ChecklistItemRepository()},
)
observation_service = CrudService(repository=ObservationRepository(), read_model=ObservationRead)
business_intelligence_service = CrudService(
    repository=BusinessIntelligenceRepository(),
    read_model=BusinessIntelligenceRead,
)
follow_up_action_service = CrudService(repository=FollowUpActionRepository(), read_model=FollowUpActionRead)
