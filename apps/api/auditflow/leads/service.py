from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, NoReturn

from sqlalchemy import ColumnElement
from sqlalchemy.orm import Session

from auditflow import events
from auditflow.audits.repository import AuditRepository
from auditflow.core.errors import InvalidTransitionError
from auditflow.iam.repository import UserRepository
from auditflow.leads.models import Lead
from auditflow.leads.repository import LeadRepository
from auditflow.leads.schemas import LeadRead
from auditflow.leads.workflow import LEAD_TERMINAL_STATUSES
from auditflow.masterdata.repository import IndustryRepository
from auditflow.platform.crud import CrudService
from auditflow.platform.security.context import Principal
from auditflow.platform.security.repository import TenantScopedRepository
from auditflow.services.activity import write_activity_log


def _lead_references() -> dict[str, TenantScopedRepository]:
    return {
        "audit_id": AuditRepository(),
        "industry_id": IndustryRepository(),
        "assigned_to": UserRepository(),
    }


@dataclass(slots=True)
class LeadService(CrudService):
    repository: LeadRepository = field(default_factory=LeadRepository)
    read_model: type[LeadRead] = LeadRead
    references: dict[str, TenantScopedRepository] = field(default_factory=_lead_references)

    def list_leads(
        self,
        session: Session,
        principal: Principal,
        *,
        status: str | None = None,
        assigned_to: uuid.UUID | None = None,
    ) -> list[LeadRead]:
        criteria: list[ColumnElement[bool]] = []
        if status is not None:
            criteria.append(Lead.status == status)
        if assigned_to is not None:
            criteria.append(Lead.assigned_to == assigned_to)
        return self.list(session, principal, *criteria)

    def after_create(self, session: Session, principal: Principal, row: Any) -> None:
        write_activity_log(
            session,
            principal,
            action="create",
            entity_type="lead",
            entity_id=str(row.id),
            to_status=row.status,
        )

    def create(self, session: Session, principal: Principal, dto: Any) -> LeadRead:
        created = CrudService.create(self, session, principal, dto)
        events.publish(
            {
                "event_type": "lead.created",
                "tenant_id": principal.tenant_id,
                "entity_type": "lead",
                "entity_id": str(created.id),
                "actor_id": principal.user_id,
                "payload": {"lead_number": created.lead_number, "priority": created.priority},
            }
        )
        return created

    def update_guard(self) -> ColumnElement[bool] | None:
        return Lead.status.not_in(sorted(LEAD_TERMINAL_STATUSES))

    def reject_update(self, session: Session, principal: Principal, entity_id: uuid.UUID) -> NoReturn:
        current = self.repository.get_or_raise(session, principal.tenant_id, entity_id)
        raise InvalidTransitionError(
            "lead",
            "update",
            current_status=current.status,
            allowed_from=["new", "qualified", "in_progress"],
            message=f"{current.status} leads cannot be edited",
        )


lead_service = LeadService()
