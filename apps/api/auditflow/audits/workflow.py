from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import ClassVar

from sqlalchemy.orm import Session

from auditflow.audits.models import Audit
from auditflow.audits.repository import AuditRepository
from auditflow.platform.security.context import Principal
from auditflow.platform.workflow import StatusWorkflow, Transition


AUDIT_TRANSITIONS: dict[str, Transition] = {
    "submit_for_review": Transition("submit_for_review", frozenset({"draft"}), "review"),
    "approve": Transition("approve", frozenset({"review"}), "approved"),
    "reject": Transition("reject", frozenset({"review"}), "draft"),
    "close": Transition("close", frozenset({"approved"}), "closed"),
}


@dataclass(slots=True)
class AuditWorkflowService(StatusWorkflow):
    """draft -> review -> approved -> closed, with review -> draft on reject."""

    entity_type: ClassVar[str] = "audit"
    transitions: ClassVar[dict[str, Transition]] = AUDIT_TRANSITIONS
    repository: AuditRepository = AuditRepository()

    def submit_for_review(self, session: Session, principal: Principal, audit_id: uuid.UUID) -> Audit:
        return self.apply(session, principal, audit_id, "submit_for_review")

    def approve(self, session: Session, principal: Principal, audit_id: uuid.UUID) -> Audit:
        return self.apply(session, principal, audit_id, "approve")

    def reject(self, session: Session, principal: Principal, audit_id: uuid.UUID) -> Audit:
        return self.apply(session, principal, audit_id, "reject")

    def close(self, session: Session, principal: Principal, audit_id: uuid.UUID) -> Audit:
        return self.apply(session, principal, audit_id, "close")


audit_workflow_service = AuditWorkflowService()
