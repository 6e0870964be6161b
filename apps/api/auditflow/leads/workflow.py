from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import ClassVar

from sqlalchemy.orm import Session

from auditflow.leads.models import Lead
from auditflow.leads.repository import LeadRepository
from auditflow.platform.security.context import Principal
from auditflow.platform.workflow import StatusWorkflow, Transition


LEAD_TERMINAL_STATUSES = frozenset({"converted", "closed"})

LEAD_TRANSITIONS: dict[str, Transition] = {
    "qualify": Transition("qualify", frozenset({"new"}), "qualified"),
    "start_progress": Transition("start_progress", frozenset({"qualified"}), "in_progress"),
    "convert": Transition("convert", frozenset({"in_progress"}), "converted"),
    "close": Transition("close", frozenset({"new", "qualified", "in_progress"}), "closed"),
}


@dataclass(slots=True)
class LeadWorkflowService(StatusWorkflow):
    entity_type: ClassVar[str] = "lead"
    transitions: ClassVar[dict[str, Transition]] = LEAD_TRANSITIONS
    repository: LeadRepository = LeadRepository()

    def qualify(self, session: Session, principal: Principal, lead_id: uuid.UUID) -> Lead:
        return self.apply(session, principal, lead_id, "qualify")

    def start_progress(self, session: Session, principal: Principal, lead_id: uuid.UUID) -> Lead:
        return self.apply(session, principal, lead_id, "start_progress")

    def convert(self, session: Session, principal: Principal, lead_id: uuid.UUID) -> Lead:
        return self.apply(session, principal, lead_id, "convert")

    def close(self, session: Session, principal: Principal, lead_id: uuid.UUID) -> Lead:
        return self.apply(session, principal, lead_id, "close")


lead_workflow_service = LeadWorkflowService()
