from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, ClassVar, NoReturn

from sqlalchemy.orm import Session

from auditflow.core.errors import InvalidTransitionError
from auditflow.events import publish_status_changed
from auditflow.metrics import observe_workflow_transition
from auditflow.otel import get_tracer
from auditflow.platform.security.context import Principal
from auditflow.platform.security.repository import TenantScopedRepository
from auditflow.services.activity import write_activity_log


logger = logging.getLogger("auditflow.workflow")
tracer = get_tracer("auditflow.workflow")


@dataclass(frozen=True, slots=True)
class Transition:
    operation: str
    allowed_from: frozenset[str]
    to_status: str


class StatusWorkflow:
    """Fixed status machine applied through a tenant-scoped repository.

    A transition is: tenant-scoped load, guard on the loaded status, then a
    conditional UPDATE that only matches while the row still has the loaded
    status. Any change in between, even to another legal source status, is
    reported as a concurrent change. Callers are expected to have passed the
    access control gate already.
    """

    entity_type: ClassVar[str] = ""
    transitions: ClassVar[dict[str, Transition]] = {}
    repository: TenantScopedRepository

    def apply(self, session: Session, principal: Principal, entity_id: uuid.UUID, operation: str) -> Any:
        transition = self.transitions[operation]
        with tracer.start_as_current_span(f"workflow.{self.entity_type}.{operation}") as span:
            span.set_attribute("tenant_id", principal.tenant_id)
            span.set_attribute("entity_id", str(entity_id))

            row = self.repository.get_or_raise(session, principal.tenant_id, entity_id)
            from_status = row.status
            if from_status not in transition.allowed_from:
                self._reject(transition, entity_id, from_status)

            # match the status that was read, so from_status is what the UPDATE replaced
            affected = self.repository.transition_status(
                session,
                principal.tenant_id,
                entity_id,
                allowed_from={from_status},
                to_status=transition.to_status,
            )
            if affected == 0:
                session.rollback()
                current = self.repository.get_or_raise(session, principal.tenant_id, entity_id)
                self._reject(transition, entity_id, current.status, read_status=from_status)

            write_activity_log(
                session,
                principal,
                action=operation,
                entity_type=self.entity_type,
                entity_id=str(entity_id),
                from_status=from_status,
                to_status=transition.to_status,
            )
            session.commit()
            updated = self.repository.get_or_raise(session, principal.tenant_id, entity_id)
            span.set_attribute("to_status", updated.status)

        observe_workflow_transition(self.entity_type, operation, "applied")
        logger.info(
            "workflow.transition",
            extra={
                "entity_type": self.entity_type,
                "entity_id": str(entity_id),
                "operation": operation,
                "from_status": from_status,
                "to_status": transition.to_status,
                "user_id": principal.user_id,
                "tenant_id": principal.tenant_id,
            },
        )
        publish_status_changed(
            entity_type=self.entity_type,
            operation=operation,
            tenant_id=principal.tenant_id,
            entity_id=str(entity_id),
            actor_id=principal.user_id,
            from_status=from_status,
            to_status=transition.to_status,
        )
        return updated

    def _reject(
        self,
        transition: Transition,
        entity_id: uuid.UUID,
        current_status: str | None,
        *,
        read_status: str | None = None,
    ) -> NoReturn:
        concurrent = read_status is not None
        outcome = "conflict" if concurrent else "rejected"
        observe_workflow_transition(self.entity_type, transition.operation, outcome)
        logger.info(
            "workflow.transition_rejected",
            extra={
                "entity_type": self.entity_type,
                "entity_id": str(entity_id),
                "operation": transition.operation,
                "from_status": current_status,
                "to_status": transition.to_status,
                "reason": outcome,
            },
        )
        message = None
        if concurrent:
            required = " or ".join(f"'{state}'" for state in sorted(transition.allowed_from))
            message = (
                f"{self.entity_type} status changed from '{read_status}' to '{current_status}' concurrently; "
                f"{transition.operation} requires {required}"
            )
        raise InvalidTransitionError(
            self.entity_type,
            transition.operation,
            current_status=current_status,
            allowed_from=list(transition.allowed_from),
            message=message,
        )
