from __future__ import annotations

from sqlalchemy.orm import Session

from auditflow.models.activity import ActivityLog
from auditflow.platform.security.context import Principal
from auditflow.platform.security.repository import TenantScopedRepository


class ActivityLogRepository(TenantScopedRepository):
    model = ActivityLog
    resource = "activity_log"


def write_activity_log(
    db: Session,
    principal: Principal,
    *,
    action: str,
    entity_type: str,
    entity_id: str,
    from_status: str | None = None,
    to_status: str | None = None,
) -> ActivityLog:
    # flushed only; the caller's commit makes it durable with the change it describes
    entry = ActivityLog(
        tenant_id=principal.tenant_id,
        actor_id=principal.user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        from_status=from_status,
        to_status=to_status,
        correlation_id=principal.correlation_id,
    )
    db.add(entry)
    db.flush()
    return entry
