from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import Depends

from auditflow.core.auth import get_current_principal
from auditflow.metrics import observe_access_denied
from auditflow.platform.security.context import Principal
from auditflow.platform.security.errors import ForbiddenError, UnauthenticatedError


logger = logging.getLogger("auditflow.access")

ANY_MEMBER: frozenset[str] = frozenset()
ADMINS = frozenset({"master_admin", "admin"})
FIELD_STAFF = frozenset({"master_admin", "admin", "auditor"})

# (entity, operation) -> allowed roles; ANY_MEMBER admits every authenticated principal
CAPABILITIES: dict[tuple[str, str], frozenset[str]] = {
    ("audit", "read"): ANY_MEMBER,
    ("audit", "create"): FIELD_STAFF,
    ("audit", "update"): FIELD_STAFF,
    ("audit", "delete"): ADMINS,
    ("audit", "submit_for_review"): ANY_MEMBER,
    ("audit", "approve"): ADMINS,
    ("audit", "reject"): ADMINS,
    ("audit", "close"): ADMINS,
    ("audit_detail", "read"): ANY_MEMBER,
    ("audit_detail", "create"): FIELD_STAFF,
    ("audit_detail", "update"): FIELD_STAFF,
    ("audit_detail", "delete"): FIELD_STAFF,
    ("lead", "read"): ANY_MEMBER,
    ("lead", "create"): FIELD_STAFF,
    ("lead", "update"): FIELD_STAFF,
    ("lead", "delete"): ADMINS,
    ("lead", "qualify"): FIELD_STAFF,
    ("lead", "start_progress"): FIELD_STAFF,
    ("lead", "convert"): FIELD_STAFF,
    ("lead", "close"): FIELD_STAFF,
    ("industry", "read"): ANY_MEMBER,
    ("industry", "create"): ADMINS,
    ("industry", "update"): ADMINS,
    ("industry", "delete"): ADMINS,
    ("audit_type", "read"): ANY_MEMBER,
    ("audit_type", "create"): ADMINS,
    ("audit_type", "update"): ADMINS,
    ("audit_type", "delete"): ADMINS,
    ("checklist", "read"): ANY_MEMBER,
    ("checklist", "create"): ADMINS,
    ("checklist", "update"): ADMINS,
    ("checklist", "delete"): ADMINS,
    ("user", "read"): ADMINS,
    ("user", "create"): ADMINS,
    ("user", "update"): ADMINS,
    ("user", "delete"): ADMINS,
    ("report", "read"): ANY_MEMBER,
    ("dashboard", "read"): ANY_MEMBER,
    ("settings", "read"): ANY_MEMBER,
    ("profile", "read"): ANY_MEMBER,
    ("system", "metrics"): frozenset({"master_admin"}),
}


def allowed_roles(entity: str, operation: str) -> frozenset[str]:
    try:
        return CAPABILITIES[(entity, operation)]
    except KeyError:
        raise KeyError(f"no capability registered for {entity}.{operation}") from None


def check_access(principal: Principal | None, entity: str, operation: str) -> Principal:
    roles = allowed_roles(entity, operation)
    if principal is None:
        observe_access_denied(entity, operation, "unauthenticated")
        logger.info("access.denied", extra={"entity_type": entity, "operation": operation, "reason": "unauthenticated"})
        raise UnauthenticatedError()
    if roles and principal.role not in roles:
        observe_access_denied(entity, operation, "forbidden")
        logger.info(
            "access.denied",
            extra={
                "entity_type": entity,
                "operation": operation,
                "reason": "forbidden",
                "user_id": principal.user_id,
                "role": principal.role,
            },
        )
        raise ForbiddenError(entity, operation, principal.role)
    return principal


def require_capability(entity: str, operation: str) -> Callable[..., Principal]:
    # fail at router construction for unknown capabilities
    allowed_roles(entity, operation)

    async def checker(principal: Principal | None = Depends(get_current_principal)) -> Principal:
        return check_access(principal, entity, operation)

    return checker
