from __future__ import annotations

from auditflow.audits.models import (
    Audit,
    AuditChecklistResponse,
    BusinessIntelligence,
    FollowUpAction,
    Observation,
)
from auditflow.platform.security.repository import ParentScopedRepository, TenantScopedRepository


class AuditRepository(TenantScopedRepository):
    model = Audit
    resource = "audit"


class _AuditOwnedRepository(ParentScopedRepository):
    parent_repository = AuditRepository()
    parent_key = "audit_id"


class ChecklistResponseRepository(_AuditOwnedRepository):
    model = AuditChecklistResponse
    resource = "audit_checklist_response"


class ObservationRepository(_AuditOwnedRepository):
    model = Observation
    resource = "observation"


class BusinessIntelligenceRepository(_AuditOwnedRepository):
    model = BusinessIntelligence
    resource = "business_intelligence"


class FollowUpActionRepository(_AuditOwnedRepository):
    model = FollowUpAction
    resource = "follow_up_action"
    protected_fields = frozenset({"id", "created_at"})
