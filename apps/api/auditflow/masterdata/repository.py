from __future__ import annotations

from typing import Any

from auditflow.masterdata.models import AuditType, Checklist, ChecklistItem, Industry
from auditflow.platform.security.repository import ParentScopedRepository, TenantScopedRepository


class IndustryRepository(TenantScopedRepository):
    model = Industry
    resource = "industry"


class AuditTypeRepository(TenantScopedRepository):
    model = AuditType
    resource = "audit_type"


class ChecklistRepository(TenantScopedRepository):
    model = Checklist
    resource = "checklist"


class ChecklistItemRepository(ParentScopedRepository):
    model = ChecklistItem
    resource = "checklist_item"
    parent_repository = ChecklistRepository()
    parent_key = "checklist_id"

    def default_order(self) -> list[Any]:
        return [ChecklistItem.order_index.asc(), ChecklistItem.created_at.asc()]
