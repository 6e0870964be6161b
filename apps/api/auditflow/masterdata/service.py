from __future__ import annotations

from auditflow.masterdata.repository import (
    AuditTypeRepository,
    ChecklistItemRepository,
    ChecklistRepository,
    IndustryRepository,
)
from auditflow.masterdata.schemas import AuditTypeRead, ChecklistItemRead, ChecklistRead, IndustryRead
from auditflow.platform.crud import CrudService


industry_service = CrudService(repository=IndustryRepository(), read_model=IndustryRead)
audit_type_service = CrudService(repository=AuditTypeRepository(), read_model=AuditTypeRead)
checklist_service = CrudService(
    repository=ChecklistRepository(),
    read_model=ChecklistRead,
    references={"audit_type_id": AuditTypeRepository()},
)
checklist_item_service = CrudService(repository=ChecklistItemRepository(), read_model=ChecklistItemRead)
