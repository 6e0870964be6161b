from auditflow.api.crud_router import build_crud_router
from auditflow.masterdata.schemas import (
    AuditTypeRead,
    ChecklistCreate,
    ChecklistItemCreate,
    ChecklistItemRead,
    ChecklistItemUpdate,
    ChecklistRead,
    ChecklistUpdate,
    IndustryRead,
    LookupCreate,
    LookupUpdate,
)
from auditflow.masterdata.service import (
    audit_type_service,
    checklist_item_service,
    checklist_service,
    industry_service,
)


industries_router = build_crud_router(
    prefix="/industries",
    tag="master-data",
    entity="industry",
    service=industry_service,
    create_model=LookupCreate,
    update_model=LookupUpdate,
    read_model=IndustryRead,
)
audit_types_router = build_crud_router(
    prefix="/audit-types",
    tag="master-data",
    entity="audit_type",
    service=audit_type_service,
    create_model=LookupCreate,
    update_model=LookupUpdate,
    read_model=AuditTypeRead,
)
checklists_router = build_crud_router(
    prefix="/checklists",
    tag="master-data",
    entity="checklist",
    service=checklist_service,
    create_model=ChecklistCreate,
    update_model=ChecklistUpdate,
    read_model=ChecklistRead,
)
checklist_items_router = build_crud_router(
    prefix="/checklist-items",
    tag="master-data",
    entity="checklist",
    service=checklist_item_service,
    create_model=ChecklistItemCreate,
    update_model=ChecklistItemUpdate,
    read_model=ChecklistItemRead,
    parent_query="checklistId",
    parent_field="checklist_id",
)
