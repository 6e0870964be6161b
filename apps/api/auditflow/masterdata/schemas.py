from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from auditflow.core.schemas import ApiModel, WriteModel


class LookupCreate(WriteModel):
    name: str = Field(min_length=1)
    description: str | None = None


class LookupUpdate(WriteModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None


class IndustryRead(ApiModel):
    id: UUID
    tenant_id: str
    name: str
    description: str | None
    created_at: datetime


class AuditTypeRead(ApiModel):
    id: UUID
    tenant_id: str
    name: str
    description: str | None
    created_at: datetime


class ChecklistCreate(WriteModel):
    name: str = Field(min_length=1)
    audit_type_id: UUID | None = None
    is_active: bool = True


class ChecklistUpdate(WriteModel):
    name: str | None = Field(default=None, min_length=1)
    audit_type_id: UUID | None = None
    is_active: bool | None = None


class ChecklistRead(ApiModel):
    id: UUID
    tenant_id: str
    name: str
    audit_type_id: UUID | None
    is_active: bool
    created_at: datetime


class ChecklistItemCreate(WriteModel):
    checklist_id: UUID
    question: str = Field(min_length=1)
    category: str | None = None
    order_index: int = Field(default=0, ge=0)


class ChecklistItemUpdate(WriteModel):
    question: str | None = Field(default=None, min_length=1)
    category: str | None = None
    order_index: int | None = Field(default=None, ge=0)


class ChecklistItemRead(ApiModel):
    id: UUID
    checklist_id: UUID
    question: str
    category: str | None
    order_index: int
    created_at: datetime
