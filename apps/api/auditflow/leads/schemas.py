from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from auditflow.core.schemas import ApiModel, WriteModel


LeadStatus = Literal["new", "qualified", "in_progress", "converted", "closed"]
LeadPriority = Literal["low", "medium", "high", "urgent"]


class LeadCreate(WriteModel):
    lead_number: str = Field(min_length=1)
    audit_id: UUID | None = None
    company_name: str = Field(min_length=1)
    contact_person: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str = Field(min_length=1)
    industry_id: UUID | None = None
    priority: LeadPriority = "medium"
    estimated_value: int | None = Field(default=None, ge=0)
    notes: str | None = None
    assigned_to: UUID | None = None


class LeadUpdate(WriteModel):
    lead_number: str | None = Field(default=None, min_length=1)
    audit_id: UUID | None = None
    company_name: str | None = Field(default=None, min_length=1)
    contact_person: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=3)
    phone: str | None = Field(default=None, min_length=1)
    industry_id: UUID | None = None
    priority: LeadPriority | None = None
    estimated_value: int | None = Field(default=None, ge=0)
    notes: str | None = None
    assigned_to: UUID | None = None


class LeadRead(ApiModel):
    id: UUID
    tenant_id: str
    lead_number: str
    audit_id: UUID | None
    company_name: str
    contact_person: str
    email: str
    phone: str
    industry_id: UUID | None
    status: LeadStatus
    priority: LeadPriority
    estimated_value: int | None
    notes: str | None
    assigned_to: UUID | None
    created_at: datetime
    updated_at: datetime
