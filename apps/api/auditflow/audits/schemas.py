from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from auditflow.core.schemas import ApiModel, WriteModel


AuditStatus = Literal["draft", "review", "approved", "closed"]
ChecklistAnswer = Literal["yes", "no", "na", "partial"]
Severity = Literal["critical", "high", "medium", "low"]
FollowUpStatus = Literal["pending", "in_progress", "completed"]


class AuditCreate(WriteModel):
    audit_number: str = Field(min_length=1)
    customer_name: str = Field(min_length=1)
    site_location: str = Field(min_length=1)
    industry_id: UUID | None = None
    audit_type_id: UUID | None = None
    auditor_id: UUID | None = None
    auditor_name: str = Field(min_length=1)
    audit_date: datetime
    geo_location: str | None = None


class AuditUpdate(WriteModel):
    audit_number: str | None = Field(default=None, min_length=1)
    customer_name: str | None = Field(default=None, min_length=1)
    site_location: str | None = Field(default=None, min_length=1)
    industry_id: UUID | None = None
    audit_type_id: UUID | None = None
    auditor_id: UUID | None = None
    auditor_name: str | None = Field(default=None, min_length=1)
    audit_date: datetime | None = None
    geo_location: str | None = None


class AuditRead(ApiModel):
    id: UUID
    tenant_id: str
    audit_number: str
    customer_name: str
    site_location: str
    industry_id: UUID | None
    audit_type_id: UUID | None
    auditor_id: UUID | None
    auditor_name: str
    audit_date: datetime
    status: AuditStatus
    geo_location: str | None
    created_at: datetime
    updated_at: datetime


class ChecklistResponseCreate(WriteModel):
    audit_id: UUID
    checklist_item_id: UUID
    response: ChecklistAnswer
    notes: str | None = None


class ChecklistResponseUpdate(WriteModel):
    response: ChecklistAnswer | None = None
    notes: str | None = None


class ChecklistResponseRead(ApiModel):
    id: UUID
    audit_id: UUID
    checklist_item_id: UUID
    response: ChecklistAnswer
    notes: str | None
    created_at: datetime


class ObservationCreate(WriteModel):
    audit_id: UUID
    category: str = Field(min_length=1)
    description: str = Field(min_length=1)
    severity: Severity
    recommendation: str | None = None


class ObservationUpdate(WriteModel):
    category: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    severity: Severity | None = None
    recommendation: str | None = None


class ObservationRead(ApiModel):
    id: UUID
    audit_id: UUID
    category: str
    description: str
    severity: Severity
    recommendation: str | None
    created_at: datetime


class BusinessIntelligenceCreate(WriteModel):
    audit_id: UUID
    market_potential: str | None = None
    competitor_presence: str | None = None
    customer_feedback: str | None = None
    additional_notes: str | None = None


class BusinessIntelligenceUpdate(WriteModel):
    market_potential: str | None = None
    competitor_presence: str | None = None
    customer_feedback: str | None = None
    additional_notes: str | None = None


class BusinessIntelligenceRead(ApiModel):
    id: UUID
    audit_id: UUID
    market_potential: str | None
    competitor_presence: str | None
    customer_feedback: str | None
    additional_notes: str | None
    created_at: datetime


class FollowUpActionCreate(WriteModel):
    audit_id: UUID
    action: str = Field(min_length=1)
    assigned_to: str | None = None
    due_date: datetime | None = None
    status: FollowUpStatus = "pending"
    notes: str | None = None


class FollowUpActionUpdate(WriteModel):
    action: str | None = Field(default=None, min_length=1)
    assigned_to: str | None = None
    due_date: datetime | None = None
    status: FollowUpStatus | None = None
    notes: str | None = None


class FollowUpActionRead(ApiModel):
    id: UUID
    audit_id: UUID
    action: str
    assigned_to: str | None
    due_date: datetime | None
    status: FollowUpStatus
    notes: str | None
    created_at: datetime
