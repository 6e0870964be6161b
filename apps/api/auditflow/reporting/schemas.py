from __future__ import annotations

from datetime import datetime
from uuid import UUID

from auditflow.core.schemas import ApiModel
from auditflow.iam.schemas import TenantRead, UserRead


class StatusCount(ApiModel):
    status: str
    count: int


class IndustryCount(ApiModel):
    industry_name: str
    count: int


class AuditTypeCount(ApiModel):
    audit_type_name: str
    count: int


class PriorityCount(ApiModel):
    priority: str
    count: int


class AuditReportRead(ApiModel):
    audits_by_status: list[StatusCount]
    audits_by_industry: list[IndustryCount]
    audits_by_type: list[AuditTypeCount]
    total_audits: int


class LeadReportRead(ApiModel):
    leads_by_status: list[StatusCount]
    leads_by_industry: list[IndustryCount]
    leads_by_priority: list[PriorityCount]
    conversion_rate: float
    total_estimated_value: int
    total_leads: int


class DashboardStatsRead(ApiModel):
    total_audits: int
    pending_audits: int
    completed_audits: int
    total_leads: int


class ActivityRead(ApiModel):
    id: UUID
    actor_id: str
    action: str
    entity_type: str
    entity_id: str
    from_status: str | None
    to_status: str | None
    correlation_id: str | None
    created_at: datetime


class SettingsTotals(ApiModel):
    users: int
    audits: int
    leads: int


class SettingsOverviewRead(ApiModel):
    organization: TenantRead | None
    primary_user: UserRead | None
    totals: SettingsTotals
