from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import Select, and_, func, select
from sqlalchemy.orm import Session

from auditflow.audits.models import Audit
from auditflow.audits.repository import AuditRepository
from auditflow.iam.repository import TenantRepository, UserRepository
from auditflow.iam.schemas import TenantRead, UserRead
from auditflow.leads.models import Lead
from auditflow.leads.repository import LeadRepository
from auditflow.masterdata.models import AuditType, Industry
from auditflow.platform.security.context import Principal
from auditflow.reporting.schemas import (
    ActivityRead,
    AuditReportRead,
    AuditTypeCount,
    DashboardStatsRead,
    IndustryCount,
    LeadReportRead,
    PriorityCount,
    SettingsOverviewRead,
    SettingsTotals,
    StatusCount,
)
from auditflow.services.activity import ActivityLogRepository


UNKNOWN_STATUS = "unknown"
UNKNOWN_LOOKUP = "Unknown"
# dashboard buckets still use the pre-workflow status names
LEGACY_PENDING_STATUS = "planning"
LEGACY_COMPLETED_STATUS = "completed"
CONVERTED_STATUS = "converted"


def _q(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _buckets(rows: list[Any], fallback: str) -> list[tuple[str, int]]:
    counts: Counter[str] = Counter()
    for label, count in rows:
        counts[label if label is not None else fallback] += int(count)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


@dataclass(slots=True)
class ReportingService:
    audit_repository: AuditRepository = field(default_factory=AuditRepository)
    lead_repository: LeadRepository = field(default_factory=LeadRepository)
    user_repository: UserRepository = field(default_factory=UserRepository)
    tenant_repository: TenantRepository = field(default_factory=TenantRepository)
    activity_repository: ActivityLogRepository = field(default_factory=ActivityLogRepository)

    def audit_report(self, session: Session, principal: Principal) -> AuditReportRead:
        tenant_id = principal.tenant_id

        by_status = self._grouped(session, self.audit_repository, tenant_id, select(Audit.status, func.count(Audit.id)), Audit.status)
        by_industry = self._grouped(
            session,
            self.audit_repository,
            tenant_id,
            select(Industry.name, func.count(Audit.id))
            .select_from(Audit)
            .outerjoin(Industry, and_(Industry.id == Audit.industry_id, Industry.tenant_id == Audit.tenant_id)),
            Industry.id,
            Industry.name,
        )
        by_type = self._grouped(
            session,
            self.audit_repository,
            tenant_id,
            select(AuditType.name, func.count(Audit.id))
            .select_from(Audit)
            .outerjoin(AuditType, and_(AuditType.id == Audit.audit_type_id, AuditType.tenant_id == Audit.tenant_id)),
            AuditType.id,
            AuditType.name,
        )

        return AuditReportRead(
            audits_by_status=[StatusCount(status=label, count=count) for label, count in _buckets(by_status, UNKNOWN_STATUS)],
            audits_by_industry=[
                IndustryCount(industry_name=label, count=count) for label, count in _buckets(by_industry, UNKNOWN_LOOKUP)
            ],
            audits_by_type=[
                AuditTypeCount(audit_type_name=label, count=count) for label, count in _buckets(by_type, UNKNOWN_LOOKUP)
            ],
            total_audits=self._count(session, self.audit_repository, tenant_id),
        )

    def lead_report(self, session: Session, principal: Principal) -> LeadReportRead:
        tenant_id = principal.tenant_id

        by_status = self._grouped(session, self.lead_repository, tenant_id, select(Lead.status, func.count(Lead.id)), Lead.status)
        by_industry = self._grouped(
            session,
            self.lead_repository,
            tenant_id,
            select(Industry.name, func.count(Lead.id))
            .select_from(Lead)
            .outerjoin(Industry, and_(Industry.id == Lead.industry_id, Industry.tenant_id == Lead.tenant_id)),
            Industry.id,
            Industry.name,
        )
        by_priority = self._grouped(
            session, self.lead_repository, tenant_id, select(Lead.priority, func.count(Lead.id)), Lead.priority
        )

        total_leads = self._count(session, self.lead_repository, tenant_id)
        converted = self._count(session, self.lead_repository, tenant_id, Lead.status == CONVERTED_STATUS)
        conversion_rate = Decimal("0")
        if total_leads > 0:
            conversion_rate = _q(Decimal(converted) * Decimal("100") / Decimal(total_leads))

        value_stmt = self.lead_repository.apply_scope_query(select(func.coalesce(func.sum(Lead.estimated_value), 0)), tenant_id)
        total_estimated_value = int(session.scalar(value_stmt) or 0)

        return LeadReportRead(
            leads_by_status=[StatusCount(status=label, count=count) for label, count in _buckets(by_status, UNKNOWN_STATUS)],
            leads_by_industry=[
                IndustryCount(industry_name=label, count=count) for label, count in _buckets(by_industry, UNKNOWN_LOOKUP)
            ],
            leads_by_priority=[
                PriorityCount(priority=label, count=count) for label, count in _buckets(by_priority, UNKNOWN_STATUS)
            ],
            conversion_rate=float(conversion_rate),
            total_estimated_value=total_estimated_value,
            total_leads=total_leads,
        )

    def dashboard_stats(self, session: Session, principal: Principal) -> DashboardStatsRead:
        tenant_id = principal.tenant_id
        return DashboardStatsRead(
            total_audits=self._count(session, self.audit_repository, tenant_id),
            pending_audits=self._count(session, self.audit_repository, tenant_id, Audit.status == LEGACY_PENDING_STATUS),
            completed_audits=self._count(
                session, self.audit_repository, tenant_id, Audit.status == LEGACY_COMPLETED_STATUS
            ),
            total_leads=self._count(session, self.lead_repository, tenant_id),
        )

    def recent_activity(self, session: Session, principal: Principal, *, limit: int = 10) -> list[ActivityRead]:
        rows = self.activity_repository.list(session, principal.tenant_id, limit=limit)
        return [ActivityRead.model_validate(row) for row in rows]

    def settings_overview(self, session: Session, principal: Principal) -> SettingsOverviewRead:
        tenant_id = principal.tenant_id
        organization = self.tenant_repository.current(session, tenant_id)
        users = self.user_repository.list(session, tenant_id, limit=1)
        return SettingsOverviewRead(
            organization=TenantRead.model_validate(organization) if organization is not None else None,
            primary_user=UserRead.model_validate(users[0]) if users else None,
            totals=SettingsTotals(
                users=self._count(session, self.user_repository, tenant_id),
                audits=self._count(session, self.audit_repository, tenant_id),
                leads=self._count(session, self.lead_repository, tenant_id),
            ),
        )

    @staticmethod
    def _grouped(session: Session, repository: Any, tenant_id: str, stmt: Select[Any], *group_by: Any) -> list[Any]:
        return list(session.execute(repository.apply_scope_query(stmt, tenant_id).group_by(*group_by)).all())

    @staticmethod
    def _count(session: Session, repository: Any, tenant_id: str, *criteria: Any) -> int:
        stmt = repository.apply_scope_query(select(func.count()).select_from(repository.model), tenant_id)
        if criteria:
            stmt = stmt.where(*criteria)
        return int(session.scalar(stmt) or 0)


reporting_service = ReportingService()
