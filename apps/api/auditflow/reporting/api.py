from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auditflow.core.database import get_db
from auditflow.platform.security.context import Principal
from auditflow.platform.security.gate import require_capability
from auditflow.reporting.schemas import (
    ActivityRead,
    AuditReportRead,
    DashboardStatsRead,
    LeadReportRead,
    SettingsOverviewRead,
)
from auditflow.reporting.service import reporting_service


router = APIRouter(tags=["reports"])


@router.get("/reports/audits", response_model=AuditReportRead)
def audit_report(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("report", "read")),
) -> AuditReportRead:
    return reporting_service.audit_report(db, principal)


@router.get("/reports/leads", response_model=LeadReportRead)
def lead_report(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("report", "read")),
) -> LeadReportRead:
    return reporting_service.lead_report(db, principal)


@router.get("/dashboard/stats", response_model=DashboardStatsRead)
def dashboard_stats(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("dashboard", "read")),
) -> DashboardStatsRead:
    return reporting_service.dashboard_stats(db, principal)


@router.get("/dashboard/activity", response_model=list[ActivityRead])
def dashboard_activity(
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("dashboard", "read")),
) -> list[ActivityRead]:
    return reporting_service.recent_activity(db, principal, limit=limit)


@router.get("/settings/overview", response_model=SettingsOverviewRead)
def settings_overview(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_capability("settings", "read")),
) -> SettingsOverviewRead:
    return reporting_service.settings_overview(db, principal)
