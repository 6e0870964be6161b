from auditflow.models.activity import ActivityLog
from auditflow.iam.models import RefreshToken, Tenant, User
from auditflow.masterdata.models import AuditType, Checklist, ChecklistItem, Industry
from auditflow.audits.models import (
	Audit,
	AuditChecklistResponse,
	BusinessIntelligence,
	FollowUpAction,
	Observation,
)
from auditflow.leads.models import Lead

__all__ = [
	"ActivityLog",
	"Audit",
	"AuditChecklistResponse",
	"AuditType",
	"BusinessIntelligence",
	"Checklist",
	"ChecklistItem",
	"FollowUpAction",
	"Industry",
	"Lead",
	"Observation",
	"RefreshToken",
	"Tenant",
	"User",
]
