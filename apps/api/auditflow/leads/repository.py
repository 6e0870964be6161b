from __future__ import annotations

from auditflow.leads.models import Lead
from auditflow.platform.security.repository import TenantScopedRepository


class LeadRepository(TenantScopedRepository):
    model = Lead
    resource = "lead"
