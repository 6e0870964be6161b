from __future__ import annotations

from sqlalchemy import ColumnElement, select
from sqlalchemy.orm import Session

from auditflow.iam.models import Tenant, User
from auditflow.platform.security.repository import TenantScopedRepository, require_tenant


class UserRepository(TenantScopedRepository):
    model = User
    resource = "user"
    protected_fields = frozenset({"id", "tenant_id", "created_at"})


class TenantRepository(TenantScopedRepository):
    """The organization row itself, keyed by the caller's tenant id."""

    model = Tenant
    resource = "tenant"

    def tenant_criteria(self, tenant_id: str | None) -> ColumnElement[bool]:
        return Tenant.id == require_tenant(tenant_id)

    def current(self, session: Session, tenant_id: str | None) -> Tenant | None:
        return session.scalar(select(Tenant).where(self.tenant_criteria(tenant_id)))
