from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import Any

from sqlalchemy import ColumnElement, Select, and_, select, update
from sqlalchemy.orm import Session

from auditflow.core.database import utcnow
from auditflow.core.errors import NotFoundError, ValidationError
from auditflow.metrics import observe_tenant_scope_not_found


def require_tenant(tenant_id: str | None) -> str:
    if tenant_id is None or not str(tenant_id).strip():
        raise ValidationError("tenant id is required")
    return str(tenant_id)


class TenantScopedRepository:
    """Data access for rows owned by a tenant through their ``tenant_id`` column.

    Every statement built here carries the tenant predicate, so a row of another
    tenant is indistinguishable from a missing row.
    """

    model: Any = None
    resource = ""
    # workflow-owned columns are changed through transition_status only
    protected_fields = frozenset({"id", "tenant_id", "status", "created_at", "updated_at"})

    def tenant_criteria(self, tenant_id: str | None) -> ColumnElement[bool]:
        return self.model.tenant_id == require_tenant(tenant_id)

    def apply_scope_query(self, query: Select[Any], tenant_id: str | None) -> Select[Any]:
        return query.where(self.tenant_criteria(tenant_id))

    def get(self, session: Session, tenant_id: str | None, entity_id: uuid.UUID) -> Any | None:
        stmt = self.apply_scope_query(select(self.model).where(self.model.id == entity_id), tenant_id)
        return session.scalar(stmt)

    def get_or_raise(self, session: Session, tenant_id: str | None, entity_id: uuid.UUID) -> Any:
        row = self.get(session, tenant_id, entity_id)
        if row is None:
            observe_tenant_scope_not_found(self.resource)
            raise NotFoundError(self.resource, entity_id)
        return row

    def exists(self, session: Session, tenant_id: str | None, entity_id: uuid.UUID) -> bool:
        stmt = self.apply_scope_query(select(self.model.id).where(self.model.id == entity_id), tenant_id)
        return session.scalar(stmt) is not None

    def ensure_reference(self, session: Session, tenant_id: str | None, entity_id: uuid.UUID | None, field: str) -> None:
        if entity_id is None:
            return
        if not self.exists(session, tenant_id, entity_id):
            raise ValidationError(
                f"{field} does not reference a {self.resource} in this tenant",
                details={"field": field, "id": str(entity_id)},
            )

    def list(
        self,
        session: Session,
        tenant_id: str | None,
        *criteria: ColumnElement[bool],
        order_by: Iterable[Any] | None = None,
        limit: int | None = None,
    ) -> list[Any]:
        stmt = self.apply_scope_query(select(self.model), tenant_id)
        if criteria:
            stmt = stmt.where(and_(*criteria))
        ordering = list(order_by) if order_by is not None else self.default_order()
        stmt = stmt.order_by(*ordering)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.scalars(stmt).all())

    def default_order(self) -> list[Any]:
        return [self.model.created_at.desc()]

    def bind_tenant(self, session: Session, tenant_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        supplied = payload.get("tenant_id")
        if supplied is not None and str(supplied) != tenant_id:
            raise ValidationError("tenant_id does not match the caller's tenant")
        return {**payload, "tenant_id": tenant_id}

    def create(self, session: Session, tenant_id: str | None, payload: dict[str, Any]) -> Any:
        tenant = require_tenant(tenant_id)
        row = self.model(**self.bind_tenant(session, tenant, payload))
        session.add(row)
        session.flush()
        return row

    def validate_patch(self, patch: dict[str, Any]) -> None:
        columns = self.model.__table__.columns
        for key, value in patch.items():
            if key in self.protected_fields or key not in columns:
                raise ValidationError(f"field '{key}' cannot be updated", details={"field": key})
            if value is None and not columns[key].nullable:
                raise ValidationError(f"field '{key}' cannot be null", details={"field": key})

    def update(
        self,
        session: Session,
        tenant_id: str | None,
        entity_id: uuid.UUID,
        patch: dict[str, Any],
        *,
        guard: ColumnElement[bool] | None = None,
    ) -> Any | None:
        """Apply ``patch`` to the row; ``None`` means the row exists but ``guard`` failed."""
        self.validate_patch(patch)
        if not patch and guard is None:
            return self.get_or_raise(session, tenant_id, entity_id)

        values = dict(patch)
        if "updated_at" in self.model.__table__.columns:
            values["updated_at"] = utcnow()
        criteria = [self.model.id == entity_id, self.tenant_criteria(tenant_id)]
        if guard is not None:
            criteria.append(guard)
        result = session.execute(
            update(self.model)
            .where(and_(*criteria))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            if guard is not None and self.exists(session, tenant_id, entity_id):
                return None
            observe_tenant_scope_not_found(self.resource)
            raise NotFoundError(self.resource, entity_id)
        # the identity map still holds the pre-update values
        stmt = self.apply_scope_query(select(self.model).where(self.model.id == entity_id), tenant_id)
        return session.scalar(stmt.execution_options(populate_existing=True))

    def delete(self, session: Session, tenant_id: str | None, entity_id: uuid.UUID) -> None:
        row = self.get_or_raise(session, tenant_id, entity_id)
        session.delete(row)
        session.flush()

    def transition_status(
        self,
        session: Session,
        tenant_id: str | None,
        entity_id: uuid.UUID,
        *,
        allowed_from: Iterable[str],
        to_status: str,
    ) -> int:
        """Move ``status`` to ``to_status`` only if it is still one of ``allowed_from``.

        Returns the affected row count; 0 means the row is gone or its status
        changed after it was read.
        """
        result = session.execute(
            update(self.model)
            .where(
                and_(
                    self.model.id == entity_id,
                    self.tenant_criteria(tenant_id),
                    self.model.status.in_(sorted(allowed_from)),
                )
            )
            .values(status=to_status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


class ParentScopedRepository(TenantScopedRepository):
    """Rows without a tenant column, owned through a tenant-scoped parent."""

    parent_repository: TenantScopedRepository
    parent_key = ""

    def tenant_criteria(self, tenant_id: str | None) -> ColumnElement[bool]:
        parent = self.parent_repository.model
        owned_parents = select(parent.id).where(self.parent_repository.tenant_criteria(tenant_id))
        return getattr(self.model, self.parent_key).in_(owned_parents)

    def bind_tenant(self, session: Session, tenant_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        if "tenant_id" in payload:
            raise ValidationError(f"{self.resource} does not accept tenant_id")
        parent_id = payload.get(self.parent_key)
        if parent_id is None:
            raise ValidationError(f"{self.parent_key} is required", details={"field": self.parent_key})
        self.parent_repository.ensure_reference(session, tenant_id, parent_id, self.parent_key)
        return dict(payload)

    def validate_patch(self, patch: dict[str, Any]) -> None:
        if self.parent_key in patch:
            raise ValidationError(f"field '{self.parent_key}' cannot be updated", details={"field": self.parent_key})
        super().validate_patch(patch)
