from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, NoReturn

from pydantic import BaseModel
from sqlalchemy import ColumnElement
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auditflow.core.errors import ConflictError
from auditflow.platform.security.context import Principal
from auditflow.platform.security.repository import TenantScopedRepository


logger = logging.getLogger("auditflow.crud")


@dataclass(slots=True)
class CrudService:
    """Create/read/update/delete for one tenant-scoped resource."""

    repository: TenantScopedRepository
    read_model: type[BaseModel]
    # payload field -> repository the referenced id must resolve in
    references: dict[str, TenantScopedRepository] = field(default_factory=dict)

    def create(self, session: Session, principal: Principal, dto: BaseModel) -> Any:
        payload = self.prepare_create(dto.model_dump())
        self.check_references(session, principal.tenant_id, payload)
        with self.translate_conflicts(session):
            row = self.repository.create(session, principal.tenant_id, payload)
            self.after_create(session, principal, row)
            session.commit()
        session.refresh(row)
        logger.info(
            "entity.created",
            extra={"entity_type": self.repository.resource, "entity_id": str(row.id), "user_id": principal.user_id},
        )
        return self.read_model.model_validate(row)

    def list(self, session: Session, principal: Principal, *criteria: ColumnElement[bool]) -> list[Any]:
        rows = self.repository.list(session, principal.tenant_id, *criteria)
        return [self.read_model.model_validate(row) for row in rows]

    def get(self, session: Session, principal: Principal, entity_id: uuid.UUID) -> Any:
        row = self.repository.get_or_raise(session, principal.tenant_id, entity_id)
        return self.read_model.model_validate(row)

    def update(self, session: Session, principal: Principal, entity_id: uuid.UUID, dto: BaseModel) -> Any:
        patch = self.prepare_update(dto.model_dump(exclude_unset=True))
        self.check_references(session, principal.tenant_id, patch)
        with self.translate_conflicts(session):
            row = self.repository.update(session, principal.tenant_id, entity_id, patch, guard=self.update_guard())
            if row is None:
                session.rollback()
                self.reject_update(session, principal, entity_id)
            session.commit()
        session.refresh(row)
        return self.read_model.model_validate(row)

    def delete(self, session: Session, principal: Principal, entity_id: uuid.UUID) -> None:
        with self.translate_conflicts(session):
            self.repository.delete(session, principal.tenant_id, entity_id)
            session.commit()
        logger.info(
            "entity.deleted",
            extra={"entity_type": self.repository.resource, "entity_id": str(entity_id), "user_id": principal.user_id},
        )

    def prepare_create(self, payload: dict[str, Any]) -> dict[str, Any]:
        return payload

    def prepare_update(self, patch: dict[str, Any]) -> dict[str, Any]:
        return patch

    def after_create(self, session: Session, principal: Principal, row: Any) -> None:
        return None

    def update_guard(self) -> ColumnElement[bool] | None:
        return None

    def reject_update(self, session: Session, principal: Principal, entity_id: uuid.UUID) -> NoReturn:
        raise ConflictError(f"{self.repository.resource} cannot be updated in its current state")

    def check_references(self, session: Session, tenant_id: str, payload: dict[str, Any]) -> None:
        for field_name, repository in self.references.items():
            if field_name in payload:
                repository.ensure_reference(session, tenant_id, payload[field_name], field_name)

    @contextmanager
    def translate_conflicts(self, session: Session) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            session.rollback()
            raise ConflictError(f"{self.repository.resource} conflicts with an existing record") from exc
