import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auditflow.core.database import get_db
from auditflow.platform.crud import CrudService
from auditflow.platform.security.context import Principal
from auditflow.platform.security.gate import require_capability


def build_crud_router(
    *,
    prefix: str,
    tag: str,
    entity: str,
    service: CrudService,
    create_model: type[BaseModel],
    update_model: type[BaseModel],
    read_model: type[BaseModel],
    parent_query: str | None = None,
    parent_field: str | None = None,
) -> APIRouter:
    """Standard tenant-scoped CRUD routes for a resource without a workflow.

    With ``parent_query`` the list route accepts that query parameter and filters
    on ``parent_field``.
    """
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.post("", response_model=read_model, status_code=status.HTTP_201_CREATED)
    def create_entity(
        payload: create_model,  # type: ignore[valid-type]
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_capability(entity, "create")),
    ):
        return service.create(db, principal, payload)

    if parent_query is not None and parent_field is not None:
        column = getattr(service.repository.model, parent_field)

        @router.get("", response_model=list[read_model])  # type: ignore[valid-type]
        def list_entities(
            parent_id: uuid.UUID | None = Query(default=None, alias=parent_query),
            db: Session = Depends(get_db),
            principal: Principal = Depends(require_capability(entity, "read")),
        ):
            if parent_id is None:
                return service.list(db, principal)
            return service.list(db, principal, column == parent_id)

    else:

        @router.get("", response_model=list[read_model])  # type: ignore[valid-type]
        def list_entities(
            db: Session = Depends(get_db),
            principal: Principal = Depends(require_capability(entity, "read")),
        ):
            return service.list(db, principal)

    @router.get("/{entity_id}", response_model=read_model)
    def get_entity(
        entity_id: uuid.UUID,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_capability(entity, "read")),
    ):
        return service.get(db, principal, entity_id)

    @router.api_route("/{entity_id}", methods=["PUT", "PATCH"], response_model=read_model)
    def update_entity(
        entity_id: uuid.UUID,
        payload: update_model,  # type: ignore[valid-type]
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_capability(entity, "update")),
    ):
        return service.update(db, principal, entity_id, payload)

    @router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_entity(
        entity_id: uuid.UUID,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_capability(entity, "delete")),
    ) -> Response:
        service.delete(db, principal, entity_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
