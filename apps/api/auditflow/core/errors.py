from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for errors that map onto the JSON error envelope."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, details: Any = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(AppError):
    """Raised when a row does not exist inside the caller's tenant."""

    status_code = 404
    code = "not_found"

    def __init__(self, resource: str, entity_id: object | None = None) -> None:
        self.resource = resource
        self.entity_id = entity_id
        details = {"resource": resource, "id": str(entity_id)} if entity_id is not None else {"resource": resource}
        super().__init__(f"{resource} not found", details=details)


class InvalidTransitionError(AppError):
    """Raised when a workflow guard rejects the current status."""

    status_code = 400
    code = "invalid_transition"

    def __init__(
        self,
        entity: str,
        operation: str,
        *,
        current_status: str | None,
        allowed_from: list[str],
        message: str | None = None,
    ) -> None:
        self.entity = entity
        self.operation = operation
        self.current_status = current_status
        self.allowed_from = sorted(allowed_from)
        required = " or ".join(f"'{state}'" for state in self.allowed_from)
        super().__init__(
            message or f"cannot {operation} {entity} in status '{current_status}'; requires {required}",
            details={
                "entity": entity,
                "operation": operation,
                "current_status": current_status,
                "allowed_from": self.allowed_from,
            },
        )


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"


class ConflictError(AppError):
    status_code = 409
    code = "conflict"
