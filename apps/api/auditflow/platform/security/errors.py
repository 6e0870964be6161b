from __future__ import annotations

from auditflow.core.errors import AppError


class AuthorizationError(AppError):
    """Base error for access control gate failures."""


class UnauthenticatedError(AuthorizationError):
    """Raised when a protected operation is invoked without a verified principal."""

    status_code = 401
    code = "unauthenticated"

    def __init__(self, message: str = "authentication required") -> None:
        super().__init__(message)


class ForbiddenError(AuthorizationError):
    """Raised when the principal's role is not allowed to perform the operation."""

    status_code = 403
    code = "forbidden"

    def __init__(self, entity: str, operation: str, role: str) -> None:
        self.entity = entity
        self.operation = operation
        self.role = role
        super().__init__(
            f"role '{role}' may not {operation} {entity}",
            details={"entity": entity, "operation": operation, "role": role},
        )
