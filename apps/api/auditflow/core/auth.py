from __future__ import annotations

import logging

from jose import JWTError, jwt
from starlette.requests import Request

from auditflow.context import get_correlation_id, set_tenant_id
from auditflow.core.config import get_settings
from auditflow.platform.security.context import ROLES, Principal


logger = logging.getLogger("auditflow.auth")


def _extract_token(request: Request) -> str:
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[len("Bearer ") :].strip()
    return request.cookies.get("accessToken", "")


def decode_principal(token: str) -> Principal | None:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.info("auth.token_rejected", extra={"error": str(exc)})
        return None

    user_id = payload.get("userId")
    role = payload.get("role")
    tenant_id = payload.get("tenantId")
    if not user_id or not tenant_id or role not in ROLES:
        logger.info("auth.token_rejected", extra={"error": "missing or invalid claims"})
        return None
    return Principal(user_id=str(user_id), role=str(role), tenant_id=str(tenant_id))


async def get_current_principal(request: Request) -> Principal | None:
    token = _extract_token(request)
    if not token:
        return None

    principal = decode_principal(token)
    if principal is None:
        return None

    principal.correlation_id = get_correlation_id()
    context = getattr(request.state, "context", None)
    if context is not None:
        context.user_id = principal.user_id
        context.tenant_id = principal.tenant_id
        context.role = principal.role
    set_tenant_id(principal.tenant_id)
    return principal
