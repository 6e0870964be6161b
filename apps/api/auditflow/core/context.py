from dataclasses import dataclass

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


@dataclass
class RequestContext:
    """Per-request caller details; auth fills in the principal fields."""

    correlation_id: str
    user_id: str | None = None
    tenant_id: str | None = None
    role: str | None = None


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        context = RequestContext(correlation_id=getattr(request.state, "correlation_id", None) or "")
        request.state.context = context
        response = await call_next(request)
        response.headers["x-request-id"] = context.correlation_id
        return response
