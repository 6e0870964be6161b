from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from auditflow.api.errors import register_error_handlers
from auditflow.api.routes import router as api_router
from auditflow.core.config import get_settings
from auditflow.core.context import RequestContextMiddleware
from auditflow.core.events import DomainEvent, event_bus
from auditflow.logging import configure_logging
from auditflow.middleware.correlation_id import CorrelationIdMiddleware
from auditflow.middleware.request_logging import RequestLoggingMiddleware
from auditflow.otel import configure_tracing, record_correlation_id


configure_logging()
logger = logging.getLogger("auditflow.lifecycle")

_status_event_types = [
    "audit.submit_for_review",
    "audit.approve",
    "audit.reject",
    "audit.close",
    "lead.qualify",
    "lead.start_progress",
    "lead.convert",
    "lead.close",
]


def _on_system_started(event: DomainEvent) -> None:
    logger.info("system_event", extra={"event_name": event.name})


def _on_status_changed(event: DomainEvent) -> None:
    payload = event.payload.get("payload") or {}
    logger.debug(
        "status_changed",
        extra={
            "event_name": event.name,
            "entity_type": event.payload.get("entity_type"),
            "entity_id": event.payload.get("entity_id"),
            "from_status": payload.get("from_status"),
            "to_status": payload.get("to_status"),
        },
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    event_bus.subscribe("system.started", _on_system_started)
    for event_name in _status_event_types:
        event_bus.subscribe(event_name, _on_status_changed)
    event_bus.publish("system.started", {"service": "auditflow-api"})
    yield


settings = get_settings()

app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
register_error_handlers(app)
app.include_router(api_router)

configure_tracing(settings)

if not getattr(app, "_is_instrumented_by_opentelemetry", False):
    FastAPIInstrumentor().instrument_app(app, server_request_hook=record_correlation_id)
