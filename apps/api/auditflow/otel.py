from __future__ import annotations

from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from auditflow.core.config import Settings, get_settings
from auditflow.middleware.correlation_id import CORRELATION_HEADER, resolve_correlation_id


SERVICE_NAME = "auditflow-api"

_provider: TracerProvider | None = None
_exporters_installed = False


def _tracer_provider() -> TracerProvider:
    """Process-wide SDK provider, registered with the OpenTelemetry API on first use."""
    global _provider

    if _provider is None:
        settings = get_settings()
        resource = Resource.create(
            {
                "service.name": SERVICE_NAME,
                "service.version": settings.app_version,
                "deployment.environment": settings.app_env,
            }
        )
        _provider = TracerProvider(resource=resource)
        trace.set_tracer_provider(_provider)
    return _provider


def build_span_processors(settings: Settings) -> list[SpanProcessor]:
    processors: list[SpanProcessor] = []
    if settings.otel_exporter_otlp_endpoint:
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint)))
    if settings.otel_console_exporter:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter()))
    return processors


def configure_tracing(settings: Settings) -> TracerProvider | None:
    global _exporters_installed

    if not settings.otel_enabled:
        return None

    provider = _tracer_provider()
    if not _exporters_installed:
        for processor in build_span_processors(settings):
            provider.add_span_processor(processor)
        _exporters_installed = True
    return provider


def attach_inmemory_exporter() -> InMemorySpanExporter:
    exporter = InMemorySpanExporter()
    _tracer_provider().add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


def get_tracer(name: str):
    return trace.get_tracer(name)


def record_correlation_id(span, scope: dict[str, Any]) -> None:  # type: ignore[no-untyped-def]
    # runs before the correlation middleware, so read the header directly
    if span is None or not span.is_recording():
        return
    headers = dict(scope.get("headers", []))
    raw = headers.get(CORRELATION_HEADER.encode("latin-1"))
    if raw:
        span.set_attribute("correlation_id", resolve_correlation_id(raw.decode("latin-1")))
