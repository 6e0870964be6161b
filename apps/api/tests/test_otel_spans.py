from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from auditflow.core.auth import get_current_principal
from auditflow.core.config import Settings
from auditflow.core.database import Base, get_db
from auditflow.iam.models import Tenant
from auditflow.main import app
from auditflow.otel import attach_inmemory_exporter, build_span_processors
from auditflow.platform.security.context import Principal


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    session.add(Tenant(id="tenant-a", name="Alpha"))
    session.commit()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def span_exporter() -> InMemorySpanExporter:
    exporter = attach_inmemory_exporter()
    exporter.clear()
    return exporter


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    def override_get_current_principal() -> Principal:
        return Principal(user_id="admin-a", role="admin", tenant_id="tenant-a")

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_principal] = override_get_current_principal
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create_lead(client: TestClient) -> dict:
    response = client.post(
        "/leads",
        json={
            "leadNumber": "LEAD-OTEL",
            "companyName": "Northwind",
            "contactPerson": "Sam Ortiz",
            "email": "sam@northwind.test",
            "phone": "+1 555 0100",
        },
    )
    assert response.status_code == 201
    return response.json()


def test_request_span_contains_correlation_id(client: TestClient, span_exporter: InMemorySpanExporter) -> None:
    response = client.get("/health", headers={"X-Correlation-Id": "otel-corr-1"})
    assert response.status_code == 200

    spans = span_exporter.get_finished_spans()
    assert spans
    assert any(span.attributes.get("correlation_id") == "otel-corr-1" for span in spans)


def test_workflow_span_carries_tenant_and_target_status(
    client: TestClient,
    span_exporter: InMemorySpanExporter,
) -> None:
    lead = _create_lead(client)
    response = client.post(f"/leads/{lead['id']}/qualify")
    assert response.status_code == 200

    workflow_spans = [span for span in span_exporter.get_finished_spans() if span.name == "workflow.lead.qualify"]
    assert workflow_spans
    assert workflow_spans[-1].attributes.get("tenant_id") == "tenant-a"
    assert workflow_spans[-1].attributes.get("entity_id") == lead["id"]
    assert workflow_spans[-1].attributes.get("to_status") == "qualified"


def test_exporters_follow_settings() -> None:
    assert build_span_processors(Settings(otel_enabled=True)) == []

    console = build_span_processors(Settings(otel_enabled=True, otel_console_exporter=True))
    assert len(console) == 1
    assert isinstance(console[0], SimpleSpanProcessor)
    assert isinstance(console[0].span_exporter, ConsoleSpanExporter)

    otlp = build_span_processors(
        Settings(otel_enabled=True, otel_exporter_otlp_endpoint="http://collector:4318/v1/traces")
    )
    try:
        assert len(otlp) == 1
        assert isinstance(otlp[0], BatchSpanProcessor)
    finally:
        for processor in otlp:
            processor.shutdown()
