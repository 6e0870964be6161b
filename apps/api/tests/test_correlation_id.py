from __future__ import annotations

import uuid
from collections.abc import Generator

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from auditflow import events
from auditflow.core.auth import get_current_principal
from auditflow.core.database import Base, get_db
from auditflow.iam.models import Tenant
from auditflow.main import app
from auditflow.models.activity import ActivityLog
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


@pytest.fixture(autouse=True)
def clear_events() -> Generator[None, None, None]:
    events.published_events.clear()
    yield
    events.published_events.clear()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    def override_get_current_principal(request: Request) -> Principal:
        return Principal(
            user_id="admin-a",
            role="admin",
            tenant_id="tenant-a",
            correlation_id=getattr(request.state, "correlation_id", None),
        )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_principal] = override_get_current_principal
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create_audit(client: TestClient, correlation_id: str) -> dict:
    response = client.post(
        "/audits",
        json={
            "auditNumber": "AUD-CORR",
            "customerName": "Acme Foods",
            "siteLocation": "Plant 4",
            "auditorName": "Dana Field",
            "auditDate": "2026-10-01T09:00:00Z",
        },
        headers={"X-Correlation-Id": correlation_id},
    )
    assert response.status_code == 201
    return response.json()


def test_generated_correlation_id_returned_in_header_and_error_envelope(client: TestClient) -> None:
    response = client.get(f"/audits/{uuid.uuid4()}")
    assert response.status_code == 404
    header_value = response.headers.get("x-correlation-id")
    assert header_value
    body = response.json()
    assert body["code"] == "not_found"
    assert body["correlation_id"] == header_value


def test_correlation_id_respected_when_provided(client: TestClient) -> None:
    response = client.get(f"/leads/{uuid.uuid4()}", headers={"X-Correlation-Id": "abc-123"})
    assert response.status_code == 404
    assert response.headers.get("x-correlation-id") == "abc-123"
    assert response.headers.get("x-request-id") == "abc-123"
    assert response.json()["correlation_id"] == "abc-123"


@pytest.mark.parametrize("supplied", ["has spaces in it", "x" * 129, "semi;colon"])
def test_malformed_correlation_id_is_replaced(client: TestClient, supplied: str) -> None:
    response = client.get(f"/leads/{uuid.uuid4()}", headers={"X-Correlation-Id": supplied})
    assert response.status_code == 404
    replaced = response.headers.get("x-correlation-id")
    assert replaced != supplied
    assert uuid.UUID(replaced)
    assert response.json()["correlation_id"] == replaced


def test_validation_errors_use_the_envelope(client: TestClient) -> None:
    response = client.post("/audits", json={"auditNumber": ""}, headers={"X-Correlation-Id": "corr-invalid-1"})
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "validation_error"
    assert body["correlation_id"] == "corr-invalid-1"
    assert isinstance(body["details"], list) and body["details"]


def test_activity_log_uses_request_correlation_id(client: TestClient, db_session: Session) -> None:
    audit = _create_audit(client, "corr-activity-1")
    transition = client.post(
        f"/audits/{audit['id']}/submit-for-review",
        headers={"X-Correlation-Id": "corr-activity-2"},
    )
    assert transition.status_code == 200

    entries = db_session.scalars(select(ActivityLog).order_by(ActivityLog.created_at)).all()
    assert [entry.correlation_id for entry in entries] == ["corr-activity-1", "corr-activity-2"]


def test_event_envelope_includes_correlation_id(client: TestClient) -> None:
    audit = _create_audit(client, "corr-event-1")
    client.post(f"/audits/{audit['id']}/submit-for-review", headers={"X-Correlation-Id": "corr-event-2"})

    by_type = {item["event_type"]: item for item in events.published_events}
    assert by_type["audit.created"]["correlation_id"] == "corr-event-1"
    assert by_type["audit.submit_for_review"]["correlation_id"] == "corr-event-2"
    assert by_type["audit.submit_for_review"]["tenant_id"] == "tenant-a"
