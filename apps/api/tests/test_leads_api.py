from __future__ import annotations

import uuid
from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from auditflow import events
from auditflow.core.auth import get_current_principal
from auditflow.core.database import Base, get_db
from auditflow.iam.models import Tenant
from auditflow.main import app
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
    session.add_all([Tenant(id="tenant-a", name="Alpha Leads"), Tenant(id="tenant-b", name="Beta Leads")])
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
def client(db_session: Session) -> Generator[tuple[TestClient, Callable[[str], None]], None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    actors = {
        "auditor-a": Principal(user_id="auditor-a", role="auditor", tenant_id="tenant-a"),
        "client-a": Principal(user_id="client-a", role="client", tenant_id="tenant-a"),
        "auditor-b": Principal(user_id="auditor-b", role="auditor", tenant_id="tenant-b"),
    }
    current = {"actor": actors["auditor-a"]}

    def override_get_current_principal() -> Principal:
        return current["actor"]

    def set_actor(user_id: str) -> None:
        current["actor"] = actors[user_id]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_principal] = override_get_current_principal
    with TestClient(app) as test_client:
        yield test_client, set_actor
    app.dependency_overrides.clear()


def _create_lead(client: TestClient, number: str = "LEAD-001", **overrides: object) -> dict:
    payload = {
        "leadNumber": number,
        "companyName": "Northwind",
        "contactPerson": "Sam Ortiz",
        "email": "sam@northwind.test",
        "phone": "+1 555 0100",
    }
    payload.update(overrides)
    response = client.post("/leads", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_lead_defaults(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    lead = _create_lead(test_client, estimatedValue=2500)

    assert lead["status"] == "new"
    assert lead["priority"] == "medium"
    assert lead["estimatedValue"] == 2500
    assert lead["tenantId"] == "tenant-a"

    created_events = [item for item in events.published_events if item["event_type"] == "lead.created"]
    assert created_events
    assert created_events[-1]["payload"]["lead_number"] == "LEAD-001"


def test_create_lead_rejects_negative_value(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    response = test_client.post(
        "/leads",
        json={
            "leadNumber": "LEAD-002",
            "companyName": "Northwind",
            "contactPerson": "Sam Ortiz",
            "email": "sam@northwind.test",
            "phone": "+1 555 0100",
            "estimatedValue": -1,
        },
    )
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


def test_lead_progresses_to_converted(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    lead = _create_lead(test_client)

    assert test_client.post(f"/leads/{lead['id']}/qualify").json()["status"] == "qualified"
    assert test_client.post(f"/leads/{lead['id']}/start-progress").json()["status"] == "in_progress"
    converted = test_client.post(f"/leads/{lead['id']}/convert")
    assert converted.status_code == 200
    assert converted.json()["status"] == "converted"

    event_types = [item["event_type"] for item in events.published_events if item["entity_id"] == lead["id"]]
    assert event_types == ["lead.created", "lead.qualify", "lead.start_progress", "lead.convert"]
    assert events.published_events[-1]["payload"] == {"from_status": "in_progress", "to_status": "converted"}


def test_qualify_moves_status_and_updated_at(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    lead = _create_lead(test_client)
    assert lead["status"] == "new"

    qualified = test_client.post(f"/leads/{lead['id']}/qualify")
    assert qualified.status_code == 200
    assert qualified.json()["status"] == "qualified"
    assert qualified.json()["updatedAt"] != lead["updatedAt"]
    assert qualified.json()["createdAt"] == lead["createdAt"]


def test_qualify_twice_is_rejected(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    lead = _create_lead(test_client)
    assert test_client.post(f"/leads/{lead['id']}/qualify").status_code == 200

    again = test_client.post(f"/leads/{lead['id']}/qualify")
    assert again.status_code == 400
    assert again.json()["code"] == "invalid_transition"
    assert "'new'" in again.json()["message"]


def test_convert_requires_in_progress(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    lead = _create_lead(test_client)

    response = test_client.post(f"/leads/{lead['id']}/convert")
    assert response.status_code == 400
    assert "'in_progress'" in response.json()["message"]


@pytest.mark.parametrize("steps", [[], ["qualify"], ["qualify", "start-progress"]])
def test_close_from_open_statuses(client: tuple[TestClient, Callable], steps: list[str]) -> None:
    test_client, _ = client
    lead = _create_lead(test_client)
    for step in steps:
        assert test_client.post(f"/leads/{lead['id']}/{step}").status_code == 200

    closed = test_client.post(f"/leads/{lead['id']}/close")
    assert closed.status_code == 200
    assert closed.json()["status"] == "closed"


@pytest.mark.parametrize(
    ("steps", "status"),
    [
        (["qualify", "start-progress", "convert"], "converted"),
        (["close"], "closed"),
    ],
)
def test_terminal_leads_cannot_be_closed_or_edited(
    client: tuple[TestClient, Callable], steps: list[str], status: str
) -> None:
    test_client, _ = client
    lead = _create_lead(test_client)
    for step in steps:
        assert test_client.post(f"/leads/{lead['id']}/{step}").status_code == 200

    close = test_client.post(f"/leads/{lead['id']}/close")
    assert close.status_code == 400
    assert close.json()["code"] == "invalid_transition"
    assert close.json()["details"]["current_status"] == status

    edit = test_client.patch(f"/leads/{lead['id']}", json={"notes": "late note"})
    assert edit.status_code == 400
    assert edit.json()["message"] == f"{status} leads cannot be edited"
    assert test_client.get(f"/leads/{lead['id']}").json()["status"] == status


def test_update_open_lead(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    lead = _create_lead(test_client)
    test_client.post(f"/leads/{lead['id']}/qualify")

    updated = test_client.put(f"/leads/{lead['id']}", json={"priority": "urgent", "notes": "call back friday"})
    assert updated.status_code == 200
    assert updated.json()["priority"] == "urgent"
    assert updated.json()["status"] == "qualified"
    assert updated.json()["companyName"] == "Northwind"


def test_list_leads_filters(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    first = _create_lead(test_client, "LEAD-010")
    _create_lead(test_client, "LEAD-011")
    test_client.post(f"/leads/{first['id']}/qualify")

    qualified = test_client.get("/leads", params={"status": "qualified"})
    assert [item["leadNumber"] for item in qualified.json()] == ["LEAD-010"]
    assert test_client.get("/leads", params={"assignedTo": str(uuid.uuid4())}).json() == []
    assert test_client.get("/leads", params={"status": "bogus"}).status_code == 400


def test_leads_are_invisible_to_other_tenants(client: tuple[TestClient, Callable]) -> None:
    test_client, set_actor = client
    lead = _create_lead(test_client)

    set_actor("auditor-b")
    assert test_client.get(f"/leads/{lead['id']}").status_code == 404
    assert test_client.get("/leads").json() == []
    assert test_client.patch(f"/leads/{lead['id']}", json={"notes": "hijack"}).status_code == 404
    assert test_client.post(f"/leads/{lead['id']}/qualify").status_code == 404

    set_actor("auditor-a")
    assert test_client.get(f"/leads/{lead['id']}").json()["status"] == "new"


def test_lead_can_reference_audit_of_same_tenant_only(client: tuple[TestClient, Callable]) -> None:
    test_client, set_actor = client
    audit = test_client.post(
        "/audits",
        json={
            "auditNumber": "AUD-900",
            "customerName": "Northwind",
            "siteLocation": "Depot",
            "auditorName": "Dana Field",
            "auditDate": "2026-10-02T10:00:00Z",
        },
    )
    assert audit.status_code == 201

    linked = _create_lead(test_client, auditId=audit.json()["id"])
    assert linked["auditId"] == audit.json()["id"]

    set_actor("auditor-b")
    response = test_client.post(
        "/leads",
        json={
            "leadNumber": "LEAD-B",
            "companyName": "Northwind",
            "contactPerson": "Sam Ortiz",
            "email": "sam@northwind.test",
            "phone": "+1 555 0100",
            "auditId": audit.json()["id"],
        },
    )
    assert response.status_code == 400
    assert response.json()["details"]["field"] == "audit_id"


def test_client_role_cannot_create_or_transition_leads(client: tuple[TestClient, Callable]) -> None:
    test_client, set_actor = client
    lead = _create_lead(test_client)

    set_actor("client-a")
    assert test_client.get(f"/leads/{lead['id']}").status_code == 200
    assert test_client.post(f"/leads/{lead['id']}/qualify").status_code == 403
    denied = test_client.post(
        "/leads",
        json={
            "leadNumber": "LEAD-C",
            "companyName": "Northwind",
            "contactPerson": "Sam Ortiz",
            "email": "sam@northwind.test",
            "phone": "+1 555 0100",
        },
    )
    assert denied.status_code == 403
    assert denied.json()["code"] == "forbidden"
