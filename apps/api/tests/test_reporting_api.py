from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from auditflow.core.auth import get_current_principal
from auditflow.core.config import get_settings
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
    session.add_all(
        [
            Tenant(id="tenant-a", name="Alpha Inspections", subdomain="alpha"),
            Tenant(id="tenant-b", name="Beta Inspections", subdomain="beta"),
        ]
    )
    session.commit()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def setup_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def client(db_session: Session) -> Generator[tuple[TestClient, Callable[[str], None]], None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    actors = {
        "admin-a": Principal(user_id="admin-a", role="admin", tenant_id="tenant-a"),
        "client-a": Principal(user_id="client-a", role="client", tenant_id="tenant-a"),
        "admin-b": Principal(user_id="admin-b", role="admin", tenant_id="tenant-b"),
    }
    current = {"actor": actors["admin-a"]}

    def override_get_current_principal() -> Principal:
        return current["actor"]

    def set_actor(user_id: str) -> None:
        current["actor"] = actors[user_id]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_principal] = override_get_current_principal
    with TestClient(app) as test_client:
        yield test_client, set_actor
    app.dependency_overrides.clear()


def _create_lead(client: TestClient, number: str, **overrides: object) -> dict:
    payload = {
        "leadNumber": number,
        "companyName": f"Company {number}",
        "contactPerson": "Sam Ortiz",
        "email": "sam@example.test",
        "phone": "+1 555 0100",
    }
    payload.update(overrides)
    response = client.post("/leads", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _create_audit(client: TestClient, number: str, **overrides: object) -> dict:
    payload = {
        "auditNumber": number,
        "customerName": "Acme Foods",
        "siteLocation": "Plant 4",
        "auditorName": "Dana Field",
        "auditDate": "2026-10-01T09:00:00Z",
    }
    payload.update(overrides)
    response = client.post("/audits", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_lead_report_for_empty_tenant(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    response = test_client.get("/reports/leads")
    assert response.status_code == 200
    assert response.json() == {
        "leadsByStatus": [],
        "leadsByIndustry": [],
        "leadsByPriority": [],
        "conversionRate": 0.0,
        "totalEstimatedValue": 0,
        "totalLeads": 0,
    }


def test_conversion_rate_and_estimated_value(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    leads = [_create_lead(test_client, f"LEAD-{index:02d}", estimatedValue=800) for index in range(10)]
    for lead in leads[:3]:
        for step in ("qualify", "start-progress", "convert"):
            assert test_client.post(f"/leads/{lead['id']}/{step}").status_code == 200

    body = test_client.get("/reports/leads").json()
    assert body["totalLeads"] == 10
    assert body["conversionRate"] == 30.0
    assert body["totalEstimatedValue"] == 8000
    assert body["leadsByStatus"] == [{"status": "new", "count": 7}, {"status": "converted", "count": 3}]
    assert body["leadsByPriority"] == [{"priority": "medium", "count": 10}]


def test_conversion_rate_rounds_to_two_decimals(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    leads = [_create_lead(test_client, f"LEAD-{index}") for index in range(3)]
    for step in ("qualify", "start-progress", "convert"):
        test_client.post(f"/leads/{leads[0]['id']}/{step}")

    body = test_client.get("/reports/leads").json()
    assert body["conversionRate"] == 33.33
    assert body["totalEstimatedValue"] == 0


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ([5000, None, 3000], 8000),
        ([None, None], 0),
        ([0, 1250], 1250),
    ],
)
def test_total_estimated_value_skips_missing_values(
    client: tuple[TestClient, Callable], values: list[int | None], expected: int
) -> None:
    test_client, _ = client
    for index, value in enumerate(values):
        _create_lead(test_client, f"LEAD-{index}", estimatedValue=value)

    body = test_client.get("/reports/leads").json()
    assert body["totalLeads"] == len(values)
    assert body["totalEstimatedValue"] == expected


def test_lead_report_groups_by_industry_name(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    industry = test_client.post("/industries", json={"name": "Manufacturing"}).json()
    _create_lead(test_client, "LEAD-1", industryId=industry["id"], priority="high")
    _create_lead(test_client, "LEAD-2", industryId=industry["id"], priority="high")
    _create_lead(test_client, "LEAD-3", priority="low")

    body = test_client.get("/reports/leads").json()
    assert body["leadsByIndustry"] == [
        {"industryName": "Manufacturing", "count": 2},
        {"industryName": "Unknown", "count": 1},
    ]
    assert body["leadsByPriority"] == [{"priority": "high", "count": 2}, {"priority": "low", "count": 1}]


def test_audit_report_buckets(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    retail = test_client.post("/industries", json={"name": "Retail"}).json()
    safety = test_client.post("/audit-types", json={"name": "Safety"}).json()
    first = _create_audit(test_client, "AUD-1", industryId=retail["id"], auditTypeId=safety["id"])
    _create_audit(test_client, "AUD-2", industryId=retail["id"])
    _create_audit(test_client, "AUD-3")
    test_client.post(f"/audits/{first['id']}/submit-for-review")

    body = test_client.get("/reports/audits").json()
    assert body["totalAudits"] == 3
    assert body["auditsByStatus"] == [{"status": "draft", "count": 2}, {"status": "review", "count": 1}]
    assert body["auditsByIndustry"] == [
        {"industryName": "Retail", "count": 2},
        {"industryName": "Unknown", "count": 1},
    ]
    assert body["auditsByType"] == [
        {"auditTypeName": "Unknown", "count": 2},
        {"auditTypeName": "Safety", "count": 1},
    ]


def test_reports_are_tenant_scoped(client: tuple[TestClient, Callable]) -> None:
    test_client, set_actor = client
    _create_audit(test_client, "AUD-1")
    _create_lead(test_client, "LEAD-1", estimatedValue=5000)

    set_actor("admin-b")
    assert test_client.get("/reports/audits").json()["totalAudits"] == 0
    leads = test_client.get("/reports/leads").json()
    assert leads["totalLeads"] == 0
    assert leads["totalEstimatedValue"] == 0
    assert test_client.get("/dashboard/stats").json()["totalLeads"] == 0
    assert test_client.get("/dashboard/activity").json() == []


def test_dashboard_stats_keep_legacy_buckets(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    audit = _create_audit(test_client, "AUD-1")
    _create_audit(test_client, "AUD-2")
    _create_lead(test_client, "LEAD-1")
    for step in ("submit-for-review", "approve", "close"):
        test_client.post(f"/audits/{audit['id']}/{step}")

    assert test_client.get("/dashboard/stats").json() == {
        "totalAudits": 2,
        "pendingAudits": 0,
        "completedAudits": 0,
        "totalLeads": 1,
    }


def test_activity_feed_is_newest_first_and_limited(client: tuple[TestClient, Callable]) -> None:
    test_client, set_actor = client
    audit = _create_audit(test_client, "AUD-1")
    test_client.post(f"/audits/{audit['id']}/submit-for-review")

    set_actor("client-a")
    feed = test_client.get("/dashboard/activity")
    assert feed.status_code == 200
    assert [(item["action"], item["entityType"]) for item in feed.json()] == [
        ("submit_for_review", "audit"),
        ("create", "audit"),
    ]
    assert feed.json()[0]["fromStatus"] == "draft"
    assert feed.json()[0]["toStatus"] == "review"
    assert feed.json()[0]["actorId"] == "admin-a"

    limited = test_client.get("/dashboard/activity", params={"limit": 1})
    assert len(limited.json()) == 1
    assert test_client.get("/dashboard/activity", params={"limit": 0}).status_code == 400


def test_settings_overview(client: tuple[TestClient, Callable]) -> None:
    test_client, _ = client
    created = test_client.post(
        "/users",
        json={"username": "owner", "fullName": "Olive Owner", "email": "owner@alpha.test", "password": "s3cret-pass"},
    )
    assert created.status_code == 201
    _create_audit(test_client, "AUD-1")

    body = test_client.get("/settings/overview").json()
    assert body["organization"]["name"] == "Alpha Inspections"
    assert body["organization"]["subdomain"] == "alpha"
    assert body["primaryUser"]["username"] == "owner"
    assert "passwordHash" not in body["primaryUser"]
    assert body["totals"] == {"users": 1, "audits": 1, "leads": 0}
