from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from auditflow.core.auth import decode_principal, get_current_principal
from auditflow.core.config import get_settings
from auditflow.core.database import Base, get_db
from auditflow.iam.models import Tenant
from auditflow.main import app
from auditflow.platform.security.context import Principal
from auditflow.platform.security.errors import ForbiddenError, UnauthenticatedError
from auditflow.platform.security.gate import CAPABILITIES, check_access, require_capability


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
def setup_env() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def issue_token() -> Callable[..., str]:
    def _issue(user_id: str = "user-1", role: str = "auditor", tenant_id: str = "tenant-a", **claims: object) -> str:
        settings = get_settings()
        payload = {"userId": user_id, "role": role, "tenantId": tenant_id, **claims}
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    return _issue


def _audit_payload() -> dict:
    return {
        "auditNumber": "AUD-001",
        "customerName": "Acme Foods",
        "siteLocation": "Plant 4",
        "auditorName": "Dana Field",
        "auditDate": "2026-10-01T09:00:00Z",
    }


def test_every_capability_names_known_roles() -> None:
    known = {"master_admin", "admin", "client", "auditor"}
    for roles in CAPABILITIES.values():
        assert roles <= known


def test_check_access_without_principal_is_unauthenticated() -> None:
    with pytest.raises(UnauthenticatedError):
        check_access(None, "audit", "read")


def test_check_access_enforces_role_set() -> None:
    client_principal = Principal(user_id="c1", role="client", tenant_id="tenant-a")
    assert check_access(client_principal, "audit", "submit_for_review") is client_principal
    with pytest.raises(ForbiddenError) as exc_info:
        check_access(client_principal, "audit", "approve")
    assert exc_info.value.details == {"entity": "audit", "operation": "approve", "role": "client"}


def test_unknown_capability_fails_at_construction() -> None:
    with pytest.raises(KeyError):
        require_capability("audit", "teleport")


def test_decode_principal_requires_all_claims(issue_token: Callable[..., str]) -> None:
    principal = decode_principal(issue_token(role="admin"))
    assert principal == Principal(user_id="user-1", role="admin", tenant_id="tenant-a")

    assert decode_principal(issue_token(role="superuser")) is None
    assert decode_principal(issue_token(tenant_id="")) is None
    assert decode_principal("not-a-jwt") is None

    forged = jwt.encode({"userId": "u", "role": "admin", "tenantId": "t"}, "other-secret", algorithm="HS256")
    assert decode_principal(forged) is None


def test_missing_token_is_rejected(client: TestClient) -> None:
    response = client.get("/audits")
    assert response.status_code == 401
    body = response.json()
    assert body["code"] == "unauthenticated"
    assert body["correlation_id"] == response.headers["x-correlation-id"]


def test_invalid_token_is_rejected(client: TestClient) -> None:
    response = client.get("/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


def test_bearer_token_resolves_principal(client: TestClient, issue_token: Callable[..., str]) -> None:
    response = client.get("/me", headers={"Authorization": f"Bearer {issue_token(user_id='u-42', role='client')}"})
    assert response.status_code == 200
    assert response.json() == {"userId": "u-42", "role": "client", "tenantId": "tenant-a"}


def test_cookie_token_resolves_principal(client: TestClient, issue_token: Callable[..., str]) -> None:
    client.cookies.set("accessToken", issue_token(role="admin"))
    response = client.get("/me")
    assert response.status_code == 200
    assert response.json()["role"] == "admin"


def test_role_is_checked_before_workflow_guard(client: TestClient, issue_token: Callable[..., str]) -> None:
    auditor = {"Authorization": f"Bearer {issue_token(role='auditor')}"}
    created = client.post("/audits", json=_audit_payload(), headers=auditor)
    assert created.status_code == 201

    client_headers = {"Authorization": f"Bearer {issue_token(user_id='c-1', role='client')}"}
    # draft audit: approve would also fail its guard, but the role check comes first
    response = client.post(f"/audits/{created.json()['id']}/approve", headers=client_headers)
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"

    submitted = client.post(f"/audits/{created.json()['id']}/submit-for-review", headers=client_headers)
    assert submitted.status_code == 200
    assert submitted.json()["status"] == "review"


def test_auditor_cannot_manage_master_data_or_users(client: TestClient, issue_token: Callable[..., str]) -> None:
    auditor = {"Authorization": f"Bearer {issue_token(role='auditor')}"}
    assert client.get("/industries", headers=auditor).status_code == 200
    assert client.post("/industries", json={"name": "Retail"}, headers=auditor).status_code == 403
    assert client.get("/users", headers=auditor).status_code == 403


def test_token_tenant_scopes_requests(client: TestClient, issue_token: Callable[..., str]) -> None:
    tenant_a = {"Authorization": f"Bearer {issue_token(role='admin')}"}
    tenant_b = {"Authorization": f"Bearer {issue_token(role='admin', tenant_id='tenant-b')}"}
    created = client.post("/audits", json=_audit_payload(), headers=tenant_a)
    assert created.status_code == 201

    assert client.get(f"/audits/{created.json()['id']}", headers=tenant_b).status_code == 404
    assert client.get("/audits", headers=tenant_b).json() == []
    assert client.get(f"/audits/{created.json()['id']}", headers=tenant_a).status_code == 200
