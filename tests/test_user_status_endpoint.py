"""Tests for user status changes and their audit trail."""

import pytest
from fastapi.testclient import TestClient

from sisiago.api.app import create_app
from sisiago.containers import AppContainer
from sisiago.domain.audit import AuditOperation
from sisiago.domain.users import Actor, RequestMetadata, UserRecord
from sisiago.services.audit import AuditLogger
from sisiago.services.users import SelfModificationError, UserService
from tests.conftest import FailingAuditRepository, make_token


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def test_status_change_is_audited(
    client: TestClient, audit_repository, user_repository, admin_headers
) -> None:
    response = client.patch(
        "/users/u1/status",
        json={"is_active": False, "role": "user"},
        headers={
            **admin_headers,
            "User-Agent": "pdv-terminal/1.0",
            "X-Forwarded-For": "203.0.113.7, 10.0.0.1",
        },
    )

    assert response.status_code == 200
    assert response.json()["user"]["is_active"] is False
    assert user_repository.users["u1"].role == "user"
    (record,) = audit_repository.records
    assert record.table_name == "users"
    assert record.record_id == "u1"
    assert record.operation is AuditOperation.UPDATE
    assert record.old_values == {"is_active": True, "role": "manager"}
    assert record.new_values == {"is_active": False, "role": "user"}
    assert record.user_id == "admin-1"
    assert record.user_email == "admin@sisiago.test"
    assert record.ip_address == "203.0.113.7"
    assert record.user_agent == "pdv-terminal/1.0"


def test_status_change_succeeds_when_audit_store_fails(
    container: AppContainer, user_repository, admin_headers
) -> None:
    failing = FailingAuditRepository()
    container.user_service = UserService(
        repository=user_repository, audit_logger=AuditLogger(failing)
    )
    client = TestClient(create_app(container))

    response = client.patch(
        "/users/u1/status", json={"is_active": False}, headers=admin_headers
    )

    assert response.status_code == 200
    assert failing.calls == 1
    assert user_repository.users["u1"].is_active is False


def test_service_update_does_not_raise_on_audit_failure(user_repository) -> None:
    service = UserService(user_repository, AuditLogger(FailingAuditRepository()))

    updated = service.update_status(
        "u1",
        actor=Actor(id="admin-1", email=None, role="admin"),
        metadata=RequestMetadata(),
        role="admin",
    )

    assert updated.role == "admin"


def test_admin_cannot_change_self(client: TestClient, admin_headers) -> None:
    response = client.patch(
        "/users/admin-1/status", json={"role": "user"}, headers=admin_headers
    )

    assert response.status_code == 400


def test_unknown_user_is_not_found(client: TestClient, admin_headers) -> None:
    response = client.patch(
        "/users/missing/status", json={"is_active": True}, headers=admin_headers
    )

    assert response.status_code == 404


@pytest.mark.parametrize("payload", [{}, {"role": "owner"}, {"is_active": "maybe"}])
def test_invalid_payload_is_rejected(
    client: TestClient, admin_headers, payload
) -> None:
    response = client.patch("/users/u1/status", json=payload, headers=admin_headers)

    assert response.status_code == 400


def test_status_change_requires_admin(client: TestClient, settings) -> None:
    token = make_token(settings, user_id="u1", role="manager")

    response = client.patch(
        "/users/u1/status",
        json={"is_active": False},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 403


def test_self_modification_raises_in_service(user_repository) -> None:
    user_repository.add(UserRecord(id="a2", name=None, email=None, role="admin"))
    service = UserService(user_repository, AuditLogger(FailingAuditRepository()))

    with pytest.raises(SelfModificationError):
        service.update_status(
            "a2",
            actor=Actor(id="a2", email=None, role="admin"),
            metadata=RequestMetadata(),
            is_active=False,
        )
