from __future__ import annotations

import asyncio
from uuid import UUID, uuid4

from fastapi.testclient import TestClient

from ead_service.models.audit import AuditAction
from ead_service.services.enrollment_ledger import ENTITY_TYPE
from ead_service.services.notifications import GrantNotice
from ead_service.services.task_queue import NOTIFICATION_QUEUE, task_queue
from tests.conftest import add_account, add_course, admin_headers


def test_grant_by_new_email_provisions_and_queues_invite(client: TestClient, store) -> None:
    _admin, headers = admin_headers(store)
    course, _ = add_course(store)

    resp = client.post(
        "/api/admin/enrollments",
        json={"email": "New@Example.com", "course_id": str(course.id), "days_valid": 30},
        headers=headers,
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["newly_provisioned"] is True
    assert data["notification_queued"] is True
    assert data["enrollment"]["status"] == "active"
    assert data["enrollment"]["is_active"] is True
    assert data["enrollment"]["access_end_at"] is not None

    account = asyncio.run(store.accounts.get_by_email("new@example.com"))
    assert account is not None
    assert data["enrollment"]["account_id"] == str(account.id)

    task = asyncio.run(task_queue.dequeue(NOTIFICATION_QUEUE))
    notice = GrantNotice.from_payload(task.payload)
    assert notice.recipient == "new@example.com"
    assert notice.newly_provisioned is True
    assert notice.course_title == course.title


def test_regrant_same_email_updates_same_enrollment(client: TestClient, store) -> None:
    _admin, headers = admin_headers(store)
    course, _ = add_course(store)
    body = {"email": "new@example.com", "course_id": str(course.id)}

    first = client.post("/api/admin/enrollments", json={**body, "days_valid": 30}, headers=headers)
    second = client.post("/api/admin/enrollments", json={**body, "days_valid": 10}, headers=headers)

    assert second.json()["newly_provisioned"] is False
    assert second.json()["enrollment"]["id"] == first.json()["enrollment"]["id"]
    assert second.json()["enrollment"]["access_end_at"] < first.json()["enrollment"]["access_end_at"]


def test_grant_unknown_course_is_400(client: TestClient, store) -> None:
    _admin, headers = admin_headers(store)
    resp = client.post(
        "/api/admin/enrollments",
        json={"email": "x@example.com", "course_id": str(uuid4())},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_course"


def test_grant_with_oversized_duration_is_400(client: TestClient, store) -> None:
    _admin, headers = admin_headers(store)
    course, _ = add_course(store)
    resp = client.post(
        "/api/admin/enrollments",
        json={"email": "x@example.com", "course_id": str(course.id), "days_valid": 10_000_000},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_duration"
    assert resp.json()["max_days_valid"] == 36500


def test_grant_without_target_is_400(client: TestClient, store) -> None:
    _admin, headers = admin_headers(store)
    course, _ = add_course(store)
    resp = client.post(
        "/api/admin/enrollments", json={"course_id": str(course.id)}, headers=headers
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_target"


def test_grant_revoke_grant_via_api(client: TestClient, store) -> None:
    admin, headers = admin_headers(store)
    student = add_account(store)
    course, _ = add_course(store)
    body = {"user_id": str(student.id), "course_id": str(course.id)}

    granted = client.post("/api/admin/enrollments", json=body, headers=headers).json()
    enrollment_id = granted["enrollment"]["id"]

    revoked = client.put(f"/api/admin/enrollments/{enrollment_id}/revoke", headers=headers)
    assert revoked.status_code == 200
    assert revoked.json()["enrollment"]["status"] == "revoked"
    assert revoked.json()["enrollment"]["is_active"] is False

    again = client.put(f"/api/admin/enrollments/{enrollment_id}/revoke", headers=headers)
    assert again.status_code == 200

    regranted = client.post("/api/admin/enrollments", json=body, headers=headers).json()
    assert regranted["enrollment"]["id"] == enrollment_id
    assert regranted["enrollment"]["status"] == "active"

    entries = asyncio.run(store.audit.list_for_entity(ENTITY_TYPE, UUID(enrollment_id)))
    assert [e.action for e in entries] == [
        AuditAction.GRANT_ACCESS,
        AuditAction.REVOKE_ACCESS,
        AuditAction.GRANT_ACCESS,
    ]
    assert {e.actor_id for e in entries} == {admin.id}


def test_grant_survives_queue_outage(client: TestClient, store, monkeypatch) -> None:
    _admin, headers = admin_headers(store)
    course, _ = add_course(store)

    async def _down(queue: str, payload: dict):
        raise ConnectionError("redis down")

    monkeypatch.setattr(task_queue, "enqueue", _down)
    resp = client.post(
        "/api/admin/enrollments",
        json={"email": "x@example.com", "course_id": str(course.id)},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["notification_queued"] is False
    assert asyncio.run(store.accounts.get_by_email("x@example.com")) is not None


def test_admin_course_listing_and_creation(client: TestClient, store) -> None:
    admin, headers = admin_headers(store)

    created = client.post(
        "/api/admin/courses",
        json={"title": "Data 101", "price": "49.90"},
        headers=headers,
    )
    assert created.status_code == 201
    course_id = created.json()["id"]

    client.post(
        "/api/admin/enrollments",
        json={"email": "a@example.com", "course_id": course_id},
        headers=headers,
    )
    listing = client.get("/api/admin/courses", headers=headers).json()
    assert [(c["title"], c["enrollment_count"]) for c in listing] == [("Data 101", 1)]


def test_create_course_rejects_blank_title(client: TestClient, store) -> None:
    _admin, headers = admin_headers(store)
    resp = client.post("/api/admin/courses", json={"title": ""}, headers=headers)
    assert resp.status_code == 422
