"""Table-driven access-control tests.

Each row: method, endpoint, caller, expected status.  Callers:
  anon    : no Authorization header
  student : valid token, student account
  admin   : valid token, admin account
  ghost   : valid token, no local account (profile missing)
  bad     : malformed token
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from ead_service.models.account import Role
from tests.conftest import add_account, auth, mint_token

_RBAC_CASES = [
    ("GET", "/api/admin/courses", "anon", 401),
    ("GET", "/api/admin/courses", "bad", 401),
    ("GET", "/api/admin/courses", "ghost", 403),
    ("GET", "/api/admin/courses", "student", 403),
    ("GET", "/api/admin/courses", "admin", 200),
    ("POST", "/api/admin/courses", "anon", 401),
    ("POST", "/api/admin/courses", "student", 403),
    ("POST", "/api/admin/courses", "admin", 201),
    ("POST", "/api/admin/enrollments", "anon", 401),
    ("POST", "/api/admin/enrollments", "student", 403),
    ("PUT", f"/api/admin/enrollments/{uuid4()}/revoke", "anon", 401),
    ("PUT", f"/api/admin/enrollments/{uuid4()}/revoke", "student", 403),
    ("PUT", f"/api/admin/enrollments/{uuid4()}/revoke", "admin", 404),
    ("POST", "/api/admin/certificates", "student", 403),
    ("GET", "/api/student/courses", "anon", 401),
    ("GET", "/api/student/courses", "bad", 401),
    ("GET", "/api/student/courses", "ghost", 403),
    ("GET", "/api/student/courses", "student", 200),
    ("GET", "/api/student/courses", "admin", 200),
    ("POST", "/api/student/progress", "anon", 401),
    ("POST", "/api/student/certificates", "anon", 401),
    ("GET", "/api/verify/UNKNOWN1", "anon", 404),
    ("GET", "/api/verify/UNKNOWN1", "bad", 404),
]

_BODIES = {
    "/api/admin/courses": {"title": "RBAC course"},
    "/api/admin/enrollments": {"course_id": str(uuid4()), "email": "x@example.com"},
    "/api/admin/certificates": {"user_id": str(uuid4()), "course_id": str(uuid4())},
    "/api/student/progress": {"lesson_id": str(uuid4()), "is_completed": True},
    "/api/student/certificates": {"course_id": str(uuid4())},
}


def _headers(store, caller: str) -> dict[str, str]:
    if caller == "anon":
        return {}
    if caller == "bad":
        return auth("not-a-token")
    if caller == "ghost":
        return auth(mint_token(uuid4()))
    role = Role.ADMIN if caller == "admin" else Role.STUDENT
    account = add_account(store, email=f"{caller}@example.com", role=role)
    return auth(mint_token(account.id))


def _case_id(case: tuple) -> str:
    method, endpoint, caller, expected = case
    return f"{method} {endpoint} [{caller}] -> {expected}"


@pytest.mark.parametrize(
    "method,endpoint,caller,expected",
    _RBAC_CASES,
    ids=[_case_id(c) for c in _RBAC_CASES],
)
def test_rbac(client: TestClient, store, method, endpoint, caller, expected) -> None:
    headers = _headers(store, caller)
    body = _BODIES.get(endpoint)
    resp = client.request(method, endpoint, json=body, headers=headers)
    assert resp.status_code == expected, (
        f"{method} {endpoint} caller={caller}: expected {expected}, got {resp.status_code}"
    )
    if expected == 401:
        assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_denials_are_counted(client: TestClient, store) -> None:
    def _count(reason: str) -> float:
        return REGISTRY.get_sample_value("access_denials_total", {"reason": reason}) or 0.0

    before = {r: _count(r) for r in ("unauthenticated", "profile_missing", "forbidden")}

    client.get("/api/admin/courses")
    client.get("/api/admin/courses", headers=auth(mint_token(uuid4())))
    client.get("/api/admin/courses", headers=_headers(store, "student"))

    assert _count("unauthenticated") == before["unauthenticated"] + 1
    assert _count("profile_missing") == before["profile_missing"] + 1
    assert _count("forbidden") == before["forbidden"] + 1


def test_role_is_read_from_the_store_not_the_token(client: TestClient, store) -> None:
    """A demoted admin loses admin routes immediately, with the same token."""
    from dataclasses import replace

    admin = add_account(store, email="demoted@example.com", role=Role.ADMIN)
    token = mint_token(admin.id)
    assert client.get("/api/admin/courses", headers=auth(token)).status_code == 200

    store.accounts._by_id[admin.id] = replace(admin, role=Role.STUDENT)  # type: ignore[attr-defined]
    assert client.get("/api/admin/courses", headers=auth(token)).status_code == 403
