from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from ead_service.api.errors import STATUS_BY_ERROR, error_body, install_error_handlers
from ead_service.core.errors import (
    AccessExpired,
    CodeGenerationFailed,
    EnrollmentNotFound,
    IncompleteProgress,
    InvalidCourse,
    InvalidDuration,
    InvalidTarget,
    LessonNotFound,
    NotFound,
    ProfileMissing,
    StoreUnavailable,
    Unauthenticated,
)


@pytest.mark.parametrize(
    "error,status",
    [
        (Unauthenticated(), 401),
        (ProfileMissing(), 403),
        (InvalidDuration(40000, 36500), 400),
        (InvalidCourse("c1"), 400),
        (InvalidTarget(), 400),
        (EnrollmentNotFound(), 404),
        (LessonNotFound(), 404),
        (IncompleteProgress(4, 5), 400),
        (AccessExpired("expired"), 403),
        (CodeGenerationFailed(), 500),
        (NotFound(), 404),
        (StoreUnavailable(), 503),
    ],
)
def test_status_mapping(error, status) -> None:
    assert STATUS_BY_ERROR[type(error)] == status


def test_error_body_merges_details() -> None:
    assert error_body(IncompleteProgress(4, 5)) == {
        "error": "incomplete_progress",
        "detail": "Progress incomplete: 4/5",
        "completed": 4,
        "total": 5,
    }


def _app_raising(exc: Exception) -> TestClient:
    app = FastAPI()
    install_error_handlers(app)

    @app.get("/boom")
    async def boom() -> None:
        raise exc

    return TestClient(app, raise_server_exceptions=False)


def test_unauthenticated_sets_bearer_challenge() -> None:
    resp = _app_raising(Unauthenticated()).get("/boom")
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_database_outage_is_503_without_internals(caplog: pytest.LogCaptureFixture) -> None:
    exc = OperationalError("SELECT secret", {}, Exception("password=hunter2"))
    resp = _app_raising(exc).get("/boom")
    assert resp.status_code == 503
    assert resp.json()["error"] == "store_unavailable"
    assert "hunter2" not in resp.text
    assert "SELECT" not in resp.text


def test_unexpected_error_is_generic_500() -> None:
    resp = _app_raising(RuntimeError("internal detail")).get("/boom")
    assert resp.status_code == 500
    assert resp.json() == {"error": "internal_error", "detail": "Internal server error"}
