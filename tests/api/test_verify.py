from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from ead_service.models.certificate import Certificate
from ead_service.services.templates import VERIFY_NOT_FOUND, render
from tests.conftest import T0, add_account, add_course


@pytest.fixture
def code(store) -> str:
    holder = add_account(store, full_name="Ana <b>Souza</b>")
    course, _ = add_course(store, title="Python & Data")
    cert = Certificate.new(
        account_id=holder.id, course_id=course.id, validation_code="K7M2QX9P", now=T0
    )
    asyncio.run(store.certificates.add(cert))
    return cert.validation_code


def test_json_verification(client: TestClient, code: str) -> None:
    resp = client.get(f"/api/verify/{code.lower()}")
    assert resp.status_code == 200
    assert resp.json() == {
        "holder_name": "Ana <b>Souza</b>",
        "course_title": "Python & Data",
        "issued_at": "2026-03-01T12:00:00Z",
        "validation_code": "K7M2QX9P",
    }


def test_html_verification_escapes_fields(client: TestClient, code: str) -> None:
    resp = client.get(f"/verify/{code}")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "Ana &lt;b&gt;Souza&lt;/b&gt;" in resp.text
    assert "Python &amp; Data" in resp.text
    assert "01/03/2026" in resp.text
    assert "<b>Souza</b>" not in resp.text


@pytest.mark.parametrize("submitted", ["", "NOPE0000", "%20", "%3Cscript%3Ealert(1)", "x" * 64])
def test_html_not_found_page_is_uniform_and_never_echoes(client: TestClient, submitted: str) -> None:
    resp = client.get(f"/verify/{submitted}")
    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith("text/html")
    assert resp.text == render(VERIFY_NOT_FOUND)
    assert "<script>" not in resp.text


@pytest.mark.parametrize("submitted", ["", "NOPE0000", "%20", "abc"])
def test_json_not_found_is_uniform(client: TestClient, submitted: str) -> None:
    resp = client.get(f"/api/verify/{submitted}")
    assert resp.status_code == 404
    assert resp.json() == {"error": "not_found", "detail": "certificate not found"}


def test_verification_needs_no_credentials(client: TestClient, code: str) -> None:
    resp = client.get(f"/api/verify/{code}", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 200


def test_verification_is_rate_limited(client: TestClient) -> None:
    statuses = [client.get("/api/verify/NOPE0000").status_code for _ in range(40)]
    assert statuses.count(429) > 0
    assert statuses[0] == 404
