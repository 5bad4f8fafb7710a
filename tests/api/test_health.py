from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from ead_service.api import health


def test_health_without_backing_services(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "checks": {"redis": "not_configured", "database": "in_memory"},
    }


def test_ready(client: TestClient) -> None:
    assert client.get("/ready").status_code == 200


def test_metrics_endpoint_exposes_domain_metrics(client: TestClient) -> None:
    client.get("/api/verify/NOPE0000")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "text/plain" in resp.headers["content-type"]
    assert "certificate_verifications_total" in resp.text
    assert "http_requests_total" in resp.text


def test_ready_is_503_when_database_is_down(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _down() -> str:
        return "down"

    monkeypatch.setattr(health, "_check_database", _down)
    assert client.get("/ready").status_code == 503
    body = client.get("/health").json()
    assert body["status"] == "degraded"
    assert body["checks"]["database"] == "down"
