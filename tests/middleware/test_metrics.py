from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY


def _requests(endpoint: str, status: str) -> float:
    return (
        REGISTRY.get_sample_value(
            "http_requests_total",
            {"method": "GET", "endpoint": endpoint, "status_code": status},
        )
        or 0.0
    )


def test_requests_counted_by_route_template(client: TestClient) -> None:
    before = _requests("/api/verify/{code}", "404")
    client.get("/api/verify/AAAA2222")
    client.get("/api/verify/BBBB3333")
    assert _requests("/api/verify/{code}", "404") == before + 2
    assert _requests("/api/verify/AAAA2222", "404") == 0.0


def test_metrics_scrape_not_counted(client: TestClient) -> None:
    before = _requests("/metrics", "200")
    client.get("/metrics")
    assert _requests("/metrics", "200") == before


def test_duration_observed(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health"}
    before = REGISTRY.get_sample_value("http_request_duration_seconds_count", labels) or 0.0
    client.get("/health")
    after = REGISTRY.get_sample_value("http_request_duration_seconds_count", labels)
    assert after == before + 1
