"""
Tests for the health and metrics endpoints.
"""

from fastapi.testclient import TestClient


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_metrics_exposes_request_counters(client: TestClient):
    client.get("/api/v1/documents")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert "uploads_total" in response.text


def test_metrics_label_requests_by_route_template(client: TestClient, admin_headers: dict):
    client.patch(
        "/api/v1/users/ghost-user-123/role",
        json={"role": "user"},
        headers=admin_headers,
    )

    response = client.get("/metrics")

    assert 'endpoint="/api/v1/users/{external_id}/role"' in response.text
    assert "ghost-user-123" not in response.text


def test_metrics_share_one_label_for_unknown_paths(client: TestClient):
    client.get("/no/such/path/abc123")

    response = client.get("/metrics")

    assert 'endpoint="unmatched"' in response.text
    assert "abc123" not in response.text
