from __future__ import annotations

import pytest


@pytest.mark.integration
def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.integration
def test_healthz_endpoint(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["metadata_backend"] in {"local", "remote"}
    assert isinstance(body["blob_configured"], bool)


@pytest.mark.integration
def test_metrics_endpoint(client):
    client.get("/healthz")

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert "doctrack_documents_deleted_total" in response.text
