"""
Tests for health and version endpoints
"""
from fastapi import status


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ok"
    assert response.json()["service"] == "myisu-portal-backend"


def test_version(client):
    response = client.get("/api/v1/version")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["service"] == "myisu-portal-backend"
    assert data["env"] == "local"
    assert data["version"]
