"""Tests for the shared API key gate."""

from unittest.mock import patch

from fastapi.testclient import TestClient

from projecthub.middleware.auth import APIKeyAuthMiddleware


def _gated_client(app):
    app.add_middleware(APIKeyAuthMiddleware)

    @app.get("/health")
    async def fake_health():
        return {"status": "healthy"}

    return TestClient(app)


def test_no_key_configured_allows_all(app):
    with patch("projecthub.middleware.auth.settings") as mock_settings:
        mock_settings.projecthub_api_key = ""
        client = _gated_client(app)
        resp = client.get("/api/v1/users/me", headers={"X-User-ID": "1"})
        assert resp.status_code == 200


def test_missing_auth_header_returns_401(app):
    with patch("projecthub.middleware.auth.settings") as mock_settings:
        mock_settings.projecthub_api_key = "test-secret-key"
        client = _gated_client(app)
        resp = client.get("/api/v1/projects", headers={"X-User-ID": "1"})
        assert resp.status_code == 401
        assert "Authorization" in resp.json()["detail"]


def test_invalid_token_returns_403(app):
    with patch("projecthub.middleware.auth.settings") as mock_settings:
        mock_settings.projecthub_api_key = "correct-key"
        client = _gated_client(app)
        resp = client.get(
            "/api/v1/projects",
            headers={"Authorization": "Bearer wrong-key", "X-User-ID": "1"},
        )
        assert resp.status_code == 403


def test_valid_token_passes(app):
    with patch("projecthub.middleware.auth.settings") as mock_settings:
        mock_settings.projecthub_api_key = "my-secret"
        client = _gated_client(app)
        resp = client.get(
            "/api/v1/projects",
            headers={"Authorization": "Bearer my-secret", "X-User-ID": "1"},
        )
        assert resp.status_code == 200
        assert resp.json() == []


def test_valid_token_still_needs_user(app):
    with patch("projecthub.middleware.auth.settings") as mock_settings:
        mock_settings.projecthub_api_key = "my-secret"
        client = _gated_client(app)
        resp = client.get("/api/v1/projects", headers={"Authorization": "Bearer my-secret"})
        assert resp.status_code == 401


def test_health_exempt_from_auth(app):
    with patch("projecthub.middleware.auth.settings") as mock_settings:
        mock_settings.projecthub_api_key = "secret-key"
        client = _gated_client(app)
        resp = client.get("/health")
        assert resp.status_code == 200


def test_bearer_prefix_required(app):
    with patch("projecthub.middleware.auth.settings") as mock_settings:
        mock_settings.projecthub_api_key = "key123"
        client = _gated_client(app)
        resp = client.get("/api/v1/projects", headers={"Authorization": "key123", "X-User-ID": "1"})
        assert resp.status_code == 401
