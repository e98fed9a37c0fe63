"""Tests for health endpoint, error shapes and admission control."""

import pytest
from fastapi.testclient import TestClient

from schoolshelf.config.app_config import RateLimitConfig
from schoolshelf.web.api import create_app


class TestHealthEndpoint:
    """Tests for GET /health and GET /api/health."""

    @pytest.mark.parametrize("path", ["/health", "/api/health"])
    def test_health_reports_database(self, client, path):
        """Health is public and probes the database."""
        response = client.get(path)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["database"] == "connected"
        assert data["version"] == "0.1.0"
        assert "T" in data["timestamp"]


class TestErrorShapes:
    """Every error is a flat {"error": message} object."""

    def test_unknown_route(self, client):
        response = client.get("/api/nowhere")
        assert response.status_code == 404
        assert response.json() == {"error": "Route GET /api/nowhere not found"}

    def test_invalid_body(self, client, admin):
        response = client.post("/api/books", content="not json", headers={
            **admin.headers, "Content-Type": "application/json"
        })
        assert response.status_code == 400
        assert "error" in response.json()

    def test_invalid_query_parameter(self, client, admin):
        response = client.get("/api/users?limit=lots", headers=admin.headers)
        assert response.status_code == 400
        assert response.json()["error"].startswith("limit:")

    def test_unhandled_error_includes_stack_outside_production(self, app_config):
        app = create_app(app_config)

        def boom():
            raise RuntimeError("kaboom")

        app.add_api_route("/boom", boom)
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/boom")

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "kaboom"
        assert "RuntimeError" in data["stack"]

    def test_unhandled_error_hides_stack_in_production(self, app_config):
        app_config.server.environment = "production"
        app = create_app(app_config)

        def boom():
            raise RuntimeError("kaboom")

        app.add_api_route("/boom", boom)
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": "kaboom"}


class TestRateLimit:
    """Fixed-window admission control."""

    def test_requests_over_limit_are_rejected(self, app_config):
        app_config.rate_limit = RateLimitConfig(enabled=True, window_seconds=900, max_requests=3)
        with TestClient(create_app(app_config)) as client:
            statuses = [client.get("/health").status_code for _ in range(4)]
            last = client.get("/health")

        assert statuses == [200, 200, 200, 429]
        assert last.json() == {"error": "Too many requests, please try again later."}
        assert last.headers["RateLimit-Remaining"] == "0"
