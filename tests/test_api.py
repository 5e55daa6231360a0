"""
Tests for the HTTP introspection endpoints and error responses.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from cursor_sync.main import create_app


@pytest.fixture
def app(sync_server):
    return create_app(sync_server)


@pytest.fixture
def http_client(app):
    return TestClient(app)


class TestHealthEndpoint:
    """Test suite for liveness."""

    def test_liveness(self, http_client):
        response = http_client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestStatsEndpoint:
    """Test suite for /stats."""

    def test_stats_with_no_connections(self, http_client):
        response = http_client.get("/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["connectedUsers"] == 0
        assert data["totalObjects"] == 3
        assert data["users"] == []

    async def test_stats_reflect_connected_users(self, sync_server, fake_sio, app):
        await fake_sio.trigger("connect", "A", {})

        data = TestClient(app).get("/stats").json()

        assert data["connectedUsers"] == 1
        assert data["users"][0]["connectionId"] == "A"
        assert set(data["users"][0]) == {"connectionId", "displayName", "x", "y"}


class TestResetEndpoint:
    """Test suite for POST /reset."""

    def test_reset_clears_ownership(self, sync_server, http_client):
        sync_server.context.registry.add("A")
        sync_server.context.arbiter.pickup("obj-1", "A")

        response = http_client.post("/reset")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Objects reset"}
        assert sync_server.context.arbiter.owner_of("obj-1") is None

    def test_reset_pushes_object_snapshot(self, sync_server, fake_sio, http_client):
        sync_server.context.registry.add("A")

        http_client.post("/reset")

        init = fake_sio.received("A", "init")
        assert len(init) == 1
        assert set(init[0]) == {"objects"}

    def test_reset_requires_post(self, http_client):
        response = http_client.get("/reset")

        assert response.status_code == 405
        assert response.json()["error"]["error_code"] == "HTTP_ERROR"


class TestErrorResponses:
    """Test suite for the registered exception handlers."""

    def test_unknown_route(self, http_client):
        response = http_client.get("/nope")

        assert response.status_code == 404
        assert response.json()["error"]["status_code"] == 404

    def test_unexpected_failure_returns_internal_error(self, sync_server, app):
        client = TestClient(app, raise_server_exceptions=False)

        with patch.object(sync_server, "get_stats", side_effect=RuntimeError("registry unavailable")):
            response = client.get("/stats")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["error_code"] == "INTERNAL_ERROR"
        assert error["message"] == "An internal error occurred"
