"""
Tests for the health check endpoint.
"""

from unittest.mock import patch

from django.db import DatabaseError


class TestHealthCheck:
    """Tests for GET /health/."""

    def test_healthy(self, client, db):
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "database": "connected",
            "cache": "connected",
            "channel_layer": "connected",
        }

    def test_database_down_is_503(self, client, db):
        with patch(
            "core.views.connection.cursor", side_effect=DatabaseError("down")
        ):
            response = client.get("/health/")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"

    def test_cache_down_only_degrades(self, client, db):
        with patch("core.views.cache.set", side_effect=ConnectionError("down")):
            response = client.get("/health/")

        assert response.status_code == 200
        assert response.json()["cache"] == "disconnected"
