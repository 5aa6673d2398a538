"""Tests for the health check API endpoint."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def test_client():
    """Create a test client without lifespan (no output directory is created)."""
    from fastapi import FastAPI
    from doctransform.api.routes import router

    app = FastAPI()
    app.include_router(router, prefix="/api")

    return TestClient(app)


class TestHealthEndpoint:
    """Test the /api/health endpoint."""

    def test_health_check_returns_ok_status(self, test_client):
        """Test that health check returns status 'ok'."""
        response = test_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "doctransform"

    def test_health_check_response_structure(self, test_client):
        """Test that health check reports the generation defaults."""
        response = test_client.get("/api/health")

        config = response.json()["config"]
        assert "output_directory" in config
        assert "file_name_template" in config
        assert "max_concurrent_documents" in config

    @patch("doctransform.api.routes.settings")
    def test_health_check_reflects_settings(self, mock_settings, test_client):
        """Test health check reads the current settings."""
        mock_settings.output_directory = "/srv/out"
        mock_settings.file_name_template = "{name}"
        mock_settings.max_concurrent_documents = 3

        response = test_client.get("/api/health")

        config = response.json()["config"]
        assert config["output_directory"] == "/srv/out"
        assert config["file_name_template"] == "{name}"
        assert config["max_concurrent_documents"] == 3
