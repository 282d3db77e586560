"""
Basic application tests.

Validates that the default FastAPI app starts correctly, the health
endpoint responds as expected and the spreadsheet routes are mounted
under the configured base path.
"""

from fastapi.testclient import TestClient

from gridsync.core.config import settings
from gridsync.main import app

client = TestClient(app)


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_returns_200(self) -> None:
        """Health endpoint must return HTTP 200 with status ok."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_response_body(self) -> None:
        """Health endpoint must return status and version fields."""
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["version"] == settings.version


class TestDefaultApp:
    """Tests for the module-level application."""

    def test_spreadsheet_routes_under_base(self) -> None:
        response = client.get(f"{settings.api_base}/basic-test-sheet")
        assert response.status_code == 200
        assert response.json()["result"] == []

    def test_docs_hidden_outside_debug(self) -> None:
        if settings.debug:
            return
        assert client.get("/docs").status_code == 404
