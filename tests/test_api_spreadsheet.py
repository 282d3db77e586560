"""
Tests for the spreadsheet API endpoints.

Tests FastAPI routes against a real in-memory evaluation service, and
against a mocked service where a specific failure is needed.
Validates envelopes, self links and error mapping.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from gridsync.application.spreadsheet.services import SpreadsheetServices
from gridsync.domain.spreadsheet.entities import err_result, ok_result
from gridsync.domain.spreadsheet.errors import ErrorCode, ErrorDetail, SpreadsheetError
from gridsync.domain.spreadsheet.ports import SpreadsheetServicesPort, SpreadsheetStore
from gridsync.infrastructure.spreadsheet.memory_store import InMemorySpreadsheetStore
from gridsync.interfaces.spreadsheet.dependencies import get_spreadsheet_services
from gridsync.main import create_app


@pytest.fixture
def client() -> TestClient:
    app = create_app(
        services=SpreadsheetServices(InMemorySpreadsheetStore()), base="/api"
    )
    return TestClient(app)


@pytest.fixture
def mock_services() -> MagicMock:
    return MagicMock(spec=SpreadsheetServicesPort)


@pytest.fixture
def mock_client(mock_services) -> TestClient:
    return TestClient(create_app(services=mock_services, base="/api"))


def _error(response) -> dict:
    body = response.json()
    assert body["isOk"] is False
    assert body["status"] == response.status_code
    return body["errors"][0]


class TestCellEndpoints:
    """Tests for /api/{ss}/{cellId}."""

    def test_evaluate(self, client) -> None:
        client.patch("/api/ss/a1", params={"expr": "5"})
        response = client.patch("/api/ss/b2", params={"expr": "=a1+1"})

        assert response.status_code == 200
        body = response.json()
        assert body["isOk"] is True
        assert body["status"] == 200
        assert body["result"] == {"b2": 6}
        assert body["links"]["self"]["method"] == "PATCH"
        assert body["links"]["self"]["href"].startswith("/api/ss/b2?expr=")

    def test_evaluate_reports_dependents(self, client) -> None:
        client.patch("/api/ss/a1", params={"expr": "5"})
        client.patch("/api/ss/b1", params={"expr": "a1 * 2"})

        response = client.patch("/api/ss/a1", params={"expr": "1"})

        assert response.json()["result"] == {"a1": 1, "b1": 2}

    def test_copy(self, client) -> None:
        client.patch("/api/ss/a1", params={"expr": "5"})
        client.patch("/api/ss/b1", params={"expr": "a1 + 1"})

        response = client.patch("/api/ss/b2", params={"srcCellId": "b1"})

        assert response.status_code == 200
        assert response.json()["result"] == {"b2": 1}
        assert response.json()["links"]["self"] == {
            "href": "/api/ss/b2?srcCellId=b1",
            "method": "PATCH",
        }
        assert client.get("/api/ss/b2").json()["result"] == {
            "expr": "a2 + 1",
            "value": 1,
        }

    def test_query(self, client) -> None:
        client.patch("/api/ss/a1", params={"expr": "1 / 4"})

        response = client.get("/api/ss/a1")

        assert response.status_code == 200
        assert response.json()["result"] == {"expr": "1 / 4", "value": 0.25}
        assert response.json()["links"]["self"] == {"href": "/api/ss/a1", "method": "GET"}

    def test_query_empty_cell(self, client) -> None:
        response = client.get("/api/ss/a1")

        assert response.status_code == 404
        assert _error(response) == {
            "code": "NOT_FOUND",
            "message": "cell a1 not found in spreadsheet ss",
        }

    def test_remove(self, client) -> None:
        client.patch("/api/ss/a1", params={"expr": "5"})
        client.patch("/api/ss/b1", params={"expr": "a1 + 1"})

        response = client.delete("/api/ss/a1")

        assert response.status_code == 200
        assert response.json()["result"] == {"b1": 1}
        assert client.get("/api/ss/a1").status_code == 404

    def test_bad_formula(self, client) -> None:
        response = client.patch("/api/ss/a1", params={"expr": "1 +"})

        assert response.status_code == 400
        assert _error(response)["code"] == "BAD_REQ"

    def test_bad_cell_id(self, client) -> None:
        response = client.get("/api/ss/zz1")

        assert response.status_code == 400
        assert _error(response)["code"] == "BAD_REQ"


    def test_out_of_range_value_is_not_stored(self, client) -> None:
        client.patch("/api/ss/b1", params={"expr": "3"})

        response = client.patch("/api/ss/a1", params={"expr": "9" * 400})

        assert response.status_code == 400
        assert _error(response)["code"] == "BAD_REQ"
        assert client.get("/api/ss/a1").status_code == 404
        dump = client.get("/api/ss")
        assert dump.status_code == 200
        assert dump.json()["result"] == [["b1", "3", 3]]


class TestPatchParameters:
    """Exactly one of expr and srcCellId must be given."""

    def test_no_params(self, mock_client, mock_services) -> None:
        response = mock_client.patch("/api/ss/a1")

        assert response.status_code == 400
        assert _error(response) == {
            "code": "BAD_REQ_PATCH_NO_PARAMS",
            "message": 'Missing query parameter. Please provide either "expr" or "srcCellId".',
        }
        mock_services.evaluate.assert_not_called()
        mock_services.copy.assert_not_called()

    def test_empty_expr_counts_as_missing(self, mock_client, mock_services) -> None:
        response = mock_client.patch("/api/ss/a1", params={"expr": ""})

        assert _error(response)["code"] == "BAD_REQ_PATCH_NO_PARAMS"
        mock_services.evaluate.assert_not_called()

    def test_both_params(self, mock_client, mock_services) -> None:
        response = mock_client.patch(
            "/api/ss/a1", params={"expr": "1", "srcCellId": "b1"}
        )

        assert response.status_code == 400
        assert _error(response)["code"] == "BAD_REQ_PATCH_BOTH_PARAMS"
        mock_services.evaluate.assert_not_called()
        mock_services.copy.assert_not_called()


class TestSpreadsheetEndpoints:
    """Tests for /api/{ss}."""

    def test_load_then_dump(self, client) -> None:
        response = client.put("/api/ss", json=[["b1", "a1 + 1"], ["a1", "2"]])

        assert response.status_code == 200
        assert response.json()["result"] is None
        assert response.json()["links"]["self"] == {"href": "/api/ss", "method": "PUT"}

        dump = client.get("/api/ss")
        assert dump.json()["result"] == [["a1", "2", 2], ["b1", "a1 + 1", 3]]

    def test_dump_without_values(self, client) -> None:
        client.put("/api/ss", json=[["a1", "2"]])

        response = client.get("/api/ss", params={"withValues": "false"})

        assert response.json()["result"] == [["a1", "2"]]
        assert response.json()["links"]["self"]["href"] == "/api/ss?withValues=false"

    def test_load_rejects_malformed_pairs(self, client) -> None:
        client.put("/api/ss", json=[["a1", "2"]])

        response = client.put("/api/ss", json=[["a1"]])

        assert response.status_code == 400
        assert _error(response)["code"] == "BAD_REQ"
        assert client.get("/api/ss").json()["result"] == [["a1", "2", 2]]

    def test_load_rejects_object_body(self, client) -> None:
        response = client.put("/api/ss", json={"a1": "2"})

        assert response.status_code == 400
        assert _error(response)["code"] == "BAD_REQ"

    def test_load_rejects_invalid_json(self, client) -> None:
        response = client.put(
            "/api/ss",
            content=b"[[",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert _error(response)["code"] == "BAD_REQ"

    def test_clear(self, client) -> None:
        client.patch("/api/ss/a1", params={"expr": "1"})

        response = client.delete("/api/ss")

        assert response.status_code == 200
        assert response.json()["result"] is None
        assert client.get("/api/ss").json()["result"] == []
        assert client.get("/api/ss/a1").status_code == 404


class TestErrorMapping:
    """Tests for failures outside the happy path."""

    def test_unsupported_method(self, client) -> None:
        response = client.post("/api/ss")

        assert response.status_code == 404
        assert _error(response) == {
            "code": "NOT_FOUND",
            "message": "POST not supported for /api/ss",
        }

    def test_unknown_path_keeps_query(self, client) -> None:
        response = client.get("/api/ss/a1/extra", params={"x": "1"})

        assert response.status_code == 404
        assert _error(response)["message"] == "GET not supported for /api/ss/a1/extra?x=1"

    def test_failed_result_errors_are_kept(self, mock_client, mock_services) -> None:
        mock_services.query.return_value = err_result(
            [ErrorDetail("SYNTAX", "odd"), ErrorDetail("NOT_FOUND", "missing")]
        )

        response = mock_client.get("/api/ss/a1")

        assert response.status_code == 404
        assert response.json()["errors"] == [
            {"code": "SYNTAX", "message": "odd"},
            {"code": "NOT_FOUND", "message": "missing"},
        ]

    def test_unrecognized_codes_map_to_400(self, mock_client, mock_services) -> None:
        mock_services.remove.return_value = err_result([ErrorDetail("SYNTAX", "odd")])

        response = mock_client.delete("/api/ss/a1")

        assert response.status_code == 400

    def test_runtime_fault_in_handler(self, mock_client, mock_services) -> None:
        mock_services.query.side_effect = RuntimeError("boom")

        response = mock_client.get("/api/ss/a1")

        assert response.status_code == 400
        assert _error(response) == {"code": "BAD_REQ", "message": "boom"}

    def test_store_failure_is_500(self) -> None:
        store = MagicMock(spec=SpreadsheetStore)
        store.read.return_value = []
        store.write.side_effect = SpreadsheetError.of(
            ErrorCode.DB, "database error during write"
        )
        client = TestClient(create_app(services=SpreadsheetServices(store), base="/api"))

        response = client.patch("/api/ss/a1", params={"expr": "1"})

        assert response.status_code == 500
        assert _error(response)["code"] == "DB"

    def test_fault_outside_handler_is_500(self, mock_services) -> None:
        app = create_app(services=mock_services, base="/api")

        def broken_services():
            raise RuntimeError("wiring failed")

        app.dependency_overrides[get_spreadsheet_services] = broken_services
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/api/ss/a1")

        assert response.status_code == 500
        assert _error(response) == {
            "code": "INTERNAL",
            "message": "Internal server error",
        }

    def test_success_passes_result_through(self, mock_client, mock_services) -> None:
        mock_services.dump.return_value = ok_result([["a1", "1"]])

        response = mock_client.get("/api/ss", params={"withValues": "false"})

        assert response.json()["result"] == [["a1", "1"]]
        mock_services.dump.assert_called_once_with("ss", False)


class TestAppWiring:
    """Tests for the routes and middleware around the spreadsheet endpoints."""

    def test_health(self, client) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": "0.1.0"}

    def test_health_is_not_under_base(self, client) -> None:
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["isOk"] is True
        assert response.json()["result"] == []

    def test_cors_header(self, client) -> None:
        response = client.get("/api/ss", headers={"Origin": "http://localhost:8080"})

        assert response.headers["access-control-allow-origin"] == "*"

    def test_cors_preflight(self, client) -> None:
        response = client.options(
            "/api/ss/a1",
            headers={
                "Origin": "http://localhost:8080",
                "Access-Control-Request-Method": "PATCH",
            },
        )

        assert response.status_code == 200
        assert "PATCH" in response.headers["access-control-allow-methods"]

    def test_custom_base_path(self) -> None:
        client = TestClient(
            create_app(
                services=SpreadsheetServices(InMemorySpreadsheetStore()), base="/sheets"
            )
        )

        assert client.get("/sheets/ss").status_code == 200
        assert client.get("/api/ss").status_code == 404
