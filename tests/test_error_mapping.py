"""
Tests for the error mapper.

Covers status derivation from domain error codes and error envelope
construction. No HTTP server involved.
"""

import logging

import pytest

from gridsync.domain.spreadsheet.entities import err_result
from gridsync.domain.spreadsheet.errors import ErrorCode, ErrorDetail, SpreadsheetError
from gridsync.shared.errors.handlers import (
    get_http_status,
    map_result_errors,
    status_for_code,
)


def _errors(*codes: str) -> list[ErrorDetail]:
    return [ErrorDetail(code, f"{code} happened") for code in codes]


class TestStatusForCode:
    """Tests for the per-code lookup."""

    @pytest.mark.parametrize(
        ("code", "status"),
        [
            ("EXISTS", 409),
            ("NOT_FOUND", 404),
            ("BAD_REQ", 400),
            ("AUTH", 401),
            ("DB", 500),
            ("INTERNAL", 500),
            ("BAD_REQ_PATCH_NO_PARAMS", 400),
            ("BAD_REQ_PATCH_BOTH_PARAMS", 400),
        ],
    )
    def test_known_codes(self, code: str, status: int) -> None:
        assert status_for_code(code) == status

    def test_every_code_has_a_status(self) -> None:
        for code in ErrorCode:
            assert status_for_code(code.value) is not None

    @pytest.mark.parametrize("code", ["SYNTAX", "not_found", "", None])
    def test_unrecognized_codes(self, code) -> None:
        """Unknown codes take the explicit unrecognized arm."""
        assert status_for_code(code) is None


class TestGetHttpStatus:
    """Tests for picking one status out of an error list."""

    def test_first_recognized_code_wins(self) -> None:
        assert get_http_status(_errors("NOT_FOUND", "EXISTS")) == 404
        assert get_http_status(_errors("EXISTS", "NOT_FOUND")) == 409

    def test_unrecognized_codes_are_skipped(self) -> None:
        assert get_http_status(_errors("WEIRD", "AUTH", "NOT_FOUND")) == 401

    @pytest.mark.parametrize(
        "codes",
        [
            ("INTERNAL",),
            ("EXISTS", "INTERNAL"),
            ("INTERNAL", "NOT_FOUND"),
            ("BAD_REQ", "WEIRD", "INTERNAL", "AUTH"),
            ("NOT_FOUND", "DB"),
        ],
    )
    def test_server_error_dominates_regardless_of_position(self, codes) -> None:
        assert get_http_status(_errors(*codes)) == 500

    def test_no_recognized_code_is_a_client_error(self) -> None:
        assert get_http_status(_errors("WEIRD", "STRANGE")) == 400

    def test_empty_list_is_a_client_error(self) -> None:
        assert get_http_status([]) == 400


class TestMapResultErrors:
    """Tests for building error envelopes."""

    def test_failed_result_keeps_its_errors(self) -> None:
        result = err_result(_errors("NOT_FOUND", "BAD_REQ"))
        envelope = map_result_errors(result)

        assert envelope.is_ok is False
        assert envelope.status == 404
        assert [(e.code, e.message) for e in envelope.errors] == [
            ("NOT_FOUND", "NOT_FOUND happened"),
            ("BAD_REQ", "BAD_REQ happened"),
        ]

    def test_spreadsheet_error_keeps_its_errors(self) -> None:
        exc = SpreadsheetError.of(ErrorCode.EXISTS, "already there")
        envelope = map_result_errors(exc)

        assert envelope.status == 409
        assert envelope.errors[0].code == "EXISTS"

    def test_runtime_fault_is_wrapped_as_bad_request(self) -> None:
        envelope = map_result_errors(ValueError("boom"))

        assert envelope.status == 400
        assert len(envelope.errors) == 1
        assert envelope.errors[0].code == "BAD_REQ"
        assert envelope.errors[0].message == "boom"

    def test_serialized_shape(self) -> None:
        body = map_result_errors(err_result(_errors("AUTH"))).model_dump(by_alias=True)
        assert body == {
            "isOk": False,
            "status": 401,
            "errors": [{"code": "AUTH", "message": "AUTH happened"}],
        }

    def test_server_errors_are_logged(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="gridsync.shared.errors.handlers"):
            map_result_errors(err_result(_errors("BAD_REQ", "DB")))
        assert "DB happened" in caplog.text

    def test_client_errors_are_not_logged(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="gridsync.shared.errors.handlers"):
            map_result_errors(err_result(_errors("NOT_FOUND")))
        assert caplog.records == []
