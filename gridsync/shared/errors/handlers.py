"""
Centralized error mapping and error handlers for FastAPI.

Maps domain error codes to HTTP statuses and builds error envelopes.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorEnvelope schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gridsync.domain.spreadsheet.entities import Result
from gridsync.domain.spreadsheet.errors import ErrorCode, ErrorDetail, SpreadsheetError
from gridsync.interfaces.spreadsheet.schemas import ErrorEnvelope, ErrorItem

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_401 = 401
HTTP_404 = 404
HTTP_405 = 405
HTTP_409 = 409
HTTP_500 = 500

ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.EXISTS: HTTP_409,
    ErrorCode.NOT_FOUND: HTTP_404,
    ErrorCode.BAD_REQ: HTTP_400,
    ErrorCode.AUTH: HTTP_401,
    ErrorCode.DB: HTTP_500,
    ErrorCode.INTERNAL: HTTP_500,
    ErrorCode.BAD_REQ_PATCH_NO_PARAMS: HTTP_400,
    ErrorCode.BAD_REQ_PATCH_BOTH_PARAMS: HTTP_400,
}

# Status for an error list in which no code is recognized.
UNRECOGNIZED_STATUS = HTTP_400

INTERNAL_MESSAGE = "Internal server error"


def status_for_code(code: str | None) -> int | None:
    """Return the HTTP status for a raw error code, or None if unrecognized."""
    kind = ErrorCode.parse(code)
    if kind is None:
        return None
    return ERROR_STATUS[kind]


def get_http_status(errors: list[ErrorDetail]) -> int:
    """Pick one HTTP status for an ordered list of errors.

    The first recognized code wins, except that a server-error status
    anywhere in the list dominates. Falls back to 400 when no code is
    recognized.
    """
    status: int | None = None
    for error in errors:
        error_status = status_for_code(error.code)
        if error_status is None:
            continue
        if status is None or error_status == HTTP_500:
            status = error_status
    return status if status is not None else UNRECOGNIZED_STATUS


def map_result_errors(err: "BaseException | Result") -> ErrorEnvelope:
    """Map domain or runtime errors into an error envelope.

    A failed Result or a SpreadsheetError keeps its errors unchanged.
    Any other exception is wrapped into a single BAD_REQ error.
    """
    if isinstance(err, Result):
        errors = err.errors
    elif isinstance(err, SpreadsheetError):
        errors = err.errors
    else:
        errors = [ErrorDetail(ErrorCode.BAD_REQ.value, str(err) or type(err).__name__)]
    status = get_http_status(errors)
    if status == HTTP_500:
        logger.error("Server error: %s", [e.to_dict() for e in errors])
    return ErrorEnvelope(
        status=status,
        errors=[ErrorItem(code=e.code, message=e.message) for e in errors],
    )


def error_response(envelope: ErrorEnvelope) -> JSONResponse:
    """Write an error envelope as the HTTP response."""
    return JSONResponse(
        status_code=envelope.status, content=envelope.model_dump(by_alias=True)
    )


def _single_error(status: int, code: ErrorCode, message: str) -> JSONResponse:
    return error_response(
        ErrorEnvelope(status=status, errors=[ErrorItem(code=code.value, message=message)])
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register the generic error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(SpreadsheetError)
    async def handle_spreadsheet_error(
        _request: Request, exc: SpreadsheetError
    ) -> JSONResponse:
        """Handle domain errors raised outside endpoint bodies."""
        return error_response(map_result_errors(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle malformed request bodies and parameters."""
        messages = "; ".join(str(e.get("msg", e)) for e in exc.errors())
        logger.warning("Request validation failed: %s", messages)
        return _single_error(HTTP_400, ErrorCode.BAD_REQ, f"invalid request: {messages}")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """No route for this method and path: answer with a NOT_FOUND envelope."""
        if exc.status_code in (HTTP_404, HTTP_405):
            url = request.url.path + (f"?{request.url.query}" if request.url.query else "")
            return _single_error(
                HTTP_404, ErrorCode.NOT_FOUND, f"{request.method} not supported for {url}"
            )
        code = ErrorCode.INTERNAL if exc.status_code >= HTTP_500 else ErrorCode.BAD_REQ
        return _single_error(exc.status_code, code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _single_error(HTTP_500, ErrorCode.INTERNAL, INTERNAL_MESSAGE)
