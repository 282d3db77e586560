"""
HATEOAS envelope builder.

Wraps successful results with a self link back to the exact resource the
response concerns, and turns any failure raised inside an endpoint into
an error envelope via the centralized error mapper.
"""

import functools
from typing import Any, Callable

from fastapi import Request
from fastapi.responses import JSONResponse

from gridsync.interfaces.spreadsheet.schemas import Links, SelfLink, SuccessEnvelope
from gridsync.shared.errors.handlers import error_response, map_result_errors

HTTP_200 = 200


def self_href(request: Request, id: str = "") -> str:
    """Return the self href for a request.

    With an ``id`` the identifier is appended to the request path;
    otherwise the path keeps its original query string.
    """
    path = request.url.path
    if id:
        return f"{path.rstrip('/')}/{id}"
    query = request.url.query
    return f"{path}?{query}" if query else path


def self_result(
    request: Request, result: Any, status: int = HTTP_200, id: str = ""
) -> SuccessEnvelope:
    """Build the success envelope for a request and its result."""
    return SuccessEnvelope(
        status=status,
        links=Links(self=SelfLink(href=self_href(request, id), method=request.method)),
        result=result,
    )


def success_response(envelope: SuccessEnvelope) -> JSONResponse:
    """Write a success envelope as the HTTP response."""
    return JSONResponse(
        status_code=envelope.status, content=envelope.model_dump(by_alias=True)
    )


def enveloped(handler: Callable[..., JSONResponse]) -> Callable[..., JSONResponse]:
    """Make an endpoint answer every failure with exactly one error envelope.

    Whatever the handler raises (a failed result, a validation error, a
    runtime fault) is mapped and written; nothing is re-raised to the
    generic handlers.
    """

    @functools.wraps(handler)
    def wrapper(*args: Any, **kwargs: Any) -> JSONResponse:
        try:
            return handler(*args, **kwargs)
        except Exception as exc:
            return error_response(map_result_errors(exc))

    return wrapper
