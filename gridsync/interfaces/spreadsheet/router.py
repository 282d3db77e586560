"""
FastAPI router for the spreadsheet bounded context.

One thin handler per grid operation: each extracts its parameters,
calls exactly one evaluation-service operation and wraps the result in
an envelope. A failed result is raised like any other error and turned
into an error envelope by ``enveloped``.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse

from gridsync.domain.spreadsheet.errors import ErrorCode, SpreadsheetError
from gridsync.domain.spreadsheet.ports import SpreadsheetServicesPort
from gridsync.interfaces.spreadsheet.dependencies import get_spreadsheet_services
from gridsync.interfaces.spreadsheet.envelopes import (
    enveloped,
    self_result,
    success_response,
)
from gridsync.interfaces.spreadsheet.schemas import ErrorEnvelope, SuccessEnvelope

router = APIRouter(tags=["spreadsheets"])

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorEnvelope},
    404: {"model": ErrorEnvelope},
    500: {"model": ErrorEnvelope},
}

NO_PARAMS_MESSAGE = 'Missing query parameter. Please provide either "expr" or "srcCellId".'
BOTH_PARAMS_MESSAGE = (
    'Invalid query parameters. Please provide only one of "expr" or "srcCellId".'
)


# ── Individual cells ─────────────────────────────────────────────────


@router.put(
    "/{ss_name}",
    response_model=SuccessEnvelope,
    responses=ERROR_RESPONSES,
    summary="Load a spreadsheet",
    description="Replace the whole spreadsheet with a list of [cellId, expr] pairs.",
)
@enveloped
def load_spreadsheet(
    request: Request,
    ss_name: str,
    body: Any = Body(None),
    services: SpreadsheetServicesPort = Depends(get_spreadsheet_services),
) -> JSONResponse:
    """Load or replace a full spreadsheet from the request body."""
    result = services.load(ss_name, body)
    return success_response(self_result(request, result.unwrap()))


@router.get(
    "/{ss_name}/{cell_id}",
    response_model=SuccessEnvelope,
    responses=ERROR_RESPONSES,
    summary="Query a cell",
    description="Return the formula and computed value of one cell.",
)
@enveloped
def query_cell(
    request: Request,
    ss_name: str,
    cell_id: str,
    services: SpreadsheetServicesPort = Depends(get_spreadsheet_services),
) -> JSONResponse:
    """Query a single cell."""
    result = services.query(ss_name, cell_id)
    return success_response(self_result(request, result.unwrap()))


@router.patch(
    "/{ss_name}/{cell_id}",
    response_model=SuccessEnvelope,
    responses=ERROR_RESPONSES,
    summary="Update a cell",
    description=(
        "Set a cell formula (?expr=...) or copy another cell into it "
        "(?srcCellId=...). Exactly one of the two must be given."
    ),
)
@enveloped
def update_cell(
    request: Request,
    ss_name: str,
    cell_id: str,
    expr: str | None = None,
    src_cell_id: str | None = Query(None, alias="srcCellId"),
    services: SpreadsheetServicesPort = Depends(get_spreadsheet_services),
) -> JSONResponse:
    """Evaluate a new formula or copy from another cell."""
    if not expr and not src_cell_id:
        raise SpreadsheetError.of(ErrorCode.BAD_REQ_PATCH_NO_PARAMS, NO_PARAMS_MESSAGE)
    if expr and src_cell_id:
        raise SpreadsheetError.of(
            ErrorCode.BAD_REQ_PATCH_BOTH_PARAMS, BOTH_PARAMS_MESSAGE
        )
    if expr:
        result = services.evaluate(ss_name, cell_id, expr)
    else:
        result = services.copy(ss_name, cell_id, src_cell_id)
    return success_response(self_result(request, result.unwrap()))


@router.delete(
    "/{ss_name}/{cell_id}",
    response_model=SuccessEnvelope,
    responses=ERROR_RESPONSES,
    summary="Remove a cell",
    description="Delete a cell formula and return the recomputed dependents.",
)
@enveloped
def remove_cell(
    request: Request,
    ss_name: str,
    cell_id: str,
    services: SpreadsheetServicesPort = Depends(get_spreadsheet_services),
) -> JSONResponse:
    """Remove a single cell."""
    result = services.remove(ss_name, cell_id)
    return success_response(self_result(request, result.unwrap()))


# ── Complete spreadsheets ────────────────────────────────────────────


@router.get(
    "/{ss_name}",
    response_model=SuccessEnvelope,
    responses=ERROR_RESPONSES,
    summary="Dump a spreadsheet",
    description="Return every cell as [cellId, expr, value] (or [cellId, expr]).",
)
@enveloped
def dump_spreadsheet(
    request: Request,
    ss_name: str,
    with_values: bool = Query(True, alias="withValues"),
    services: SpreadsheetServicesPort = Depends(get_spreadsheet_services),
) -> JSONResponse:
    """Dump the entire spreadsheet."""
    result = services.dump(ss_name, with_values)
    return success_response(self_result(request, result.unwrap()))


@router.delete(
    "/{ss_name}",
    response_model=SuccessEnvelope,
    responses=ERROR_RESPONSES,
    summary="Clear a spreadsheet",
    description="Delete every cell of the spreadsheet.",
)
@enveloped
def clear_spreadsheet(
    request: Request,
    ss_name: str,
    services: SpreadsheetServicesPort = Depends(get_spreadsheet_services),
) -> JSONResponse:
    """Clear the entire spreadsheet."""
    result = services.clear(ss_name)
    return success_response(self_result(request, result.unwrap()))
