"""
Liveness endpoint for the spreadsheet API.

Answers with a plain HealthResponse, not an envelope, and never touches
the evaluation service or its store. It is mounted at the root rather
than under the spreadsheet base path, so ``/api/health`` stays free to
be a spreadsheet name.
"""

from fastapi import APIRouter

from gridsync.core.config import settings
from gridsync.interfaces.spreadsheet.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Reports that the spreadsheet API is up, and its version.",
)
def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=settings.version)
