"""
Application entry point.

Creates the FastAPI application and wires together:
- The evaluation service (composition root)
- Routers (health, spreadsheet endpoints under the configured base path)
- CORS for the browser grid
- Error handlers (centralized domain-to-HTTP mapping)
- Logging configuration

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gridsync.core.config import settings
from gridsync.domain.spreadsheet.ports import SpreadsheetServicesPort
from gridsync.interfaces.health import router as health_router
from gridsync.interfaces.spreadsheet.dependencies import build_spreadsheet_services
from gridsync.interfaces.spreadsheet.router import router as spreadsheet_router
from gridsync.shared.errors.handlers import register_error_handlers
from gridsync.shared.logging import configure_logging

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"]
CORS_EXPOSED_HEADERS = ["Location"]


def create_app(
    services: SpreadsheetServicesPort | None = None,
    base: str | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        services: Evaluation service to serve. Built from settings when omitted.
        base: Path prefix of the spreadsheet endpoints. Defaults to
            ``settings.api_base``.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)
    base = settings.api_base if base is None else base

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Serving spreadsheets under %s", base or "/")
        yield
        logger.info("Shutting down")

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.ss_services = (
        services
        if services is not None
        else build_spreadsheet_services(settings.database_url)
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=CORS_METHODS,
        allow_headers=["*"],
        expose_headers=CORS_EXPOSED_HEADERS,
    )

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router)
    app.include_router(spreadsheet_router, prefix=base)

    return app


app = create_app()
