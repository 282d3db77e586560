"""
Dependency injection for the spreadsheet bounded context.

Builds the evaluation service from settings and exposes it to the
routes through FastAPI dependencies. This is the composition root for
the spreadsheet context.
"""

import logging

from fastapi import Request
from sqlalchemy import create_engine

from gridsync.application.spreadsheet.services import SpreadsheetServices
from gridsync.domain.spreadsheet.ports import SpreadsheetServicesPort, SpreadsheetStore
from gridsync.infrastructure.spreadsheet.memory_store import InMemorySpreadsheetStore
from gridsync.infrastructure.spreadsheet.sql_store import SqlSpreadsheetStore

logger = logging.getLogger(__name__)


def build_store(database_url: str | None) -> SpreadsheetStore:
    """Return a SQL store for a database URL, or an in-memory store."""
    if not database_url:
        logger.info("No database configured; spreadsheets are kept in memory")
        return InMemorySpreadsheetStore()
    engine = create_engine(database_url, pool_pre_ping=True)
    return SqlSpreadsheetStore(engine=engine)


def build_spreadsheet_services(database_url: str | None) -> SpreadsheetServices:
    """Build the evaluation service with its store."""
    return SpreadsheetServices(store=build_store(database_url))


def get_spreadsheet_services(request: Request) -> SpreadsheetServicesPort:
    """Return the evaluation service attached to the running application."""
    return request.app.state.ss_services
