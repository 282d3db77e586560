"""
Browser-side spreadsheet client.

- SpreadsheetWs: async web-service client for the REST endpoints
- Grid / CellElement / ErrorDisplay: the page model the client draws into
- CellSync: the cell synchronization state machine
"""

from gridsync.client.grid import CellElement, CellState, ErrorDisplay, Grid
from gridsync.client.sync import CellSync
from gridsync.client.ws import SpreadsheetWs

__all__ = [
    "CellElement",
    "CellState",
    "CellSync",
    "ErrorDisplay",
    "Grid",
    "SpreadsheetWs",
]
