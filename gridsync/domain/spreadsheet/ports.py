"""
Port interfaces (ABCs) for the spreadsheet bounded context.

Ports define the contracts the rest of the system requires.
Infrastructure adapters and the application service implement them.
The REST layer only ever sees SpreadsheetServicesPort.
"""

from abc import ABC, abstractmethod
from typing import Any

from gridsync.domain.spreadsheet.entities import Result


class SpreadsheetServicesPort(ABC):
    """Port for the formula evaluation service.

    Every operation returns a Result: on success its ``val`` carries the
    operation payload, on failure its ``errors`` carry the domain errors.
    Domain failures are never raised.
    """

    @abstractmethod
    def load(self, ss_name: str, body: Any) -> Result:
        """Replace a spreadsheet with a list of ``[cellId, expr]`` pairs."""
        raise NotImplementedError

    @abstractmethod
    def query(self, ss_name: str, cell_id: str) -> Result:
        """Return ``{expr, value}`` for one cell."""
        raise NotImplementedError

    @abstractmethod
    def evaluate(self, ss_name: str, cell_id: str, expr: str) -> Result:
        """Set a cell's formula; return the affected-cell-id -> value map."""
        raise NotImplementedError

    @abstractmethod
    def copy(self, ss_name: str, dest_cell_id: str, src_cell_id: str) -> Result:
        """Copy a formula with relative references adjusted; return updates."""
        raise NotImplementedError

    @abstractmethod
    def remove(self, ss_name: str, cell_id: str) -> Result:
        """Delete a cell's formula; return updates of its dependents."""
        raise NotImplementedError

    @abstractmethod
    def dump(self, ss_name: str, with_values: bool = False) -> Result:
        """Return all cells as ``[cellId, expr(, value)]`` lists."""
        raise NotImplementedError

    @abstractmethod
    def clear(self, ss_name: str) -> Result:
        """Delete every cell of a spreadsheet."""
        raise NotImplementedError


class SpreadsheetStore(ABC):
    """Port for persisting cell formulas per spreadsheet name."""

    @abstractmethod
    def read(self, ss_name: str) -> list[tuple[str, str]]:
        """Return all stored ``(cell_id, expr)`` pairs of a spreadsheet."""
        raise NotImplementedError

    @abstractmethod
    def write(self, ss_name: str, cell_id: str, expr: str) -> None:
        """Insert or replace one cell formula."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, ss_name: str, cell_id: str) -> None:
        """Delete one cell formula if present."""
        raise NotImplementedError

    @abstractmethod
    def replace(self, ss_name: str, pairs: list[tuple[str, str]]) -> None:
        """Atomically replace all formulas of a spreadsheet."""
        raise NotImplementedError

    @abstractmethod
    def clear(self, ss_name: str) -> None:
        """Delete all formulas of a spreadsheet."""
        raise NotImplementedError
