"""
Adapter: In-memory spreadsheet store.

Implements SpreadsheetStore port without persistence. Used when no
database URL is configured and in tests.
"""

from gridsync.domain.spreadsheet.ports import SpreadsheetStore


class InMemorySpreadsheetStore(SpreadsheetStore):
    """Keeps formulas in a dict keyed by spreadsheet name."""

    def __init__(self) -> None:
        self._sheets: dict[str, dict[str, str]] = {}

    def read(self, ss_name: str) -> list[tuple[str, str]]:
        return list(self._sheets.get(ss_name, {}).items())

    def write(self, ss_name: str, cell_id: str, expr: str) -> None:
        self._sheets.setdefault(ss_name, {})[cell_id] = expr

    def delete(self, ss_name: str, cell_id: str) -> None:
        self._sheets.get(ss_name, {}).pop(cell_id, None)

    def replace(self, ss_name: str, pairs: list[tuple[str, str]]) -> None:
        self._sheets[ss_name] = dict(pairs)

    def clear(self, ss_name: str) -> None:
        self._sheets.pop(ss_name, None)
