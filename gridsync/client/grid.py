"""
Grid model standing in for the browser DOM.

Each CellElement carries what a ``td.cell`` element carries in the page:
its id, displayed text, ``data-expr``/``data-value`` attributes, CSS
classes and its current display state. The grid itself has fixed
dimensions and ids that never change once created.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from gridsync.domain.spreadsheet.errors import ErrorDetail

N_ROWS = 10
N_COLS = 10

COPY_SOURCE_CLASS = "is-copy-source"


class CellState(Enum):
    """Mutually exclusive display states of a cell."""

    IDLE = "idle"  # showing the last committed value
    FOCUSED = "focused"  # showing the raw expression, editable
    COPY_SOURCE = "copy_source"  # marked, awaiting a paste elsewhere
    COMMITTING = "committing"  # awaiting the server after a blur


@dataclass
class CellElement:
    id: str
    text: str = ""
    dataset: dict[str, str] = field(default_factory=dict)
    classes: set[str] = field(default_factory=set)
    state: CellState = CellState.IDLE

    @property
    def expr(self) -> str | None:
        return self.dataset.get("expr")

    @property
    def value(self) -> str | None:
        return self.dataset.get("value")

    def reset(self) -> None:
        """Drop text and data attributes."""
        self.text = ""
        self.dataset.pop("expr", None)
        self.dataset.pop("value", None)


def cell_ids(n_rows: int = N_ROWS, n_cols: int = N_COLS) -> Iterator[str]:
    """Yield ids row by row: a1, b1, ..., j1, a2, ..."""
    for row in range(1, n_rows + 1):
        for col in range(n_cols):
            yield f"{chr(ord('a') + col)}{row}"


class Grid:
    """The fixed set of cell elements of one spreadsheet view."""

    def __init__(self, n_rows: int = N_ROWS, n_cols: int = N_COLS) -> None:
        self._cells = {cell_id: CellElement(cell_id) for cell_id in cell_ids(n_rows, n_cols)}

    def __iter__(self) -> Iterator[CellElement]:
        return iter(self._cells.values())

    def __len__(self) -> int:
        return len(self._cells)

    def get(self, cell_id: str) -> CellElement | None:
        return self._cells.get(cell_id)

    def __getitem__(self, cell_id: str) -> CellElement:
        return self._cells[cell_id]


class ErrorDisplay:
    """The on-page error area."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def display(self, errors: list[ErrorDetail]) -> None:
        self.messages = [e.message for e in errors]

    def clear(self) -> None:
        self.messages = []

    def __bool__(self) -> bool:
        return bool(self.messages)
