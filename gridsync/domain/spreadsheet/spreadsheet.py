"""
Dependency-tracking spreadsheet engine.

Holds the formulas of one named spreadsheet, their computed values and
the reference graph between cells. Every mutation is staged first and
committed only once all affected values have been recomputed, so a
failing formula never leaves the sheet half-updated.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable

from gridsync.domain.spreadsheet.cell_ref import canonical_cell_id, offset
from gridsync.domain.spreadsheet.entities import Updates
from gridsync.domain.spreadsheet.errors import ErrorCode, SpreadsheetError
from gridsync.domain.spreadsheet.formula import (
    Node,
    normalize_number,
    parse_formula,
    referenced_cells,
    shift_formula,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellEntry:
    """A cell holding a formula."""

    expr: str
    node: Node
    refs: frozenset[str]


class Spreadsheet:
    """In-memory formula cells of one spreadsheet."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._cells: dict[str, CellEntry] = {}
        self._values: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._cells)

    def formula(self, cell_id: str) -> str | None:
        entry = self._cells.get(canonical_cell_id(cell_id))
        return entry.expr if entry else None

    def query(self, cell_id: str) -> dict[str, Any]:
        """Return ``{expr, value}`` for a cell.

        Raises:
            SpreadsheetError: NOT_FOUND if the cell holds no formula.
        """
        cell_id = canonical_cell_id(cell_id)
        entry = self._cells.get(cell_id)
        if entry is None:
            raise SpreadsheetError.of(
                ErrorCode.NOT_FOUND, f"cell {cell_id} not found in spreadsheet {self.name}"
            )
        return {"expr": entry.expr, "value": normalize_number(self._values[cell_id])}

    def evaluate(self, cell_id: str, expr: str) -> Updates:
        """Set a cell's formula and return every recomputed value.

        The returned mapping always contains the cell itself.
        """
        cell_id = canonical_cell_id(cell_id)
        expr = expr.strip()
        node = parse_formula(expr)
        refs = frozenset(referenced_cells(node))
        cells = dict(self._cells)
        cells[cell_id] = CellEntry(expr, node, refs)
        self._check_acyclic(cells, cell_id)
        values = self._recompute(cells, cell_id)
        self._commit(cells, values)
        return _normalized(values)

    def remove(self, cell_id: str) -> Updates:
        """Delete a cell's formula and return the recomputed dependents."""
        cell_id = canonical_cell_id(cell_id)
        if cell_id not in self._cells:
            return {}
        cells = dict(self._cells)
        del cells[cell_id]
        values = self._recompute(cells, cell_id)
        self._values.pop(cell_id, None)
        self._commit(cells, values)
        return _normalized(values)

    def copy(self, dest_cell_id: str, src_cell_id: str) -> Updates:
        """Copy a formula, shifting its relative references to the destination.

        Copying an empty cell removes the destination.
        """
        src = self._cells.get(canonical_cell_id(src_cell_id))
        if src is None:
            return self.remove(dest_cell_id)
        d_col, d_row = offset(src_cell_id.replace("$", ""), dest_cell_id.replace("$", ""))
        return self.evaluate(dest_cell_id, shift_formula(src.expr, d_col, d_row))

    def dump(self, with_values: bool = False) -> list[list[Any]]:
        """Return ``[cellId, expr]`` (or ``[cellId, expr, value]``) entries.

        Every cell follows the cells it references, so the result can be
        fed back to ``load``.
        """
        order = self._topological(self._cells, self._cells.keys())
        if with_values:
            return [
                [c, self._cells[c].expr, normalize_number(self._values[c])] for c in order
            ]
        return [[c, self._cells[c].expr] for c in order]

    def load(self, pairs: Iterable[Any]) -> None:
        """Replace all cells with ``[cellId, expr]`` pairs.

        Raises:
            SpreadsheetError: BAD_REQ for a malformed entry or formula;
                the current cells are left untouched.
        """
        fresh = Spreadsheet(self.name)
        for pair in pairs:
            if (
                not isinstance(pair, (list, tuple))
                or len(pair) != 2
                or not all(isinstance(p, str) for p in pair)
            ):
                raise SpreadsheetError.of(
                    ErrorCode.BAD_REQ, f"expected [cellId, expr] pair, got {pair!r}"
                )
            fresh.evaluate(pair[0], pair[1])
        self._cells = fresh._cells
        self._values = fresh._values

    def clear(self) -> None:
        self._cells = {}
        self._values = {}

    def _commit(self, cells: dict[str, CellEntry], values: dict[str, float]) -> None:
        self._cells = cells
        self._values.update(values)

    @staticmethod
    def _check_acyclic(cells: dict[str, CellEntry], cell_id: str) -> None:
        stack = list(cells[cell_id].refs)
        seen: set[str] = set()
        while stack:
            current = stack.pop()
            if current == cell_id:
                raise SpreadsheetError.of(
                    ErrorCode.BAD_REQ, f"circular reference involving cell {cell_id}"
                )
            if current in seen or current not in cells:
                continue
            seen.add(current)
            stack.extend(cells[current].refs)

    def _recompute(
        self, cells: dict[str, CellEntry], changed: str
    ) -> dict[str, float]:
        """Evaluate ``changed`` and everything depending on it, without committing."""
        dependents: dict[str, set[str]] = {}
        for cell_id, entry in cells.items():
            for ref in entry.refs:
                dependents.setdefault(ref, set()).add(cell_id)

        affected: set[str] = set()
        stack = [changed]
        while stack:
            current = stack.pop()
            for dependent in dependents.get(current, ()):
                if dependent not in affected:
                    affected.add(dependent)
                    stack.append(dependent)
        if changed in cells:
            affected.add(changed)

        values: dict[str, float] = {}

        def lookup(ref: str) -> float:
            if ref in values:
                return values[ref]
            if ref not in cells:
                return 0
            return self._values.get(ref, 0)

        for cell_id in self._topological(cells, affected):
            value = cells[cell_id].node.evaluate(lookup)
            if not math.isfinite(value):
                raise SpreadsheetError.of(
                    ErrorCode.BAD_REQ, f"value of cell {cell_id} is out of range"
                )
            values[cell_id] = value
        logger.debug("Recomputed %d cell(s) in %s after %s", len(values), self.name, changed)
        return values

    @staticmethod
    def _topological(
        cells: dict[str, CellEntry], targets: Iterable[str]
    ) -> list[str]:
        targets = set(targets)
        order: list[str] = []
        visited: set[str] = set()

        def visit(cell_id: str) -> None:
            visited.add(cell_id)
            for ref in sorted(cells[cell_id].refs):
                if ref in targets and ref not in visited:
                    visit(ref)
            order.append(cell_id)

        for cell_id in sorted(targets):
            if cell_id not in visited:
                visit(cell_id)
        return order


def _normalized(values: dict[str, float]) -> Updates:
    return {cell_id: normalize_number(v) for cell_id, v in values.items()}
