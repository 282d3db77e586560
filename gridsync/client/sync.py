"""
Cell synchronization state machine.

Keeps a spreadsheet view's grid consistent with server-computed values
through the focus / edit / commit / copy / paste lifecycle:

    focus  : IDLE | COPY_SOURCE -> FOCUSED   (show the raw expression)
    blur   : FOCUSED -> COMMITTING -> IDLE    (evaluate, or remove if empty)
    copy   : IDLE -> COPY_SOURCE              (remember the source id)
    paste  : copy the recorded source into a cell, then re-query it
    clear  : wipe every cell once the server confirms
    load   : render the server's full dump

The grid is only touched after a round trip succeeds. The one rule that
keeps redraws from fighting the user: a server update is never applied
to the cell that is focused when the response is processed.
"""

import logging
from typing import Any, Mapping

from gridsync.client.grid import (
    COPY_SOURCE_CLASS,
    CellElement,
    CellState,
    ErrorDisplay,
    Grid,
)
from gridsync.client.ws import SpreadsheetWs
from gridsync.domain.spreadsheet.entities import Result
from gridsync.domain.spreadsheet.errors import ErrorCode
from gridsync.domain.spreadsheet.formula import format_number

logger = logging.getLogger(__name__)


class CellSync:
    """Synchronization context for one spreadsheet view.

    Holds the only cross-cell bookkeeping the client needs: the id of the
    focused cell and the id of the recorded copy source. Everything else
    lives on the cell elements; the server stays the source of truth.
    """

    def __init__(
        self,
        ws: SpreadsheetWs,
        ss_name: str,
        grid: Grid | None = None,
        errors: ErrorDisplay | None = None,
    ) -> None:
        self.ws = ws
        self.ss_name = ss_name
        self.grid = grid if grid is not None else Grid()
        self.errors = errors if errors is not None else ErrorDisplay()
        self.focused_cell_id: str | None = None
        self.copy_source_id: str | None = None

    @classmethod
    async def make(
        cls, ws: SpreadsheetWs, ss_name: str, grid: Grid | None = None
    ) -> "CellSync":
        """Create the context for a view and load the spreadsheet into it."""
        sync = cls(ws, ss_name, grid)
        await sync.load()
        return sync

    def close(self) -> None:
        """Tear the view down: forget focus and copy source."""
        self._release_copy_source()
        self.focused_cell_id = None

    # ── Transitions ──────────────────────────────────────────────────

    def focus(self, cell_id: str) -> None:
        """Start editing a cell: show its raw expression."""
        cell = self.grid[cell_id]
        cell.text = cell.expr or ""
        cell.state = CellState.FOCUSED
        self.errors.clear()
        self.focused_cell_id = cell_id
        logger.debug("Focused %s", cell_id)

    async def blur(self, cell_id: str) -> None:
        """Commit the edited text of a focused cell.

        Non-empty text is evaluated, empty text removes the cell. The cell
        shows its last committed value until the server answers.
        """
        cell = self.grid[cell_id]
        if cell.state is not CellState.FOCUSED:
            return
        text = cell.text.strip()
        cell.state = CellState.COMMITTING
        cell.text = cell.value or ""
        if self.focused_cell_id == cell_id:
            self.focused_cell_id = None

        try:
            if text:
                result = await self.ws.evaluate(self.ss_name, cell_id, text)
                if result.is_ok:
                    cell.dataset["expr"] = text
                    self._apply_updates(result.val)
            else:
                result = await self.ws.remove(self.ss_name, cell_id)
                if result.is_ok:
                    cell.dataset.pop("expr", None)
                    cell.dataset.pop("value", None)
                    if self.focused_cell_id != cell_id:
                        cell.text = ""
                    self._apply_updates(result.val)
            if not result.is_ok:
                self._report("commit", cell_id, result)
        finally:
            if cell.state is CellState.COMMITTING:
                cell.state = self._resting_state(cell)

    def copy(self, cell_id: str) -> None:
        """Record a cell as the copy source and mark it."""
        if self.copy_source_id is not None and self.copy_source_id != cell_id:
            self._release_copy_source()
        cell = self.grid[cell_id]
        self.copy_source_id = cell_id
        cell.classes.add(COPY_SOURCE_CLASS)
        if cell.state is CellState.IDLE:
            cell.state = CellState.COPY_SOURCE
        logger.debug("Copy source %s", cell_id)

    async def paste(self, cell_id: str) -> None:
        """Copy the recorded source into a cell.

        No-op when nothing was copied. The copy source is forgotten
        whether the paste succeeds or fails, unless another cell was
        copied while the paste was in flight.
        """
        src_cell_id = self.copy_source_id
        if src_cell_id is None:
            return
        result = await self.ws.copy(self.ss_name, cell_id, src_cell_id)
        query = await self.ws.query(self.ss_name, cell_id) if result.is_ok else None

        if self.copy_source_id == src_cell_id:
            self._release_copy_source()
        if not result.is_ok:
            self._report("paste", cell_id, result)
            return
        dest = self.grid.get(cell_id)
        if dest is not None and query is not None:
            if query.is_ok:
                dest.dataset["expr"] = query.val["expr"]
                dest.text = query.val["expr"]
            elif _is_not_found(query):
                dest.reset()
            else:
                self._report("re-query", cell_id, query)
        self._apply_updates(result.val)

    async def clear(self) -> None:
        """Clear the spreadsheet; wipe the grid once the server confirms."""
        result = await self.ws.clear(self.ss_name)
        if not result.is_ok:
            self._report("clear", self.ss_name, result)
            return
        self._release_copy_source()
        for cell in self.grid:
            cell.reset()

    async def load(self) -> None:
        """Render the server's full dump, skipping the focused cell."""
        self.errors.clear()
        result = await self.ws.dump_with_values(self.ss_name)
        if not result.is_ok:
            self._report("load", self.ss_name, result)
            return
        for cell_id, expr, value in result.val:
            if cell_id == self.focused_cell_id:
                continue
            cell = self.grid.get(cell_id)
            if cell is None:
                continue
            text = format_number(value)
            cell.dataset["expr"] = expr
            cell.dataset["value"] = text
            cell.text = text

    # ── Reconciliation ───────────────────────────────────────────────

    def _apply_updates(self, updates: Mapping[str, Any] | None) -> None:
        for cell_id, value in (updates or {}).items():
            if cell_id == self.focused_cell_id:
                continue
            cell = self.grid.get(cell_id)
            if cell is None:
                continue
            text = format_number(value)
            cell.dataset["value"] = text
            cell.text = text

    def _release_copy_source(self) -> None:
        if self.copy_source_id is None:
            return
        source = self.grid.get(self.copy_source_id)
        self.copy_source_id = None
        if source is not None:
            source.classes.discard(COPY_SOURCE_CLASS)
            if source.state is CellState.COPY_SOURCE:
                source.state = CellState.IDLE

    def _resting_state(self, cell: CellElement) -> CellState:
        if cell.id == self.copy_source_id:
            return CellState.COPY_SOURCE
        return CellState.IDLE

    def _report(self, action: str, target: str, result: Result) -> None:
        logger.warning(
            "%s of %s failed: %s", action, target, [e.message for e in result.errors]
        )
        self.errors.display(result.errors)


def _is_not_found(result: Result) -> bool:
    return any(e.code == ErrorCode.NOT_FOUND.value for e in result.errors)
