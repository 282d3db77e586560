"""
Use case: the formula evaluation service.

Input: spreadsheet name plus operation arguments.
Output: Result carrying the operation payload or domain errors.
Side effects: every mutation is written through the SpreadsheetStore.
Failure cases: BAD_REQ (bad cell id, bad formula, circular reference,
malformed load body), NOT_FOUND (query of an empty cell), DB (store).
"""

import logging
import threading
from typing import Any, Callable

from gridsync.domain.spreadsheet.cell_ref import canonical_cell_id
from gridsync.domain.spreadsheet.entities import Result, err_result, ok_result
from gridsync.domain.spreadsheet.errors import ErrorCode, SpreadsheetError
from gridsync.domain.spreadsheet.ports import SpreadsheetServicesPort, SpreadsheetStore
from gridsync.domain.spreadsheet.spreadsheet import Spreadsheet

logger = logging.getLogger(__name__)


class SpreadsheetServices(SpreadsheetServicesPort):
    """Orchestrates the spreadsheet engine and its store.

    Spreadsheets are rebuilt from the store the first time a name is
    used and kept in memory afterwards. Operations are serialized by a
    single lock because sync request handlers run in a thread pool.
    """

    def __init__(self, store: SpreadsheetStore) -> None:
        self._store = store
        self._sheets: dict[str, Spreadsheet] = {}
        self._lock = threading.RLock()

    def load(self, ss_name: str, body: Any) -> Result:
        def op() -> None:
            if not isinstance(body, list):
                raise SpreadsheetError.of(
                    ErrorCode.BAD_REQ,
                    "request body must be a list of [cellId, expr] pairs",
                )
            sheet = Spreadsheet(ss_name)
            sheet.load(body)
            self._persist(
                ss_name,
                lambda: self._store.replace(
                    ss_name, [(c, e) for c, e in sheet.dump()]
                ),
            )
            self._sheets[ss_name] = sheet
            logger.info("Loaded %d cell(s) into %s", len(sheet), ss_name)

        return self._run("load", ss_name, op)

    def query(self, ss_name: str, cell_id: str) -> Result:
        return self._run("query", ss_name, lambda: self._sheet(ss_name).query(cell_id))

    def evaluate(self, ss_name: str, cell_id: str, expr: str) -> Result:
        def op() -> dict:
            sheet = self._sheet(ss_name)
            updates = sheet.evaluate(cell_id, expr)
            target = canonical_cell_id(cell_id)
            self._persist(
                ss_name,
                lambda: self._store.write(ss_name, target, sheet.formula(target)),
            )
            logger.info(
                "Evaluated %s!%s; %d cell(s) updated", ss_name, target, len(updates)
            )
            return updates

        return self._run("evaluate", ss_name, op)

    def copy(self, ss_name: str, dest_cell_id: str, src_cell_id: str) -> Result:
        def op() -> dict:
            sheet = self._sheet(ss_name)
            updates = sheet.copy(dest_cell_id, src_cell_id)
            dest = canonical_cell_id(dest_cell_id)
            expr = sheet.formula(dest)
            if expr is None:
                self._persist(ss_name, lambda: self._store.delete(ss_name, dest))
            else:
                self._persist(ss_name, lambda: self._store.write(ss_name, dest, expr))
            logger.info(
                "Copied %s!%s to %s; %d cell(s) updated",
                ss_name,
                src_cell_id,
                dest,
                len(updates),
            )
            return updates

        return self._run("copy", ss_name, op)

    def remove(self, ss_name: str, cell_id: str) -> Result:
        def op() -> dict:
            sheet = self._sheet(ss_name)
            updates = sheet.remove(cell_id)
            target = canonical_cell_id(cell_id)
            self._persist(ss_name, lambda: self._store.delete(ss_name, target))
            logger.info(
                "Removed %s!%s; %d dependent(s) updated", ss_name, target, len(updates)
            )
            return updates

        return self._run("remove", ss_name, op)

    def dump(self, ss_name: str, with_values: bool = False) -> Result:
        return self._run(
            "dump", ss_name, lambda: self._sheet(ss_name).dump(with_values=with_values)
        )

    def clear(self, ss_name: str) -> Result:
        def op() -> None:
            self._persist(ss_name, lambda: self._store.clear(ss_name))
            self._sheet(ss_name).clear()
            logger.info("Cleared spreadsheet %s", ss_name)

        return self._run("clear", ss_name, op)

    def _sheet(self, ss_name: str) -> Spreadsheet:
        sheet = self._sheets.get(ss_name)
        if sheet is None:
            sheet = Spreadsheet(ss_name)
            sheet.load(self._store.read(ss_name))
            self._sheets[ss_name] = sheet
            logger.debug("Restored %d cell(s) of %s from store", len(sheet), ss_name)
        return sheet

    def _persist(self, ss_name: str, action: Callable[[], None]) -> None:
        """Run a store write; on failure drop the cached sheet so it is reread."""
        try:
            action()
        except SpreadsheetError:
            self._sheets.pop(ss_name, None)
            raise

    def _run(self, op_name: str, ss_name: str, op: Callable[[], Any]) -> Result:
        with self._lock:
            try:
                return ok_result(op())
            except SpreadsheetError as exc:
                logger.warning("%s on %s failed: %s", op_name, ss_name, exc)
                return err_result(exc.errors)
