"""
Adapter: SQL spreadsheet store.

Implements SpreadsheetStore port.
Reads/writes the cells table (one formula per spreadsheet name and cell id).
"""

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from gridsync.domain.spreadsheet.errors import ErrorCode, SpreadsheetError
from gridsync.domain.spreadsheet.ports import SpreadsheetStore

logger = logging.getLogger(__name__)

CREATE_CELLS_TABLE = """
    CREATE TABLE IF NOT EXISTS cells (
        ss_name VARCHAR(255) NOT NULL,
        cell_id VARCHAR(8) NOT NULL,
        expr TEXT NOT NULL,
        PRIMARY KEY (ss_name, cell_id)
    )
"""


class SqlSpreadsheetStore(SpreadsheetStore):
    """SQLAlchemy adapter for the cells table.

    Database failures are reported as DB-coded SpreadsheetErrors so the
    evaluation service can hand them back as failed results.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._guarded("create schema", self._create_schema)

    def _create_schema(self) -> None:
        with self._engine.begin() as conn:
            conn.execute(text(CREATE_CELLS_TABLE))

    def read(self, ss_name: str) -> list[tuple[str, str]]:
        """Return all stored formulas of a spreadsheet."""
        query = text("SELECT cell_id, expr FROM cells WHERE ss_name = :ss_name")

        def op() -> list[tuple[str, str]]:
            with self._engine.connect() as conn:
                rows = conn.execute(query, {"ss_name": ss_name}).fetchall()
            return [(row.cell_id, row.expr) for row in rows]

        return self._guarded("read", op)

    def write(self, ss_name: str, cell_id: str, expr: str) -> None:
        """Upsert one cell formula."""
        query = text(
            """
            INSERT INTO cells (ss_name, cell_id, expr)
            VALUES (:ss_name, :cell_id, :expr)
            ON CONFLICT (ss_name, cell_id)
            DO UPDATE SET expr = EXCLUDED.expr
            """
        )

        def op() -> None:
            with self._engine.begin() as conn:
                conn.execute(
                    query, {"ss_name": ss_name, "cell_id": cell_id, "expr": expr}
                )
            logger.debug("Saved cell: ss=%s cell=%s", ss_name, cell_id)

        self._guarded("write", op)

    def delete(self, ss_name: str, cell_id: str) -> None:
        query = text("DELETE FROM cells WHERE ss_name = :ss_name AND cell_id = :cell_id")

        def op() -> None:
            with self._engine.begin() as conn:
                conn.execute(query, {"ss_name": ss_name, "cell_id": cell_id})

        self._guarded("delete", op)

    def replace(self, ss_name: str, pairs: list[tuple[str, str]]) -> None:
        """Replace all formulas of a spreadsheet in one transaction."""

        def op() -> None:
            with self._engine.begin() as conn:
                conn.execute(
                    text("DELETE FROM cells WHERE ss_name = :ss_name"),
                    {"ss_name": ss_name},
                )
                if pairs:
                    conn.execute(
                        text(
                            "INSERT INTO cells (ss_name, cell_id, expr) "
                            "VALUES (:ss_name, :cell_id, :expr)"
                        ),
                        [
                            {"ss_name": ss_name, "cell_id": c, "expr": e}
                            for c, e in pairs
                        ],
                    )
            logger.debug("Replaced %s with %d cell(s)", ss_name, len(pairs))

        self._guarded("replace", op)

    def clear(self, ss_name: str) -> None:
        query = text("DELETE FROM cells WHERE ss_name = :ss_name")

        def op() -> None:
            with self._engine.begin() as conn:
                conn.execute(query, {"ss_name": ss_name})

        self._guarded("clear", op)

    def _guarded(self, action: str, op):
        try:
            return op()
        except SQLAlchemyError as exc:
            logger.error("Cell store %s failed: %s", action, exc)
            raise SpreadsheetError.of(
                ErrorCode.DB, f"database error during {action}"
            ) from exc
