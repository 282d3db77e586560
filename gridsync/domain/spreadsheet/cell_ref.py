"""
Cell references.

A cell id is a lowercase column letter followed by a 1-based row number
(``a1``, ``j10``). Inside formulas a ``$`` before the column and/or the
row marks that part absolute, so it is left alone when a formula is
copied to another cell.
"""

import re
from dataclasses import dataclass

from gridsync.domain.spreadsheet.errors import ErrorCode, SpreadsheetError

MAX_COLS = 26
MAX_ROWS = 99

CELL_REF_PATTERN = re.compile(r"(\$?)([a-zA-Z])(\$?)(\d+)")
_FULL_REF = re.compile(rf"^{CELL_REF_PATTERN.pattern}$")


@dataclass(frozen=True)
class CellRef:
    """A possibly partly-absolute reference to one cell."""

    col: int
    row: int
    col_abs: bool = False
    row_abs: bool = False

    @classmethod
    def parse(cls, text: str) -> "CellRef":
        """Parse ``a1``, ``$a1``, ``a$1`` or ``$a$1``.

        Raises:
            SpreadsheetError: BAD_REQ if the text is not a cell reference
                inside the grid.
        """
        match = _FULL_REF.match(text.strip())
        if not match:
            raise SpreadsheetError.of(ErrorCode.BAD_REQ, f"bad cell id '{text}'")
        col_abs, col, row_abs, row = match.groups()
        return cls._checked(
            ord(col.lower()) - ord("a"), int(row) - 1, bool(col_abs), bool(row_abs), text
        )

    @classmethod
    def _checked(
        cls, col: int, row: int, col_abs: bool, row_abs: bool, text: str
    ) -> "CellRef":
        if not (0 <= col < MAX_COLS and 0 <= row < MAX_ROWS):
            raise SpreadsheetError.of(
                ErrorCode.BAD_REQ, f"cell reference '{text}' is outside the spreadsheet"
            )
        return cls(col, row, col_abs, row_abs)

    @property
    def cell_id(self) -> str:
        return f"{chr(ord('a') + self.col)}{self.row + 1}"

    def shifted(self, d_col: int, d_row: int) -> "CellRef":
        """Return this reference moved by an offset, keeping absolute parts."""
        col = self.col if self.col_abs else self.col + d_col
        row = self.row if self.row_abs else self.row + d_row
        text = f"{chr(ord('a') + col) if 0 <= col < MAX_COLS else '?'}{row + 1}"
        return self._checked(col, row, self.col_abs, self.row_abs, text)

    def render(self) -> str:
        col = chr(ord("a") + self.col)
        return (
            f"{'$' if self.col_abs else ''}{col}"
            f"{'$' if self.row_abs else ''}{self.row + 1}"
        )


def canonical_cell_id(text: str) -> str:
    """Normalize a cell id to lowercase without absolute markers."""
    return CellRef.parse(text.replace("$", "")).cell_id


def offset(src_id: str, dest_id: str) -> tuple[int, int]:
    """Column and row distance from ``src_id`` to ``dest_id``."""
    src = CellRef.parse(src_id)
    dest = CellRef.parse(dest_id)
    return dest.col - src.col, dest.row - src.row
