"""
Domain errors for the spreadsheet bounded context.

Every failure produced by the evaluation service is described by one or
more ErrorDetail values tagged with an ErrorCode. They are mapped to
HTTP statuses at the interface layer.
No framework imports allowed.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(str, Enum):
    """Closed set of symbolic failure tags, independent of HTTP."""

    EXISTS = "EXISTS"
    NOT_FOUND = "NOT_FOUND"
    BAD_REQ = "BAD_REQ"
    AUTH = "AUTH"
    DB = "DB"
    INTERNAL = "INTERNAL"
    BAD_REQ_PATCH_NO_PARAMS = "BAD_REQ_PATCH_NO_PARAMS"
    BAD_REQ_PATCH_BOTH_PARAMS = "BAD_REQ_PATCH_BOTH_PARAMS"

    @classmethod
    def parse(cls, code: str | None) -> "ErrorCode | None":
        """Return the member for a raw code, or None if it is not recognized."""
        if code is None:
            return None
        try:
            return cls(code)
        except ValueError:
            return None


@dataclass(frozen=True)
class ErrorDetail:
    """A single domain error.

    Attributes:
        code: Raw error code. Usually an ErrorCode value, but codes coming
            from elsewhere are carried through unchanged.
        message: Human readable description.
    """

    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class SpreadsheetError(Exception):
    """Raised when a spreadsheet operation fails.

    Carries the ordered list of errors describing the failure.
    """

    def __init__(self, errors: "list[ErrorDetail] | ErrorDetail") -> None:
        if isinstance(errors, ErrorDetail):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(e.message for e in self.errors))

    @classmethod
    def of(cls, code: ErrorCode, message: str) -> "SpreadsheetError":
        return cls(ErrorDetail(code.value, message))
