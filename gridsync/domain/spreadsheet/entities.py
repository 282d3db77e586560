"""
Domain value types for the spreadsheet bounded context.

Result is the success/failure contract every evaluation-service
operation returns, on the server and through the web-service client.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from gridsync.domain.spreadsheet.errors import ErrorCode, ErrorDetail, SpreadsheetError

T = TypeVar("T")

# Affected-cell-id -> recomputed value
Updates = dict[str, float]


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a spreadsheet operation.

    Attributes:
        is_ok: Whether the operation succeeded.
        val: Operation-specific payload on success.
        errors: Ordered domain errors on failure.
    """

    is_ok: bool
    val: T | None = None
    errors: list[ErrorDetail] = field(default_factory=list)

    def unwrap(self) -> T:
        """Return the success value or raise the carried errors."""
        if not self.is_ok:
            raise SpreadsheetError(self.errors)
        return self.val  # type: ignore[return-value]


def ok_result(val: Any = None) -> Result:
    return Result(is_ok=True, val=val)


def err_result(
    errors: "list[ErrorDetail] | ErrorDetail | str",
    code: ErrorCode = ErrorCode.BAD_REQ,
) -> Result:
    """Build a failed result.

    A bare message is tagged with ``code``.
    """
    if isinstance(errors, str):
        errors = [ErrorDetail(code.value, errors)]
    elif isinstance(errors, ErrorDetail):
        errors = [errors]
    return Result(is_ok=False, errors=list(errors))
