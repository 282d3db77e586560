"""
Pydantic schemas for the spreadsheet API responses.

Every endpoint answers with one of two envelopes:
    - SuccessEnvelope: ``{isOk: true, status, links: {self}, result}``
    - ErrorEnvelope: ``{isOk: false, status, errors: [{code, message}]}``
Envelopes are built once per request and never mutated.
No business logic belongs here.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class SelfLink(BaseModel):
    """HATEOAS reference back to the resource a response concerns."""

    model_config = ConfigDict(frozen=True)

    href: str
    method: str


class Links(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    self_: SelfLink = Field(..., alias="self")


class SuccessEnvelope(BaseModel):
    """Response envelope for a successful operation.

    Attributes:
        is_ok: Always True.
        status: HTTP status of the response.
        links: Self link (href + method of the originating request).
        result: Operation payload: a scalar, a cell-id -> value map or a dump.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_ok: Literal[True] = Field(True, alias="isOk")
    status: int
    links: Links
    result: Any = None


class ErrorItem(BaseModel):
    """A single domain error in an error envelope."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str


class ErrorEnvelope(BaseModel):
    """Response envelope for a failed operation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_ok: Literal[False] = Field(False, alias="isOk")
    status: int
    errors: list[ErrorItem]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
