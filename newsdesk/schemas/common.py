"""Response envelope and shared pagination schemas."""

from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for wire schemas: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class ErrorItem(CamelModel):
    """One field-level problem (validation errors, re-authentication hints)."""

    field: str
    message: str
    code: str


def _now() -> datetime:
    return datetime.now(UTC)


class ApiResponse(CamelModel, Generic[T]):
    """Envelope wrapping every successful response."""

    success: bool = True
    data: T | None = None
    message: str = "Success"
    pagination: PaginationMeta | None = None
    timestamp: datetime = Field(default_factory=_now)
    trace_id: str | None = None


class ErrorResponse(CamelModel):
    """Envelope for every error response; code is stable for client-side branching."""

    success: bool = False
    data: Any = None
    message: str
    code: str
    errors: list[ErrorItem] | None = None
    timestamp: datetime = Field(default_factory=_now)
    trace_id: str | None = None
