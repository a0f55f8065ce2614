from datetime import datetime, timezone
from typing import Annotated, Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, StringConstraints

T = TypeVar("T")

# Trimmed, non-empty strings
RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
ShortStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
OptionalStr = Annotated[str, StringConstraints(strip_whitespace=True)]


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope wrapped around every response."""
    status: bool = Field(..., description="Whether the request succeeded")
    message: str = Field(..., description="Human readable outcome")
    data: Optional[T] = Field(None, description="Payload, null on failure")


class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalCount: int
    hasNext: bool
    hasPrev: bool


class Page(BaseModel, Generic[T]):
    items: List[T]
    pagination: Pagination


def ok(message: str, data: Any = None) -> dict:
    """Build a success envelope; the route's response_model shapes ``data``."""
    return {"status": True, "message": message, "data": data}


def to_naive_utc(value: Any) -> Any:
    """
    Normalise incoming datetimes to naive UTC, the form the store returns.
    Plain ``YYYY-MM-DD`` strings become midnight of that day.
    """
    if isinstance(value, str) and len(value) == 10:
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
