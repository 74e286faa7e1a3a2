"""
Shared request/response shapes: list queries, pagination and the JSON envelope.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from app.core.config import settings

T = TypeVar("T")

# Largest page number accepted; keeps offsets inside a 64-bit INTEGER
MAX_PAGE = 2**31 - 1


def _positive_int(raw: Optional[str], default: int, upper: int = MAX_PAGE) -> int:
    """Parse a query value as a positive int up to ``upper``, else the default."""
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if 0 < value <= upper else default


class ListQuery(BaseModel):
    """
    Normalized list parameters.

    ``filter_value`` is the exact-match categorical filter of the entity
    kind (role for users, category for products).
    """

    page: int = 1
    limit: int = 10
    search: str = ""
    sort: str = ""
    filter_value: str = ""

    @classmethod
    def from_params(
        cls,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        filter_value: Optional[str] = None,
    ) -> "ListQuery":
        """Build a query from raw strings; bad numbers fall back to defaults."""
        return cls(
            page=_positive_int(page, 1),
            limit=min(_positive_int(limit, settings.DEFAULT_PAGE_SIZE), settings.MAX_PAGE_SIZE),
            search=(search or "").strip(),
            sort=(sort or "").strip(),
            filter_value=(filter_value or "").strip(),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class ListPage(BaseModel, Generic[T]):
    """A page of items plus the unpaginated total. This is what gets cached."""

    items: list[T]
    total: int


class PaginationInfo(BaseModel):
    current_page: int
    total_pages: int
    items_per_page: int
    total_items: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationInfo":
        return cls(
            current_page=page,
            total_pages=(total + limit - 1) // limit,
            items_per_page=limit,
            total_items=total,
        )


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope."""

    status: int
    message: str
    data: Optional[T] = None


class PaginatedResponse(BaseModel, Generic[T]):
    """Success envelope for list endpoints."""

    status: int
    message: str
    data: list[T]
    pagination: PaginationInfo


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Error envelope, documented in OpenAPI; built by the exception handlers."""

    status: int
    message: str
    errors: Optional[list[ErrorDetail]] = None
