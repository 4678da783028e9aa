"""
Pagination and response envelope models for REST endpoints.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class PaginationParams(BaseModel):
    """Page-based pagination parameters."""

    page: int = Field(default=DEFAULT_PAGE_NUMBER, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    has_more: bool

    @classmethod
    def build(cls, pagination: PaginationParams, total: int) -> "PaginationMeta":
        return cls(
            page=pagination.page,
            limit=pagination.limit,
            total=total,
            has_more=pagination.offset + pagination.limit < total,
        )


class DataResponse(BaseModel, Generic[T]):
    """Success envelope: ``{"success": true, "message": ..., "data": ...}``."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


def get_pagination_or_default(
    page: Optional[int] = None, limit: Optional[int] = None, default_limit: int = DEFAULT_PAGE_SIZE
) -> PaginationParams:
    """Build pagination params, clamping out-of-range values instead of rejecting them."""
    page = page if page and page > 0 else DEFAULT_PAGE_NUMBER
    limit = limit if limit and limit > 0 else default_limit
    return PaginationParams(page=page, limit=min(limit, MAX_PAGE_SIZE))
