"""
Helpers for building the standard success envelope.
"""

from typing import Any, Optional

from .pagination import DataResponse, PaginationMeta, PaginationParams


def create_data_response(data: Any = None, message: Optional[str] = None) -> DataResponse:
    return DataResponse(success=True, message=message, data=data)


def create_paginated_response(
    items: list,
    pagination: PaginationParams,
    total: int,
    key: str,
    message: Optional[str] = None,
) -> DataResponse:
    """Wrap a page of items as ``{key: items, "pagination": {...}}``."""
    meta = PaginationMeta.build(pagination, total)
    return DataResponse(
        success=True,
        message=message,
        data={key: items, "pagination": meta},
    )
