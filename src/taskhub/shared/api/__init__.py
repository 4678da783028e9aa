"""
API utilities for REST endpoints.

Provides:
- Pagination patterns (PaginationParams, PaginationMeta, DataResponse)
- Response utilities (create_data_response, create_paginated_response)
"""

from .pagination import (
    PaginationParams,
    DataResponse,
    PaginationMeta,
    get_pagination_or_default,
    DEFAULT_PAGE_NUMBER,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
)
from .response_utils import (
    create_data_response,
    create_paginated_response,
)

__all__ = [
    "PaginationParams",
    "DataResponse",
    "PaginationMeta",
    "get_pagination_or_default",
    "DEFAULT_PAGE_NUMBER",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "create_data_response",
    "create_paginated_response",
]
