"""
Exception types and handlers for consistent error handling.

Provides:
- Business exception types (ValidationError, EntityNotFoundError, etc.)
- FastAPI exception handlers
- Error DTOs for API responses
"""

from .exceptions import (
    WebUIBackendException,
    ValidationError,
    AuthenticationError,
    PermissionDeniedError,
    EntityNotFoundError,
    DuplicateEntityError,
    BusinessRuleViolationError,
    ConflictError,
    ExternalServiceError,
    InternalServiceError,
)
from .exception_handlers import register_exception_handlers
from .error_dto import ErrorResponse

__all__ = [
    "WebUIBackendException",
    "ValidationError",
    "AuthenticationError",
    "PermissionDeniedError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "BusinessRuleViolationError",
    "ConflictError",
    "ExternalServiceError",
    "InternalServiceError",
    "register_exception_handlers",
    "ErrorResponse",
]
