"""
Business exception types raised by services and mapped to HTTP responses
by the registered exception handlers.
"""

from typing import List, Optional


class WebUIBackendException(Exception):
    """Base class for all handled backend exceptions."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WebUIBackendException):
    """Request data failed business validation."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class AuthenticationError(WebUIBackendException):
    """Missing or invalid credentials."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class PermissionDeniedError(WebUIBackendException):
    """Authenticated user lacks the permission for an operation."""

    status_code = 403

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


class EntityNotFoundError(WebUIBackendException):
    status_code = 404

    def __init__(self, entity_type: str, entity_id: Optional[str] = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found")


class DuplicateEntityError(WebUIBackendException):
    status_code = 409


class ConflictError(WebUIBackendException):
    status_code = 409


class BusinessRuleViolationError(WebUIBackendException):
    """A request is well formed but violates a domain rule."""

    status_code = 422


class ExternalServiceError(WebUIBackendException):
    """A third-party service (AI provider, external analyzer) failed."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


class InternalServiceError(WebUIBackendException):
    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message)
