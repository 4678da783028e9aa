"""
FastAPI exception handlers producing the ``{success: false, message}`` envelope.
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .error_dto import ErrorResponse
from .exceptions import InternalServiceError, ValidationError, WebUIBackendException

log = logging.getLogger(__name__)


def _format_validation_errors(errors: list) -> list[str]:
    formatted = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location)
        message = error.get("msg", "Invalid value")
        formatted.append(f"{field}: {message}" if field else message)
    return formatted


def _include_stack(request: Request) -> bool:
    return bool(getattr(request.app.state, "include_error_stack", False))


async def webui_backend_exception_handler(request: Request, exc: WebUIBackendException):
    """Handles business exceptions raised by services."""
    log.warning(
        "%s on %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc.message,
    )
    errors = exc.errors if isinstance(exc, ValidationError) and exc.errors else None
    body = ErrorResponse(message=exc.message, errors=errors)
    return JSONResponse(status_code=exc.status_code, content=body.to_content())


async def internal_service_error_handler(request: Request, exc: InternalServiceError):
    """Handles internal errors without leaking details to the client."""
    log.error(
        "Internal service error on %s %s: %s",
        request.method,
        request.url.path,
        exc.message,
    )
    body = ErrorResponse(message="Internal server error")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.to_content()
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    log.warning(
        "HTTP Exception Handler triggered: Status=%s, Detail=%s, Request: %s %s",
        exc.status_code,
        exc.detail,
        request.method,
        request.url,
    )
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = "Route not found"
    elif isinstance(exc.detail, dict):
        message = str(exc.detail.get("message") or exc.detail)
    else:
        message = str(exc.detail)

    body = ErrorResponse(message=message)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.to_content(),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    log.warning(
        "Validation Exception Handler triggered: %s, Request: %s %s",
        exc.errors(),
        request.method,
        request.url,
    )
    body = ErrorResponse(
        message="Request validation failed",
        errors=_format_validation_errors(exc.errors()),
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.to_content())


async def generic_exception_handler(request: Request, exc: Exception):
    log.exception(
        "Generic Exception Handler triggered: %s, Request: %s %s",
        exc,
        request.method,
        request.url,
    )
    stack = None
    if _include_stack(request):
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    body = ErrorResponse(message="Internal server error", stack=stack)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.to_content()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all shared exception handlers on the given app."""
    app.add_exception_handler(InternalServiceError, internal_service_error_handler)
    app.add_exception_handler(WebUIBackendException, webui_backend_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
