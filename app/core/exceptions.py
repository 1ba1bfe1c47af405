"""Application-level exceptions and FastAPI exception handlers."""

import logging

import pydantic
from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import (
    http_exception_handler,
    request_validation_exception_handler,
)
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core import response
from app.core.config import settings

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "An error occurred. Please try again later."
FOREIGN_KEY_MESSAGE = "Cannot delete: related records exist, handle them first"

# Framework HTTP errors that keep their status: not found, access denied, malformed
_KEPT_HTTP_STATUSES = {
    status.HTTP_404_NOT_FOUND,
    status.HTTP_403_FORBIDDEN,
    status.HTTP_400_BAD_REQUEST,
}

class AppException(Exception):
    """Base business exception. Its message is considered safe to show to users."""

    def __init__(self, message: str, status_code: int = 400, code: str = "BUSINESS_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

class BusinessException(AppException):
    @classmethod
    def invalid_status(cls) -> "BusinessException":
        return cls("Invalid status, must be 1 (active), 2 (inactive) or 3 (deleted)", 400)

    @classmethod
    def article_not_found(cls) -> "BusinessException":
        return cls("News article not found", 404)

    @classmethod
    def article_deleted(cls) -> "BusinessException":
        return cls("News article has been deleted", 404)

    @classmethod
    def operation_failed(cls, message: str = "Operation failed") -> "BusinessException":
        return cls(message, 500)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | int | None = None):
        msg = f"{entity} not found" if entity_id is None else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class AccessDeniedError(AppException):
    def __init__(self, message: str = "Access denied"):
        super().__init__(message, status_code=403, code="FORBIDDEN")

class UnauthorizedError(AppException):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, status_code=401, code="UNAUTHORIZED")

class MalformedRequestError(AppException):
    def __init__(self, message: str = "Malformed request"):
        super().__init__(message, status_code=400, code="BAD_REQUEST")

class ConflictError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="CONFLICT")

class ValidationFailedError(AppException):
    """Field-keyed validation failure (declarative rules or business rules)."""

    def __init__(self, errors: dict[str, str], message: str = "Validation failed"):
        self.errors = errors
        super().__init__(message, status_code=400, code="VALIDATION_ERROR")

# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------

def _error_path(loc: tuple) -> str:
    # Drop the FastAPI source marker ("body", "query", ...) from the location
    parts = [str(p) for p in loc]
    if parts and parts[0] in {"body", "query", "path", "header", "cookie"}:
        parts = parts[1:]
    return ".".join(parts) or "__root__"

def field_errors(errors: list[dict]) -> dict[str, str]:
    """Field path -> message; several messages on one path are joined."""
    collected: dict[str, list[str]] = {}
    for e in errors:
        collected.setdefault(_error_path(tuple(e.get("loc", ()))), []).append(e.get("msg", "Invalid value"))
    return {path: "; ".join(messages) for path, messages in collected.items()}

def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig or exc).lower()
    return "foreign key" in text

def _user_message(exc: Exception, fallback: str = GENERIC_MESSAGE) -> str:
    if settings.debug:
        return str(exc)
    if isinstance(exc, AppException):
        return exc.message
    return fallback

async def _default_handling(request: Request, exc: Exception):
    """What the framework would have done without the JSON mapper."""
    if isinstance(exc, RequestValidationError):
        return await request_validation_exception_handler(request, exc)
    if isinstance(exc, StarletteHTTPException):
        return await http_exception_handler(request, exc)
    return PlainTextResponse("Internal Server Error", status_code=500)

def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error mapper to the FastAPI app.

    Only requests under the configured API prefixes are converted to the JSON
    envelope; everything else keeps FastAPI's default handling.
    """

    @app.exception_handler(ValidationFailedError)
    async def validation_failed_handler(request: Request, exc: ValidationFailedError):
        if not settings.is_api_path(request.url.path):
            return await _default_handling(request, exc)
        return response.error(exc.message, status.HTTP_400_BAD_REQUEST, exc.errors, request)

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if not settings.is_api_path(request.url.path):
            return await _default_handling(request, exc)
        return response.error(exc.message, exc.status_code, request=request)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        if not settings.is_api_path(request.url.path):
            return await _default_handling(request, exc)
        return response.error(
            "Validation failed", status.HTTP_400_BAD_REQUEST, field_errors(exc.errors()), request
        )

    @app.exception_handler(pydantic.ValidationError)
    async def model_validation_handler(request: Request, exc: pydantic.ValidationError):
        if not settings.is_api_path(request.url.path):
            return await _default_handling(request, exc)
        return response.error(
            "Validation failed", status.HTTP_400_BAD_REQUEST, field_errors(exc.errors()), request
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if not settings.is_api_path(request.url.path):
            return await _default_handling(request, exc)
        message = str(exc.detail) if settings.debug else GENERIC_MESSAGE
        if exc.status_code not in _KEPT_HTTP_STATUSES:
            logger.warning("HTTP %s on %s %s mapped to 500", exc.status_code, request.method, request.url.path)
            return response.error(message, status.HTTP_500_INTERNAL_SERVER_ERROR, request=request)
        return response.error(
            message,
            exc.status_code,
            request=request,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        if not settings.is_api_path(request.url.path):
            return await _default_handling(request, exc)
        if _is_foreign_key_violation(exc):
            return response.error(FOREIGN_KEY_MESSAGE, status.HTTP_409_CONFLICT, request=request)
        logger.error("Integrity error on %s: %s", request.url.path, exc.orig)
        return response.error(_user_message(exc), status.HTTP_500_INTERNAL_SERVER_ERROR, request=request)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        if not settings.is_api_path(request.url.path):
            return await _default_handling(request, exc)
        return response.error(_user_message(exc), status.HTTP_500_INTERNAL_SERVER_ERROR, request=request)
