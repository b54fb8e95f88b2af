"""Service error taxonomy and the terminal exception handlers.

Every error leaves the API in the same envelope::

    {"status": "error", "error": {"type": ..., "message": ...}, "request_id": ...}
"""

from enum import Enum
from typing import Any

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.lexora.core.config import get_settings
from src.lexora.core.logging import get_logger

logger = get_logger(__name__)


class ServiceErrorType(str, Enum):
    """Error categories exposed to clients."""

    VALIDATION_ERROR = "validation_error"
    AUTH_ERROR = "auth_error"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    NETWORK_ERROR = "network_error"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"


ERROR_TYPE_STATUS: dict[ServiceErrorType, int] = {
    ServiceErrorType.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ServiceErrorType.AUTH_ERROR: status.HTTP_401_UNAUTHORIZED,
    ServiceErrorType.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ServiceErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ServiceErrorType.NETWORK_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    ServiceErrorType.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ServiceErrorType.SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_STATUS_ERROR_TYPE: dict[int, ServiceErrorType] = {
    code: error_type for error_type, code in ERROR_TYPE_STATUS.items()
}


class AppError(Exception):
    """Base class for errors that map onto the response envelope."""

    error_type: ServiceErrorType = ServiceErrorType.SERVER_ERROR

    def __init__(self, message: str, error_type: ServiceErrorType | None = None):
        super().__init__(message)
        self.message = message
        if error_type is not None:
            self.error_type = error_type

    @property
    def status_code(self) -> int:
        return ERROR_TYPE_STATUS[self.error_type]


class ValidationError(AppError):
    """Missing or malformed input."""

    error_type = ServiceErrorType.VALIDATION_ERROR


class AuthenticationError(AppError):
    """Missing, invalid or expired credential."""

    error_type = ServiceErrorType.AUTH_ERROR


class ForbiddenError(AppError):
    """Authenticated, but not entitled (organization, license, team)."""

    error_type = ServiceErrorType.FORBIDDEN


class NotFoundError(AppError):
    error_type = ServiceErrorType.NOT_FOUND


class NetworkError(AppError):
    """An outbound dependency (email delivery, identity provider) failed."""

    error_type = ServiceErrorType.NETWORK_ERROR


# Store constraint -> client message. Matched against the driver message, which
# names either the constraint (PostgreSQL) or the column (SQLite).
_CONSTRAINT_MESSAGES: list[tuple[tuple[str, ...], str]] = [
    (("uq_users_email", "users.email"), "A user with this email already exists"),
    (("uq_users_google_id", "users.google_id"), "This Google account is already linked"),
    (
        ("uq_users_microsoft_id", "users.microsoft_id"),
        "This Microsoft account is already linked",
    ),
    (
        ("uq_teams_organization_name", "teams.organization_id, teams.name"),
        "A team with this name already exists in the organization",
    ),
    (
        ("team_members_user_id_fkey", "team_members_team_id_fkey", "FOREIGN KEY"),
        "Referenced team or user does not exist",
    ),
]


def translate_integrity_error(exc: IntegrityError) -> ValidationError:
    """Map a store constraint violation onto a domain validation error."""
    detail = str(exc.orig) if exc.orig is not None else str(exc)
    for markers, message in _CONSTRAINT_MESSAGES:
        if any(marker in detail for marker in markers):
            return ValidationError(message)
    return ValidationError("Request conflicts with existing data")


def error_body(message: str, error_type: ServiceErrorType) -> dict[str, Any]:
    return {
        "status": "error",
        "error": {"type": error_type.value, "message": message},
        "request_id": correlation_id.get(),
    }


def _error_response(message: str, error_type: ServiceErrorType) -> JSONResponse:
    return JSONResponse(
        status_code=ERROR_TYPE_STATUS[error_type],
        content=error_body(message, error_type),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the terminal handlers producing the error envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.error_type is ServiceErrorType.SERVER_ERROR:
            logger.error("Service error", path=request.url.path, error=exc.message)
        return _error_response(exc.message, exc.error_type)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        translated = translate_integrity_error(exc)
        logger.warning("Constraint violation", path=request.url.path, error=translated.message)
        return _error_response(translated.message, translated.error_type)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ())[1:])
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        else:
            message = "Invalid request"
        return _error_response(message, ServiceErrorType.VALIDATION_ERROR)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        error_type = _STATUS_ERROR_TYPE.get(exc.status_code, ServiceErrorType.SERVER_ERROR)
        response = JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), error_type),
        )
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        settings = get_settings()
        message = str(exc) if settings.app_env == "development" else "An unexpected error occurred"
        return _error_response(message, ServiceErrorType.SERVER_ERROR)
