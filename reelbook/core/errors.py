"""Domain errors and their translation into API responses.

Services raise these; the handlers registered in ``install_exception_handlers``
turn every failure into the same envelope::

    {"success": false, "message": "...", "errors": [...], "error": "..."}

``error`` carries the raw exception text and only appears in debug mode.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from reelbook.core.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, errors: list[dict] | None = None):
        self.message = message or self.message
        self.errors = errors
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"


class ServiceNotFound(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid service selected"


class SlotConflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "This time slot is already booked. Please choose a different time."


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class InvalidStatus(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid status"


class InvalidTransition(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid status transition"


class SignatureInvalid(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Payment verification failed"


class InvalidAmount(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid amount"


class AlreadyProcessed(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Payment has already been processed"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"


class InternalError(AppError):
    pass


def _envelope(message: str, errors: list[dict] | None = None, detail: str | None = None) -> dict:
    body: dict = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if detail and settings.debug:
        body["error"] = detail
    return body


def _field_errors(exc: RequestValidationError) -> list[dict]:
    """Flatten pydantic errors to one entry per failing field."""
    out = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        out.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return out


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(exc.message, exc.errors, str(exc.__cause__) if exc.__cause__ else None),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=ValidationFailed.status_code,
        content=_envelope(ValidationFailed.message, _field_errors(exc)),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=InternalError.status_code,
        content=_envelope(InternalError.message, detail=str(exc)),
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
