"""Error types raised by endpoints and services, and the handlers that render them.

Every failure leaves the API as the same envelope::

    {"error": {"code": "NOT_FOUND", "message": "Interview not found", "details": {...}}}
"""

from typing import Any, Optional, Union

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger()


class APIError(Exception):
    """Base for errors that map onto an HTTP status and error code."""

    status_code = 400
    code = "API_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BadRequestError(APIError):
    """Missing or malformed input."""

    code = "BAD_REQUEST"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)


class UnauthorizedError(APIError):
    """No session, or a session without an active organization."""

    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(APIError):
    """Row missing, or owned by another organization."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Union[str, int]):
        super().__init__(f"{resource} not found", {"resource": resource, "id": identifier})


class ProviderError(APIError):
    """The voice provider rejected or failed a request; its message is embedded."""

    status_code = 500
    code = "PROVIDER_ERROR"

    def __init__(self, message: str, provider_status: Optional[int] = None):
        super().__init__(message, {"provider_status": provider_status} if provider_status else None)


def error_body(code: str, message: str, details: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details or {}}}


def _field_path(loc: tuple) -> str:
    # FastAPI prefixes request errors with "body"/"query"; drop it.
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log("Request failed", code=exc.code, message=exc.message, path=request.url.path, **exc.details)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message, exc.details))

    @app.exception_handler(RequestValidationError)
    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request,
        exc: Union[RequestValidationError, ValidationError],
    ) -> JSONResponse:
        """Body, query and model validation failures are all plain 400s."""
        first = next(iter(exc.errors()), {})
        field = _field_path(tuple(first.get("loc", ())))
        message = first.get("msg", "Validation error")

        logger.warning("Invalid request", field=field, message=message, path=request.url.path)
        return JSONResponse(status_code=400, content=error_body("BAD_REQUEST", message, {"field": field}))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error", error=str(exc), error_type=type(exc).__name__, path=request.url.path)
        return JSONResponse(status_code=500, content=error_body("DATABASE_ERROR", "A database error occurred"))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", error_type=type(exc).__name__, path=request.url.path)
        return JSONResponse(status_code=500, content=error_body("INTERNAL_ERROR", "An unexpected error occurred"))
