"""
Application error hierarchy and the FastAPI handlers that render it.

Every error crossing the HTTP boundary is returned as ``{"error": "..."}``
with the status code carried by the exception.
"""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.config import get_settings
from src.core.logging import get_logger

logger = get_logger(__name__)


# ── Exception classes ───────────────────────────────────


class AppError(Exception):
    """Base class for errors the API knows how to render."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Missing or malformed user input (query text, credentials)."""

    status_code = 400


class AuthError(AppError):
    """Bad credentials (401) or a bad / expired token (403)."""

    status_code = 401


class DataFetchError(AppError):
    """The spreadsheet could not be loaded."""

    status_code = 500


class InterpretationError(AppError):
    """No date in the dataset could be resolved for a query."""

    status_code = 400


# ── Handlers ────────────────────────────────────────────


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", []) if part != "body")
    message = first.get("msg", "Invalid request")
    logger.warning("Request validation failed on %s: %s", request.url.path, errors)
    return JSONResponse(
        status_code=400,
        content={"error": f"{field}: {message}" if field else message},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Server error on %s", request.url.path, exc_info=exc)
    production = get_settings().environment == "production"
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An error occurred" if production else str(exc),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the ``{"error": ...}`` handlers to *app*."""
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
