"""Global exception handlers for the FastAPI application.

Every failure is returned as structured JSON carrying the request ID.
Domain errors keep their own message and status code; anything unexpected
is logged with its stack trace and reported as a bare 500.
"""

import logging
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from conductor.errors import ConductorError, format_error_response

logger = logging.getLogger(__name__)


def _get_request_id(request: Request) -> str:
    """Request ID set by :class:`RequestIDMiddleware`, or a fresh UUID-4."""
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


# ------------------------------------------------------------------
# Individual exception handlers
# ------------------------------------------------------------------

async def global_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Catch-all for any unhandled exception: returns 500."""
    request_id = _get_request_id(request)
    logger.error(
        "Unhandled exception on %s %s [request_id=%s]",
        request.method,
        request.url.path,
        request_id,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=format_error_response(
            error="Internal Server Error",
            detail="Internal server error",
            request_id=request_id,
        ),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle Starlette/FastAPI ``HTTPException``: preserves status code."""
    request_id = _get_request_id(request)
    logger.warning(
        "HTTP %s on %s %s [request_id=%s]: %s",
        exc.status_code,
        request.method,
        request.url.path,
        request_id,
        exc.detail,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(
            error=str(exc.detail) if exc.detail else "Error",
            detail=str(exc.detail) if exc.detail else None,
            request_id=request_id,
        ),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request-body validation errors: returns 422."""
    request_id = _get_request_id(request)
    errors = exc.errors()
    logger.warning(
        "Validation error on %s %s [request_id=%s]: %s",
        request.method,
        request.url.path,
        request_id,
        errors,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=format_error_response(
            error="Validation failed",
            detail=jsonable_errors(errors),
            request_id=request_id,
        ),
    )


async def conductor_error_handler(
    request: Request, exc: ConductorError
) -> JSONResponse:
    """Handle domain :class:`ConductorError` subclasses: maps to HTTP status."""
    request_id = _get_request_id(request)
    logger.warning(
        "%s on %s %s [request_id=%s]: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        request_id,
        exc,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(
            error=type(exc).__name__,
            detail=str(exc),
            request_id=request_id,
        ),
    )


def jsonable_errors(errors: list) -> list:
    """Drop non-serialisable ``ctx`` payloads from pydantic error dicts."""
    cleaned = []
    for err in errors:
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        cleaned.append(err)
    return cleaned


# ------------------------------------------------------------------
# Registration helper
# ------------------------------------------------------------------

def setup_exception_handlers(app: FastAPI) -> None:
    """Register all global exception handlers on *app*."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ConductorError, conductor_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)  # type: ignore[arg-type]
