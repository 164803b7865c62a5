"""Error Handlers - map catalog failures onto HTTP answers for admin tooling.

Invariants:
    - Domain errors answer their own 4xx and log at WARNING, no traceback
    - Retryable store failures and unavailable targets answer 503 with Retry-After, in
      whole seconds derived from the store reconnect delay (minimum 1)
    - A unique-constraint violation surfacing from commit answers 409, same as a
      DuplicateNameError caught by the pre-check
    - Malformed requests answer 400 in the RecordValidationError envelope, one entry
      per offending field
    - Anything else answers 500 and never leaks internal details

Design Decisions:
    - Handlers are module-level coroutines registered with add_exception_handler, so
      tests can mount them on a bare FastAPI app
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from catalog_sync.core.errors import (
    CatalogSyncError, DatabaseError, DomainError, ErrorSeverity,
    RecordValidationError, TargetUnavailableError,
)

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 2


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(CatalogSyncError, handle_catalog_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected_error)


async def handle_catalog_error(request: Request, exc: CatalogSyncError) -> JSONResponse:
    path = request.url.path
    if isinstance(exc, DomainError):
        logger.warning(
            f"{exc.code} on {path}: {exc.message}",
            extra={
                "error_code": exc.code, "path": path,
                "record_name": exc.context.record_name,
            },
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    logger.error(
        f"{exc.code} on {path}: {exc.message}",
        extra={
            "error_code": exc.code, "path": path,
            "operation": exc.context.operation, "target": exc.context.target,
        },
    )
    if _is_constraint_violation(exc):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content=exc.to_response(),
        )
    if getattr(exc, "retryable", False) or isinstance(exc, TargetUnavailableError):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=exc.to_response(),
            headers={"Retry-After": str(_retry_after_seconds(request))},
        )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_request_validation(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    errors = exc.errors()
    fields = [".".join(str(loc) for loc in e["loc"]) for e in errors]
    logger.warning(
        f"Invalid request on {request.url.path}: {', '.join(fields)}",
        extra={"path": request.url.path, "error_code": "VALIDATION_ERROR"},
    )
    envelope = RecordValidationError(
        "Invalid request data", fields[0] if fields else "body",
    ).to_response()
    envelope["error"]["details"] = [
        {"field": field, "message": e["msg"], "type": e["type"]}
        for field, e in zip(fields, errors)
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=envelope)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        extra={"path": request.url.path},
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )


def _is_constraint_violation(exc: CatalogSyncError) -> bool:
    return isinstance(exc, DatabaseError) and isinstance(exc.__cause__, IntegrityError)


def _retry_after_seconds(request: Request) -> int:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        return DEFAULT_RETRY_AFTER_SECONDS
    return max(1, math.ceil(settings.store_reconnect_delay_ms / 1000))
