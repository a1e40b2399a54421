"""Error Handlers — map ledger failures to the structured error envelope.

Invariants:
    - SeedchainError → its own http_status and to_response() body; the log line
      carries caller, project id and error code from the ErrorContext
    - Ledger rule rejections (WARNING) are logged at info: they are normal outcomes
      already reported by the service, not faults
    - RequestValidationError → 400 VALIDATION_ERROR; a missing or malformed
      X-Caller-Identity header is called out in the message
    - Exception (catch-all) → 500 that never leaks internal details

Design Decisions:
    - Handlers as module functions registered explicitly (testable without an app)
    - Caller falls back to the request header when the error carries no context
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from seedchain.api.routes.ledger import CALLER_HEADER
from seedchain.core.errors import ErrorSeverity, SeedchainError

logger = logging.getLogger(__name__)

_LOG_LEVEL = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.INFO,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.ERROR,
}


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SeedchainError, seedchain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


async def seedchain_error_handler(request: Request, exc: SeedchainError) -> JSONResponse:
    context = exc.context
    logger.log(
        _LOG_LEVEL.get(exc.severity, logging.ERROR),
        f"{context.operation or request.url.path} failed: {exc.message}",
        extra={
            "error_code": exc.code,
            "caller": context.caller or request.headers.get(CALLER_HEADER),
            "project_id": context.project_id,
            "path": request.url.path,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    caller_invalid = any(
        e["loc"][:1] == ("header",) and str(e["loc"][-1]).lower() == CALLER_HEADER.lower()
        for e in exc.errors()
    )
    message = (
        f"Missing or invalid {CALLER_HEADER} header"
        if caller_invalid else "Invalid request data"
    )
    logger.warning(
        f"Validation error on {request.url.path}: {message}",
        extra={"path": request.url.path, "caller": request.headers.get(CALLER_HEADER)},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": message,
                "category": "validation",
                "severity": ErrorSeverity.ERROR.value,
                "details": details,
            },
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all — never leaks internal details."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=True,
        extra={"path": request.url.path, "caller": request.headers.get(CALLER_HEADER)},
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
