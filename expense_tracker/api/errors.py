"""
Exception handlers: every failure leaves the API as a standard envelope.

Anything not mapped to a domain error is a 500 and is audited as a system
error.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from expense_tracker.api.responses import api_response
from expense_tracker.errors import ExpenseTrackerError
from expense_tracker.services.storage import StorageError


logger = structlog.get_logger(__name__)


def _describe_validation_errors(exc: RequestValidationError) -> tuple[str, list[dict]]:
    errors = [
        {
            # Drop the leading "body"/"query" location part
            "field": ".".join(str(part) for part in error["loc"][1:]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    if any(error["type"] == "missing" for error in exc.errors()):
        return "All fields are required", errors
    return errors[0]["message"] if errors else "Invalid request", errors


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """Attach the envelope-producing handlers to an app."""

    @app.exception_handler(ExpenseTrackerError)
    async def handle_domain_error(request: Request, exc: ExpenseTrackerError) -> JSONResponse:
        return api_response(exc.status_code, exc.data, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message, errors = _describe_validation_errors(exc)
        return api_response(400, {"errors": errors}, message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return api_response(exc.status_code, None, str(exc.detail))

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("storage_error", path=request.url.path, error=str(exc))
        message = str(exc) if debug else "Storage is temporarily unavailable"
        return api_response(500, None, message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", path=request.url.path, error=str(exc), exc_info=exc)
        await request.app.state.components.audit_logger.log_error(
            error_type=type(exc).__name__,
            error_message=str(exc),
            details={"path": request.url.path, "method": request.method},
            user_id=request.headers.get("X-User-Id"),
        )
        message = str(exc) if debug else "Internal server error"
        return api_response(500, None, message)
