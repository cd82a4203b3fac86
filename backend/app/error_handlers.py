"""
Custom exception handlers for FastAPI.

Issue failures keep their two client-facing shapes:
- IssueValidationError -> 400 {"error": ...}
- IssueOperationError -> 200 {"error": ..., "_id": ...}

Security:
- Request IDs are logged server-side for tracing but NOT exposed to clients
- Generic error messages for 500 errors to prevent information disclosure
"""

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from core.exceptions import IssueOperationError, IssueValidationError
from core.logging import get_logger

logger = get_logger("backend.errors")


def _get_request_id() -> str:
    """
    Get the current request ID from context.

    Used for server-side logging only - NOT exposed to clients.
    """
    return structlog.contextvars.get_contextvars().get("request_id", "-")


def _response_payload(detail: str, status_code: int) -> dict:
    return {
        "detail": detail,
        "status_code": status_code,
    }


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(IssueValidationError)
    async def issue_validation_handler(request: Request, exc: IssueValidationError):
        logger.info(
            "issue_validation_failed",
            error=exc.message,
            path=request.url.path,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=exc.to_payload(),
        )

    @app.exception_handler(IssueOperationError)
    async def issue_operation_handler(request: Request, exc: IssueOperationError):
        # Reported with a success status; the payload carries the failure
        logger.info(
            "issue_operation_failed",
            error=exc.message,
            issue_id=exc.issue_id,
            path=request.url.path,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=exc.to_payload(),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.warning(
            "http_exception",
            detail=exc.detail,
            status_code=exc.status_code,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_response_payload(str(exc.detail), exc.status_code),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        # Log full details server-side (including request_id for tracing)
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=_get_request_id(),
        )
        # Return generic message - don't expose exception details
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_response_payload("Internal server error", 500),
        )
