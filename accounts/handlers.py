"""
Exception handlers that render every failure in the standard error envelope.

Domain errors carry their own status code; HTTP exceptions raised by the
middleware keep theirs; request validation failures become 400; anything
else is logged and reported as a generic 500.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from accounts.errors import AccountError, ConflictError
from common.utils import error_response

logger = logging.getLogger(__name__)


async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    details = None
    if isinstance(exc, ConflictError) and exc.field:
        details = {"field": exc.field}

    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, code=exc.code, details=details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        content = error_response(
            detail.get("message", "Request failed"),
            code=detail.get("code"),
            details=detail.get("details"),
        )
    else:
        content = error_response(str(detail))

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        # Drop the leading "body"/"query" segment
        location = [str(part) for part in error.get("loc", ())[1:]]
        errors.append({
            "field": ".".join(location),
            "message": error.get("msg", "Invalid value"),
        })

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response("Validation failed", code="VALIDATION_ERROR", errors=errors),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response("Internal server error", code="INTERNAL_ERROR"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AccountError, account_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
