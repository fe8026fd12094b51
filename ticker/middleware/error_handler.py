"""
Error Handler Middleware
FastAPI exception handlers for structured error responses.
"""

import logging
from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from ticker.errors import (
    TickerError, ValidationError, create_http_exception, create_structured_error_response,
    sanitize_error_message
)

logger = logging.getLogger(__name__)


async def ticker_exception_handler(request: Request, exc: TickerError) -> JSONResponse:
    """Handle TickerError exceptions with structured responses."""
    http_exc = create_http_exception(exc)

    # User input problems are expected; everything else is worth an error line
    log = logger.info if isinstance(exc, ValidationError) else logger.error
    log(f"TickerError: {exc.error_code} - {exc.message}", extra={
        "error_code": exc.error_code,
        "details": exc.details,
        "path": str(request.url),
        "method": request.method
    })

    return JSONResponse(
        status_code=http_exc.status_code,
        content={
            "error": exc.error_code,
            "message": sanitize_error_message(exc.message),
            "details": exc.details,
            "path": str(request.url.path),
            "method": request.method
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTPException with structured responses."""
    logger.warning(f"HTTPException: {exc.status_code} - {exc.detail}", extra={
        "status_code": exc.status_code,
        "path": str(request.url),
        "method": request.method
    })

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTP_ERROR",
            "message": sanitize_error_message(str(exc.detail)),
            "details": {},
            "path": str(request.url.path),
            "method": request.method
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors with structured responses."""
    logger.warning(f"RequestValidationError: {exc.errors()}", extra={
        "path": str(request.url),
        "method": request.method
    })

    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": {
                "validation_errors": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                    for err in exc.errors()
                ]
            },
            "path": str(request.url.path),
            "method": request.method
        }
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with structured responses."""
    logger.error(f"Unexpected error: {exc}", exc_info=True, extra={
        "path": str(request.url),
        "method": request.method
    })

    structured_error = create_structured_error_response(exc)

    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "details": structured_error["details"],
            "path": str(request.url.path),
            "method": request.method
        }
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all structured handlers to the app."""
    app.add_exception_handler(TickerError, ticker_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
