"""
Uniform error envelopes for the API.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error carrying the HTTP status it should be reported with."""

    def __init__(self, message: str = "Server Error", status: int = 500):
        super().__init__(message)
        self.message = message
        self.status = status


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(loc)
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": _describe_validation_error(exc)},
    )


async def error_handler(request: Request, exc: Exception):
    status = getattr(exc, "status", None)
    if not isinstance(status, int) or not 400 <= status <= 599:
        status = 500
    if status >= 500:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = getattr(exc, "message", None) or str(exc) or "Server Error"
    return JSONResponse(
        status_code=status,
        content={"success": False, "error": message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    # ApiError goes through the regular exception middleware; anything else
    # reaches the server error middleware and is re-raised after responding.
    app.add_exception_handler(ApiError, error_handler)
    app.add_exception_handler(Exception, error_handler)
