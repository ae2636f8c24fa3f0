# uigen/api/errors.py
"""
Error envelope and exception handlers.

Every failure leaves the API in the same shape:

    {"success": false, "error": "<ErrorClassName>", "message": "...",
     "statusCode": 400, "timestamp": "...", "path": "/...", "method": "POST"}

plus "details" when there is something structured to report.
"""
import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from uigen.core.exceptions import UIGenError
from uigen.core.logging import log, log_error
from uigen.models.common import isoformat, utcnow


HTTP_ERROR_NAMES = {
    400: "BadRequestError",
    401: "AuthenticationError",
    403: "AuthorizationError",
    404: "NotFoundError",
    405: "MethodNotAllowedError",
    409: "ConflictError",
    413: "PayloadTooLargeError",
    429: "RateLimitError",
}

AVAILABLE_ENDPOINTS = {
    "api": "/api/v1",
    "health": "/health",
    "websocket": "/ws",
}


def _environment(request: Request) -> str:
    services = getattr(request.app.state, "services", None)
    return services.settings.server.environment if services else "development"


def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Any = None,
    **extra: Any,
) -> JSONResponse:
    body = {
        "success": False,
        "error": error,
        "message": message,
        "statusCode": status_code,
        "timestamp": isoformat(utcnow()),
        "path": request.url.path,
        "method": request.method,
    }
    if details:
        body["details"] = details
    body.update(extra)

    if status_code >= 500:
        log_error("HTTP", f"{request.method} {request.url.path} -> {status_code}: {message}")
    else:
        log("HTTP", f"⚠️ {request.method} {request.url.path} -> {status_code}: {message}")

    return JSONResponse(status_code=status_code, content=body)


async def uigen_error_handler(request: Request, exc: UIGenError) -> JSONResponse:
    message = exc.message
    if exc.status_code >= 500 and _environment(request) == "production":
        message = "Something went wrong"
    return error_response(request, exc.status_code, type(exc).__name__, message, exc.details or None)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(e.get("type") == "json_invalid" for e in errors):
        return error_response(request, 400, "ValidationError", "Invalid JSON format")

    details = [
        {
            "field": ".".join(str(part) for part in e.get("loc", ())[1:]) or "body",
            "message": e.get("msg", "Invalid value"),
        }
        for e in errors
    ]
    return error_response(request, 400, "ValidationError", "Validation error", details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail in (None, "Not Found"):
        return error_response(
            request,
            404,
            "NotFoundError",
            f"Route {request.method} {request.url.path} not found",
            availableEndpoints=AVAILABLE_ENDPOINTS,
        )
    name = HTTP_ERROR_NAMES.get(exc.status_code, "HTTPError")
    return error_response(request, exc.status_code, name, str(exc.detail))


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # Called synchronously by SlowAPIMiddleware
    return error_response(request, 429, "RateLimitError", f"Too many requests: {exc.detail}")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    environment = _environment(request)
    message = "Something went wrong" if environment == "production" else "Internal server error"
    log_error("HTTP", f"🚨 Server error: {exc!r}")

    stack: Optional[str] = None
    if environment == "development":
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    if stack:
        return error_response(request, 500, type(exc).__name__, message, stack=stack)
    return error_response(request, 500, type(exc).__name__, message)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UIGenError, uigen_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
