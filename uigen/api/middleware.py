# uigen/api/middleware.py
"""
HTTP middleware: request ids, security headers, body size guard and the
access log.
"""
import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from uigen.api.errors import error_response
from uigen.core.config import Settings
from uigen.core.logging import log
from uigen.lib.api_utils import generate_request_id


CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "style-src 'self' 'unsafe-inline'",
    "script-src 'self'",
    "img-src 'self' data: https:",
])

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
}


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_body_size: int):
        super().__init__(app)
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > self.max_body_size:
            return error_response(
                request,
                413,
                "PayloadTooLargeError",
                f"Request body exceeds {self.max_body_size} bytes",
                {"limit": self.max_body_size},
            )
        return await call_next(request)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        log("HTTP", f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response


def register_middleware(app: FastAPI, settings: Settings) -> None:
    """Order matters: the last one added runs first."""
    if settings.server.environment != "test":
        app.add_middleware(AccessLogMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=settings.server.max_body_size)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
