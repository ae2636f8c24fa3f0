# uigen/lib/api_utils.py
"""
API constants and helpers shared by the server and the Python client.
"""
import os
import random
import string
import time
from typing import Any, Dict, Optional, Union

import httpx


API_VERSION = {
    "V1": "v1",
    "CURRENT": "v1",
}

API_ENDPOINTS = {
    "AUTH": {
        "LOGIN": "/auth/login",
        "REGISTER": "/auth/register",
        "LOGOUT": "/auth/logout",
        "REFRESH": "/auth/refresh",
        "PROFILE": "/auth/profile",
    },
    "PROJECTS": {
        "LIST": "/projects",
        "CREATE": "/projects",
        "GET": "/projects/:id",
        "UPDATE": "/projects/:id",
        "DELETE": "/projects/:id",
        "EXPORT": "/projects/:id/export",
    },
    "FILES": {
        "LIST": "/projects/:projectId/files",
        "CREATE": "/projects/:projectId/files",
        "GET": "/projects/:projectId/files/:fileId",
        "UPDATE": "/projects/:projectId/files/:fileId",
        "DELETE": "/projects/:projectId/files/:fileId",
    },
    "AI": {
        "CHAT": "/ai/chat",
        "PROVIDERS": "/ai/providers",
        "HEALTH": "/ai/health",
        "USAGE": "/ai/usage",
        "TOOLS": "/ai/tools",
    },
    "WS": {
        "ROOT": "/ws",
    },
}

HTTP_STATUS = {
    "OK": 200,
    "CREATED": 201,
    "NO_CONTENT": 204,
    "BAD_REQUEST": 400,
    "UNAUTHORIZED": 401,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "CONFLICT": 409,
    "PAYLOAD_TOO_LARGE": 413,
    "UNPROCESSABLE_ENTITY": 422,
    "TOO_MANY_REQUESTS": 429,
    "INTERNAL_SERVER_ERROR": 500,
    "NOT_IMPLEMENTED": 501,
    "SERVICE_UNAVAILABLE": 503,
}

API_HEADERS = {
    "CONTENT_TYPE": "Content-Type",
    "AUTHORIZATION": "Authorization",
    "API_VERSION": "X-API-Version",
    "REQUEST_ID": "X-Request-ID",
    "RATE_LIMIT_REMAINING": "X-RateLimit-Remaining",
    "RATE_LIMIT_RESET": "X-RateLimit-Reset",
}

DEFAULT_BASE_URL = "http://localhost:3001"


def build_api_url(endpoint: str, version: str = API_VERSION["CURRENT"], base_url: Optional[str] = None) -> str:
    """Full URL of a versioned endpoint, e.g. http://host/api/v1/projects."""
    base = (base_url or os.getenv("UIGEN_API_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
    return f"{base}/api/{version}/{endpoint.lstrip('/')}"


def generate_request_id() -> str:
    """req_<epoch ms>_<9 random chars>."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


def build_api_headers(extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    headers = {
        API_HEADERS["CONTENT_TYPE"]: "application/json",
        API_HEADERS["API_VERSION"]: API_VERSION["CURRENT"],
        API_HEADERS["REQUEST_ID"]: generate_request_id(),
    }
    headers.update(extra or {})
    return headers


def replace_url_params(url: str, params: Dict[str, Union[str, int]]) -> str:
    for key, value in params.items():
        url = url.replace(f":{key}", str(value))
    return url


def is_api_success(status: int) -> bool:
    return 200 <= status < 300


def format_api_error(error: Any) -> str:
    """Best human-readable message for a failed request."""
    if isinstance(error, httpx.HTTPStatusError):
        try:
            body = error.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return body["message"]
    message = str(error) if error is not None else ""
    return message or "An unknown error occurred, please try again later"
