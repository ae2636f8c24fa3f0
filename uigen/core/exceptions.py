# uigen/core/exceptions.py
"""
Custom exceptions for the application.

Every exception carries the HTTP status it maps to, so the API layer
can render any of them without a lookup table.
"""
from typing import Optional, Dict, Any


class UIGenError(Exception):
    """Base exception for all UIGen errors."""
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(UIGenError):
    """Invalid input."""
    status_code = 400


class AuthenticationError(UIGenError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(UIGenError):
    status_code = 403

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class NotFoundError(UIGenError):
    status_code = 404

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ConflictError(UIGenError):
    status_code = 409


class PayloadTooLargeError(UIGenError):
    status_code = 413

    def __init__(self, limit: int):
        super().__init__(f"Request body exceeds {limit} bytes", {"limit": limit})
        self.limit = limit


class RateLimitError(UIGenError):
    status_code = 429

    def __init__(self, message: str = "Too many requests"):
        super().__init__(message)


# ---------------------------------------------------------------------------
# AI PROVIDERS
# ---------------------------------------------------------------------------

class LLMError(UIGenError):
    """AI provider error."""
    status_code = 502

    def __init__(self, provider: str, message: str):
        super().__init__(
            f"LLM error ({provider}): {message}",
            {"provider": provider}
        )
        self.provider = provider


class ProviderRateLimitError(LLMError):
    """A provider's own request budget is exhausted."""
    status_code = 429

    def __init__(self, provider: str, count: int, limit: int, window: str):
        super().__init__(
            provider,
            f"Rate limit exceeded: {count}/{limit} requests per {window}"
        )
        self.details.update({"count": count, "limit": limit, "window": window})
        self.window = window


class ProviderNotInitializedError(LLMError):
    status_code = 503

    def __init__(self, provider: str):
        super().__init__(provider, "provider is not initialized")


class NoHealthyProviderError(UIGenError):
    status_code = 503

    def __init__(self, message: str = "No healthy AI providers available"):
        super().__init__(message)


# ---------------------------------------------------------------------------
# VIRTUAL FILE SYSTEM
# ---------------------------------------------------------------------------

class FileSystemError(UIGenError):
    """Virtual file system error."""
    def __init__(self, path: str, message: str):
        super().__init__(message, {"path": path})
        self.path = path


class PathNotFoundError(FileSystemError, NotFoundError):
    status_code = 404


class PathExistsError(FileSystemError, ConflictError):
    status_code = 409


class DirectoryNotEmptyError(FileSystemError, ConflictError):
    status_code = 409


class InvalidPathError(FileSystemError, ValidationError):
    status_code = 400
