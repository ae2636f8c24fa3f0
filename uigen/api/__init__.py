# uigen/api/__init__.py
"""
API module - All route handlers.
"""
from . import ai, auth, files, health, projects, users, websocket

__all__ = [
    "ai",
    "auth",
    "files",
    "health",
    "projects",
    "users",
    "websocket",
]
