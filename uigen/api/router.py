# uigen/api/router.py
"""
Versioned API router.

Everything under /api/v1 is also served under /api for clients that do
not pin a version.
"""
from fastapi import APIRouter, FastAPI

from uigen.api import ai, auth, files, health, projects, users, websocket
from uigen.lib.api_utils import API_VERSION

v1_router = APIRouter()
v1_router.include_router(auth.router)
v1_router.include_router(projects.router)
v1_router.include_router(files.router)
v1_router.include_router(ai.router)
v1_router.include_router(users.router)

index_router = APIRouter(tags=["Index"])


@index_router.get("/api")
async def api_index():
    version = API_VERSION["CURRENT"]
    return {
        "name": "UIGen Vue API",
        "version": version,
        "description": "AI-powered Vue component generator API",
        "endpoints": {
            "auth": f"/api/{version}/auth",
            "projects": f"/api/{version}/projects",
            "files": f"/api/{version}/files",
            "ai": f"/api/{version}/ai",
            "users": f"/api/{version}/users",
        },
        "documentation": f"/api/{version}/docs",
        "health": "/health",
        "websocket": "/ws",
    }


def register_routes(app: FastAPI) -> None:
    app.include_router(health.router)
    app.include_router(index_router)
    app.include_router(v1_router, prefix=f"/api/{API_VERSION['V1']}")
    app.include_router(v1_router, prefix="/api", include_in_schema=False)
    app.include_router(websocket.router)
