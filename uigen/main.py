# uigen/main.py
"""
UIGen Backend - FastAPI application factory.
"""
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

# Rate limiting
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from uigen import __version__
from uigen.api.errors import register_error_handlers
from uigen.api.middleware import register_middleware
from uigen.api.router import register_routes
from uigen.core.config import Settings, settings as default_settings
from uigen.core.logging import log
from uigen.core.services import Services
from uigen.lib.monitoring import register_monitoring


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    services = Services(settings)

    # ---------------------------------------------------------------------------
    # LIFESPAN
    # ---------------------------------------------------------------------------

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application startup and shutdown."""
        await services.startup()
        yield
        await services.shutdown()

    app = FastAPI(
        title="UIGen Vue API",
        description="AI-powered Vue component generator API",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url=None,
        openapi_url="/api/v1/openapi.json",
        lifespan=lifespan,
    )
    app.state.services = services

    # Monitoring
    register_monitoring(app, services.registry)

    register_middleware(app, settings)

    # Rate Limiting - protect against API abuse
    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.server.rate_limit])
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    log("SERVER", f"🛡️ Rate limiting enabled: {settings.server.rate_limit}")

    # CORS runs first so preflight requests never count against the limit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    register_routes(app)
    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "uigen.main:app",
        host="0.0.0.0",
        port=default_settings.server.port,
        reload=default_settings.server.is_development,
    )


if __name__ == "__main__":
    run()
