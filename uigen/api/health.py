# uigen/api/health.py
"""
Health check endpoints.
"""
from fastapi import APIRouter, Depends

from uigen.api.deps import get_services
from uigen.core.services import Services
from uigen.models.common import isoformat, utcnow

router = APIRouter(tags=["Health"])


@router.get("/health")
@router.get("/healthz")
async def health(services: Services = Depends(get_services)):
    """Liveness probe."""
    return {
        "status": "healthy",
        "timestamp": isoformat(utcnow()),
        "version": services.settings.server.version,
        "environment": services.settings.server.environment,
    }
