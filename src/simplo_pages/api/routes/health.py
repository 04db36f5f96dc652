"""Health check routes."""

import logging

from fastapi import APIRouter, Depends

from ... import __version__
from ..deps import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "healthy", "service": "simplo-pages-api", "version": __version__}


@router.get("/ready")
def ready(services: Services = Depends(get_services)):
    """Readiness check - verifies database is accessible."""
    try:
        services.db.ping()
        return {"status": "ready"}
    except Exception as e:
        logger.warning(f"Readiness check failed: {e}")
        return {"status": "not_ready", "detail": str(e)}
