"""
Version and metadata endpoint
"""
from fastapi import APIRouter
from portal.core.config import settings
from portal.core.constants import SERVICE_NAME, SYSTEM_CREDIT

router = APIRouter()


@router.get("/version")
async def get_version():
    """
    Get application version and metadata

    Returns:
        Version information including service name, version, environment, and credit
    """
    return {
        "service": SERVICE_NAME,
        "version": settings.VERSION or "1.0.0",
        "env": settings.APP_ENV,
        "credit": SYSTEM_CREDIT
    }
