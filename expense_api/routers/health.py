"""
Health Check Router
Simple health check endpoint
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from expense_api.core.config import settings
from expense_api.core.services import Services, get_services

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(services: Services = Depends(get_services)):
    """
    Health check endpoint.
    Reports whether the daily store is reachable and which hosted models are configured.
    """
    try:
        storage = services.store.describe()
    except Exception as e:
        logger.error(f"Storage check failed: {str(e)}")
        storage = {"accessible": False, "error": str(e)}

    ai = services.ai_client.describe() if services.ai_client is not None else {"enabled": False}

    return {
        "status": "healthy" if storage.get("accessible") else "degraded",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "storage": storage,
        "ai": ai,
    }
