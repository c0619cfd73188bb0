"""
Health Check API Endpoints for Configuration Validation
GET /api/v1/health/config - Validation status of every required config file
"""

import logging
from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter
from pydantic import BaseModel

from ...services.config.configuration_service import get_config_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


class ConfigHealthResponse(BaseModel):
    """Response model for config health check"""
    status: str
    configs: Dict[str, bool]
    last_check: str


@router.get("/config", response_model=ConfigHealthResponse)
async def get_config_health():
    """
    Get overall configuration health status

    Example:
        GET /api/v1/health/config

        Response:
        {
            "status": "healthy",
            "configs": {"search_config": true, "settings": true},
            "last_check": "2026-01-28T10:30:00+00:00"
        }
    """
    results = get_config_service().validate_all()
    status = "healthy" if all(results.values()) else "unhealthy"

    if status != "healthy":
        logger.warning(f"Config health check failed: {results}")

    return ConfigHealthResponse(
        status=status,
        configs=results,
        last_check=datetime.now(timezone.utc).isoformat()
    )
