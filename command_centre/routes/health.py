"""
Health check route for the Agency Command Centre API.

PUBLIC endpoint (no authentication) used by load balancers and deployment
checks. It never touches Supabase.
"""

from fastapi import APIRouter

from command_centre.schemas.health import HealthResponse
from command_centre.utils.logging import get_logger

logger = get_logger(__name__)

# Mounted at root level in main.py
router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description="Public health check (no authentication required).",
    status_code=200,
)
async def health_check() -> HealthResponse:
    """
    Returns:
        HealthResponse: {"status": "ok", "service": "agency-command-centre"}
    """
    logger.debug("Health check endpoint called")

    return HealthResponse(status="ok")
