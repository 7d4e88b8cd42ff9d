"""Health check endpoint for monitoring."""

from dataclasses import asdict

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from src.api.core.dependencies import HealthServiceDep

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check(health_service: HealthServiceDep) -> JSONResponse:
    """Liveness plus database connectivity check."""
    result = await health_service.run_all_checks()
    status_code = (
        status.HTTP_200_OK
        if result.status == "healthy"
        else status.HTTP_503_SERVICE_UNAVAILABLE
    )
    return JSONResponse(status_code=status_code, content=asdict(result))
