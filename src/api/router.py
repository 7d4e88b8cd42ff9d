from fastapi import APIRouter

from src.api.health.router import router as health_router
from src.api.user.router import router as user_router

# Main API router
api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(user_router)
