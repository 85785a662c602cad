from fastapi import APIRouter

from src.api.health.router import router as health_router, root_router
from src.api.predictions.router import router as predictions_router
from src.api.rent.router import router as rent_router
from src.api.users.router import router as users_router

# Main API router; paths are unversioned to match the existing frontend
api_router = APIRouter()
api_router.include_router(root_router)
api_router.include_router(health_router)
api_router.include_router(rent_router)
api_router.include_router(predictions_router)
api_router.include_router(users_router)
