from fastapi import APIRouter

from .endpoints import generation, health

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(generation.router, prefix="/ai", tags=["ai"])
