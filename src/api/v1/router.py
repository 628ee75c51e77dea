from fastapi import APIRouter

from .endpoints import admin, health, images

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])

# Admin endpoints - all require the X-API-Key header
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])

# Public image access (latest image, per-date record)
api_router.include_router(images.router, prefix="/images", tags=["images"])
