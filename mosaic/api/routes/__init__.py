"""API routes for the mosaic service."""

from fastapi import APIRouter

from mosaic.api.routes.health import router as health_router
from mosaic.api.routes.images import router as images_router
from mosaic.api.routes.placements import router as placements_router
from mosaic.api.routes.snapping import router as snapping_router

# Main API router
api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(placements_router, prefix="/placements", tags=["Placements"])
api_router.include_router(images_router, prefix="/images", tags=["Images"])
api_router.include_router(snapping_router, prefix="/snap", tags=["Snapping"])

__all__ = ["api_router"]
