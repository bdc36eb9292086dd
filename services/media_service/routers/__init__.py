"""Media service routers package."""

from services.media_service.routers.uploads import router as uploads_router

__all__ = ["uploads_router"]
