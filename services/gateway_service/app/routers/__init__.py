"""Gateway routers."""

from services.gateway_service.app.routers.debug import router as debug_router

__all__ = ["debug_router"]
