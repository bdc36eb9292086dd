"""Accounts service routers."""

from services.accounts_service.routers.users import router as users_router

__all__ = ["users_router"]
