"""Accounts service models package."""

from services.accounts_service.models.enums import UserRole
from services.accounts_service.models.user import User

__all__ = ["User", "UserRole"]
