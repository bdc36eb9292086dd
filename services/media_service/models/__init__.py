"""Media Service models package."""

from services.media_service.models.stored_image import StoredImage

__all__ = ["StoredImage"]
