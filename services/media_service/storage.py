"""Storage backends for uploaded product images (local disk or database blobs)."""

import asyncio
import mimetypes
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from libs.common.config import Settings, get_settings
from libs.common.logging import get_logger
from services.media_service.models import StoredImage
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

IMAGE_ROUTE = "/api/upload/images"


@dataclass
class StoredFile:
    filename: str
    content_type: str
    data: bytes


def generate_filename(original: Optional[str], content_type: str) -> str:
    """Build a collision-free name such as ``images-1718000000000-3f9a1c.png``."""
    suffix = Path(original or "").suffix.lower()
    if not suffix or len(suffix) > 10:
        suffix = mimetypes.guess_extension(content_type) or ""
    return f"images-{int(time.time() * 1000)}-{secrets.token_hex(6)}{suffix}"


def is_safe_filename(filename: str) -> bool:
    """Reject anything that could escape the upload directory."""
    return bool(filename) and Path(filename).name == filename and filename not in (".", "..")


def public_url(filename: str) -> str:
    return f"{IMAGE_ROUTE}/{filename}"


class StorageService:
    """Writes, reads and removes image bytes through the configured backend.

    ``disk`` keeps files under ``UPLOAD_DIR``; ``database`` keeps them in the
    ``stored_images`` table so multiple instances share one store.
    """

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.backend = settings.STORAGE_BACKEND
        self.upload_dir = Path(settings.UPLOAD_DIR)

    async def save(
        self,
        db: AsyncSession,
        data: bytes,
        original_name: Optional[str],
        content_type: str,
    ) -> str:
        """Store ``data`` and return the generated filename."""
        filename = generate_filename(original_name, content_type)

        if self.backend == "database":
            db.add(
                StoredImage(
                    filename=filename,
                    content_type=content_type,
                    size=len(data),
                    data=data,
                )
            )
            await db.commit()
        elif self.backend == "disk":
            await asyncio.to_thread(self._write_file, filename, data)
        else:
            raise ValueError(f"Unknown storage backend: {self.backend}")

        logger.info("Stored %s (%d bytes, %s)", filename, len(data), self.backend)
        return filename

    async def open(self, db: AsyncSession, filename: str) -> Optional[StoredFile]:
        if not is_safe_filename(filename):
            return None

        if self.backend == "database":
            result = await db.execute(
                select(StoredImage).where(StoredImage.filename == filename)
            )
            stored = result.scalar_one_or_none()
            if stored is None:
                return None
            return StoredFile(
                filename=stored.filename,
                content_type=stored.content_type,
                data=stored.data,
            )

        path = self.upload_dir / filename
        if not path.is_file():
            return None
        data = await asyncio.to_thread(path.read_bytes)
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        return StoredFile(filename=filename, content_type=content_type, data=data)

    async def delete(self, db: AsyncSession, filename: str) -> bool:
        """Remove a stored image. Returns False when nothing was there."""
        if not is_safe_filename(filename):
            return False

        if self.backend == "database":
            result = await db.execute(
                delete(StoredImage).where(StoredImage.filename == filename)
            )
            await db.commit()
            removed = result.rowcount > 0
        else:
            path = self.upload_dir / filename
            removed = path.is_file()
            if removed:
                await asyncio.to_thread(path.unlink)

        if removed:
            logger.info("Deleted stored image %s", filename)
        return removed

    def _write_file(self, filename: str, data: bytes) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        (self.upload_dir / filename).write_bytes(data)


def get_storage_service() -> StorageService:
    """FastAPI dependency; built per request so settings overrides apply."""
    return StorageService()
