"""Upload router: product image upload, retrieval and removal."""

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.responses import ApiResponse
from libs.db.session import get_async_db
from services.media_service.schemas import Base64UploadRequest, UploadedImage
from services.media_service.services.uploads import (
    IncomingImage,
    inline_images,
    store_images,
)
from services.media_service.storage import StorageService, get_storage_service
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(prefix="/upload", tags=["uploads"])


def _check_file_count(count: int) -> None:
    max_files = get_settings().MAX_UPLOAD_FILES
    if count > max_files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Too many files. Maximum is {max_files}",
        )


def _upload_response(outcome) -> ApiResponse[list[UploadedImage]]:
    return ApiResponse[list[UploadedImage]](
        message=f"{len(outcome.images)} image(s) uploaded successfully",
        data=outcome.images,
        errors=outcome.errors or None,
    )


@router.post("/images", response_model=ApiResponse[list[UploadedImage]])
async def upload_images(
    images: list[UploadFile] = File(...),
    current_user: AuthUser = Depends(require_admin),
    storage: StorageService = Depends(get_storage_service),
    db: AsyncSession = Depends(get_async_db),
):
    """Upload product images as multipart ``images`` fields."""
    _check_file_count(len(images))
    max_bytes = get_settings().MAX_UPLOAD_BYTES

    incoming = []
    for upload in images:
        # One byte past the limit is enough to know it is too large
        data = await upload.read(max_bytes + 1)
        incoming.append(
            IncomingImage(
                filename=upload.filename or "upload",
                content_type=upload.content_type or "",
                data=data,
            )
        )

    outcome = await store_images(db, storage, incoming, max_bytes=max_bytes)
    logger.info(
        "User %s uploaded %d image(s), %d rejected",
        current_user.user_id,
        len(outcome.images),
        len(outcome.errors),
    )
    return _upload_response(outcome)


@router.post("/base64", response_model=ApiResponse[list[UploadedImage]])
async def upload_base64(
    payload: Base64UploadRequest,
    current_user: AuthUser = Depends(require_admin),
):
    """Accept base64 images and echo them back as data URIs (no storage)."""
    _check_file_count(len(payload.images))
    outcome = inline_images(payload.images, max_bytes=get_settings().MAX_UPLOAD_BYTES)
    return _upload_response(outcome)


@router.get("/images/{filename}")
async def get_image(
    filename: str,
    storage: StorageService = Depends(get_storage_service),
    db: AsyncSession = Depends(get_async_db),
):
    """Serve stored image bytes with their content type."""
    stored = await storage.open(db, filename)
    if stored is None:
        raise HTTPException(status_code=404, detail="Image not found")
    return Response(
        content=stored.data,
        media_type=stored.content_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )


@router.delete("/images/{filename}", response_model=ApiResponse[None])
async def delete_image(
    filename: str,
    current_user: AuthUser = Depends(require_admin),
    storage: StorageService = Depends(get_storage_service),
    db: AsyncSession = Depends(get_async_db),
):
    """Remove a stored image."""
    if not await storage.delete(db, filename):
        raise HTTPException(status_code=404, detail="Image not found")
    return ApiResponse[None](message="Image deleted successfully")
