"""Upload normalization: validate incoming images and describe accepted ones.

Both the multipart and base64 paths produce the same shape: a list of
``{url, alt, isPrimary}`` descriptors (first accepted image primary) plus a
list of per-file rejection reasons.
"""

import base64
import binascii
import re
from dataclasses import dataclass, field
from io import BytesIO
from typing import Optional

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from PIL import Image, UnidentifiedImageError
from services.media_service.schemas import Base64Image, UploadedImage
from services.media_service.storage import StorageService, public_url
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DATA_URI_RE = re.compile(
    r"^data:(?P<content_type>[\w.+-]+/[\w.+-]+)?(?:;[\w=.-]+)*;base64,(?P<payload>.*)$",
    re.DOTALL,
)


@dataclass
class IncomingImage:
    filename: str
    content_type: str
    data: bytes
    alt: Optional[str] = None


@dataclass
class UploadOutcome:
    images: list[UploadedImage] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def detect_image_type(data: bytes) -> Optional[str]:
    """Return the MIME type Pillow reads from ``data``, or None if it is not an image."""
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return None
    return Image.MIME.get(fmt or "", "image/octet-stream")


def rejection_reason(image: IncomingImage, max_bytes: int) -> Optional[str]:
    """Return why ``image`` is refused, or None when it is acceptable."""
    if not image.content_type.startswith("image/"):
        return f"{image.filename}: Only image files are allowed"
    if not image.data:
        return f"{image.filename}: File is empty"
    if len(image.data) > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        return f"{image.filename}: File exceeds the {limit_mb}MB limit"
    if detect_image_type(image.data) is None:
        return f"{image.filename}: File is not a valid image"
    return None


def decode_base64_image(item: Base64Image, index: int) -> IncomingImage:
    """Decode a data URI or bare base64 string.

    Raises ValueError with a per-file message when the payload is not base64.
    """
    filename = item.filename or f"image-{index + 1}"
    content_type = None
    payload = item.data.strip()

    match = DATA_URI_RE.match(payload)
    if match:
        content_type = match.group("content_type")
        payload = match.group("payload")
    elif payload.startswith("data:"):
        raise ValueError(f"{filename}: Malformed data URI")

    try:
        data = base64.b64decode(re.sub(r"\s+", "", payload), validate=True)
    except (binascii.Error, ValueError):
        raise ValueError(f"{filename}: Invalid base64 data")

    if content_type is None:
        # Bare base64 carries no type; sniff it
        content_type = detect_image_type(data) or "application/octet-stream"

    return IncomingImage(
        filename=filename,
        content_type=content_type,
        data=data,
        alt=item.alt,
    )


def _describe(url: str, alt: str, primary: bool) -> UploadedImage:
    return UploadedImage(url=url, alt=alt, is_primary=primary)


class UploadRejected(HTTPException):
    """Raised when no file in a request was accepted; carries per-file reasons."""

    def __init__(self, errors: list[str]):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid images were uploaded",
        )
        self.errors = errors


def ensure_any_accepted(outcome: UploadOutcome) -> UploadOutcome:
    """Fail the whole request when every file was rejected."""
    if not outcome.images:
        raise UploadRejected(outcome.errors)
    return outcome


async def store_images(
    db: AsyncSession,
    storage: StorageService,
    images: list[IncomingImage],
    *,
    max_bytes: int,
) -> UploadOutcome:
    """Validate each image, persist the accepted ones and describe them."""
    outcome = UploadOutcome()

    for image in images:
        reason = rejection_reason(image, max_bytes)
        if reason:
            logger.warning("Rejected upload %s", reason)
            outcome.errors.append(reason)
            continue

        filename = await storage.save(db, image.data, image.filename, image.content_type)
        outcome.images.append(
            _describe(
                public_url(filename),
                image.alt or image.filename,
                primary=not outcome.images,
            )
        )

    return ensure_any_accepted(outcome)


def inline_images(items: list[Base64Image], *, max_bytes: int) -> UploadOutcome:
    """Validate base64 images and return them as data URIs without storing anything."""
    outcome = UploadOutcome()

    for index, item in enumerate(items):
        try:
            image = decode_base64_image(item, index)
        except ValueError as exc:
            logger.warning("Rejected upload %s", exc)
            outcome.errors.append(str(exc))
            continue

        reason = rejection_reason(image, max_bytes)
        if reason:
            logger.warning("Rejected upload %s", reason)
            outcome.errors.append(reason)
            continue

        encoded = base64.b64encode(image.data).decode("ascii")
        outcome.images.append(
            _describe(
                f"data:{image.content_type};base64,{encoded}",
                image.alt or image.filename,
                primary=not outcome.images,
            )
        )

    return ensure_any_accepted(outcome)
