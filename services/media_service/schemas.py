"""Pydantic schemas for the media service."""

from typing import Optional

from libs.common.responses import CamelModel
from pydantic import Field


class UploadedImage(CamelModel):
    """Image descriptor ready to be attached to a product."""

    url: str
    alt: str = ""
    is_primary: bool = False


class Base64Image(CamelModel):
    data: str = Field(..., min_length=1)
    alt: Optional[str] = None
    filename: Optional[str] = None


class Base64UploadRequest(CamelModel):
    images: list[Base64Image] = Field(..., min_length=1)
