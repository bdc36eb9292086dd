"""Pydantic schemas for the catalog service."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.responses import CamelModel
from pydantic import ConfigDict, Field, field_validator
from services.catalog_service.models import (
    InventoryOperation,
    ProductStatus,
    StockStatus,
)


class _Input(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)


def _clean_tags(values: Optional[list[str]]) -> Optional[list[str]]:
    if values is None:
        return None
    seen: list[str] = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.append(value)
    return seen


def _normalize_sku(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().upper()
    return value or None


# ============================================================================
# NESTED DOCUMENTS
# ============================================================================


class ProductImageIn(_Input):
    url: str = Field(..., min_length=1)
    alt: str = Field("", max_length=255)
    is_primary: bool = False


class InventoryIn(_Input):
    quantity: int = Field(0, ge=0)
    track_quantity: bool = True
    allow_backorder: bool = False
    low_stock_threshold: int = Field(10, ge=0)


class InventoryPatch(_Input):
    quantity: Optional[int] = Field(None, ge=0)
    track_quantity: Optional[bool] = None
    allow_backorder: Optional[bool] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0)


class Dimensions(_Input):
    weight: Optional[float] = Field(None, ge=0)
    length: Optional[float] = Field(None, ge=0)
    width: Optional[float] = Field(None, ge=0)
    height: Optional[float] = Field(None, ge=0)


class Seo(_Input):
    title: Optional[str] = Field(None, max_length=60)
    description: Optional[str] = Field(None, max_length=160)
    keywords: list[str] = Field(default_factory=list)

    @field_validator("keywords")
    @classmethod
    def clean_keywords(cls, v):
        return _clean_tags(v)


# ============================================================================
# PRODUCT REQUESTS
# ============================================================================


class ProductCreate(_Input):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=2000)
    short_description: Optional[str] = Field(None, max_length=500)
    price: float = Field(..., ge=0)
    compare_price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=64)
    category: str = Field(..., min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    tags: list[str] = Field(default_factory=list)
    images: list[ProductImageIn] = Field(default_factory=list)
    inventory: InventoryIn = Field(default_factory=InventoryIn)
    dimensions: Dimensions = Field(default_factory=Dimensions)
    seo: Seo = Field(default_factory=Seo)
    status: ProductStatus = ProductStatus.DRAFT
    featured: bool = False

    @field_validator("sku")
    @classmethod
    def normalize_sku(cls, v):
        return _normalize_sku(v)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)


class ProductUpdate(_Input):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    short_description: Optional[str] = Field(None, max_length=500)
    price: Optional[float] = Field(None, ge=0)
    compare_price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=64)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    tags: Optional[list[str]] = None
    images: Optional[list[ProductImageIn]] = None
    inventory: Optional[InventoryPatch] = None
    dimensions: Optional[Dimensions] = None
    seo: Optional[Seo] = None
    status: Optional[ProductStatus] = None
    featured: Optional[bool] = None

    @field_validator("sku")
    @classmethod
    def normalize_sku(cls, v):
        return _normalize_sku(v)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)


class InventoryUpdate(_Input):
    quantity: int = Field(..., ge=0, description="Amount to set, add or subtract")
    operation: InventoryOperation = InventoryOperation.SET


# ============================================================================
# PRODUCT RESPONSES
# ============================================================================


class ProductImageResponse(CamelModel):
    url: str
    alt: str = ""
    is_primary: bool = False


class InventoryResponse(CamelModel):
    quantity: int
    track_quantity: bool
    allow_backorder: bool
    low_stock_threshold: int


class ProductResponse(CamelModel):
    id: uuid.UUID
    name: str
    description: str
    short_description: Optional[str] = None
    sku: Optional[str] = None
    category: str
    subcategory: Optional[str] = None
    tags: list[str] = []
    price: float
    compare_price: Optional[float] = None
    cost_price: Optional[float] = None
    images: list[ProductImageResponse] = []
    inventory: InventoryResponse
    dimensions: Dimensions
    seo: Seo
    status: ProductStatus
    featured: bool
    created_by: Optional[uuid.UUID] = None
    updated_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    # Derived
    stock_status: StockStatus
    discount_percentage: int = 0
    profit_margin: int = 0
    is_available: bool


class InventoryResult(CamelModel):
    id: uuid.UUID
    name: str
    inventory: InventoryResponse
    stock_status: StockStatus


class CatalogCounts(CamelModel):
    total: int
    active: int
    featured: int
