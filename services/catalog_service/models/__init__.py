"""Catalog service models package."""

from services.catalog_service.models.catalog import Product, ProductImage
from services.catalog_service.models.enums import (
    InventoryOperation,
    ProductStatus,
    StockStatus,
)

__all__ = [
    "InventoryOperation",
    "Product",
    "ProductImage",
    "ProductStatus",
    "StockStatus",
]
