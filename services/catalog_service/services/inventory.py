"""Inventory arithmetic and the values derived from a product's numbers.

Everything here is pure: callers pass plain values (or any object exposing
the product attributes) and persist the result themselves.
"""

import math
from typing import Optional

from services.catalog_service.models.enums import (
    InventoryOperation,
    ProductStatus,
    StockStatus,
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def apply_inventory_operation(
    current: int, quantity: int, operation: InventoryOperation = InventoryOperation.SET
) -> int:
    """Return the new on-hand quantity; the result is never negative."""
    operation = InventoryOperation(operation)
    if operation is InventoryOperation.ADD:
        return max(0, current + quantity)
    if operation is InventoryOperation.SUBTRACT:
        return max(0, current - quantity)
    return max(0, quantity)


def compute_stock_status(
    quantity: int, track_quantity: bool, low_stock_threshold: int
) -> StockStatus:
    if not track_quantity:
        return StockStatus.UNLIMITED
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= low_stock_threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def stock_status_of(product) -> StockStatus:
    return compute_stock_status(
        product.quantity, product.track_quantity, product.low_stock_threshold
    )


def is_available(product, requested_quantity: int = 1) -> bool:
    """Whether ``requested_quantity`` units can be sold right now."""
    if not product.track_quantity:
        return True
    if ProductStatus(product.status) is not ProductStatus.ACTIVE:
        return False
    if product.quantity >= requested_quantity:
        return True
    return bool(product.allow_backorder)


def discount_percentage(price: float, compare_price: Optional[float]) -> int:
    if compare_price and compare_price > price:
        return _round_half_up((compare_price - price) / compare_price * 100)
    return 0


def profit_margin(price: float, cost_price: Optional[float]) -> int:
    if cost_price and cost_price > 0 and price > 0:
        return _round_half_up((price - cost_price) / price * 100)
    return 0
