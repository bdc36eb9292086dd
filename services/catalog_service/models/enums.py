"""Enum definitions for catalog models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class ProductStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class StockStatus(str, enum.Enum):
    UNLIMITED = "unlimited"
    OUT_OF_STOCK = "out-of-stock"
    LOW_STOCK = "low-stock"
    IN_STOCK = "in-stock"


class InventoryOperation(str, enum.Enum):
    SET = "set"
    ADD = "add"
    SUBTRACT = "subtract"
