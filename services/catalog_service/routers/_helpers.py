"""Shared helpers for catalog routers."""

import uuid
from typing import Optional

from libs.auth.models import AuthUser
from libs.common.responses import PaginationMeta
from services.catalog_service.models import Product
from services.catalog_service.schemas import (
    Dimensions,
    InventoryResponse,
    InventoryResult,
    ProductImageResponse,
    ProductResponse,
    Seo,
)
from services.catalog_service.services.inventory import (
    discount_percentage,
    is_available,
    profit_margin,
    stock_status_of,
)
from services.catalog_service.services.query import ProductPage


def actor_id(user: Optional[AuthUser]) -> Optional[uuid.UUID]:
    if user is None:
        return None
    try:
        return uuid.UUID(user.user_id)
    except ValueError:
        return None


def _inventory_response(product: Product) -> InventoryResponse:
    return InventoryResponse(
        quantity=product.quantity,
        track_quantity=product.track_quantity,
        allow_backorder=product.allow_backorder,
        low_stock_threshold=product.low_stock_threshold,
    )


def build_product_response(product: Product) -> ProductResponse:
    """Flatten columns into nested documents and attach derived fields."""
    return ProductResponse(
        id=product.id,
        name=product.name,
        description=product.description,
        short_description=product.short_description,
        sku=product.sku,
        category=product.category,
        subcategory=product.subcategory,
        tags=product.tags or [],
        price=product.price,
        compare_price=product.compare_price,
        cost_price=product.cost_price,
        images=[
            ProductImageResponse(url=i.url, alt=i.alt or "", is_primary=i.is_primary)
            for i in product.images
        ],
        inventory=_inventory_response(product),
        dimensions=Dimensions(
            weight=product.weight,
            length=product.length,
            width=product.width,
            height=product.height,
        ),
        seo=Seo(
            title=product.seo_title,
            description=product.seo_description,
            keywords=product.seo_keywords or [],
        ),
        status=product.status,
        featured=product.featured,
        created_by=product.created_by,
        updated_by=product.updated_by,
        created_at=product.created_at,
        updated_at=product.updated_at,
        stock_status=stock_status_of(product),
        discount_percentage=discount_percentage(product.price, product.compare_price),
        profit_margin=profit_margin(product.price, product.cost_price),
        is_available=is_available(product),
    )


def build_inventory_result(product: Product) -> InventoryResult:
    return InventoryResult(
        id=product.id,
        name=product.name,
        inventory=_inventory_response(product),
        stock_status=stock_status_of(product),
    )


def page_meta(page: ProductPage, limit: int) -> PaginationMeta:
    return PaginationMeta.build(
        page=page.current_page,
        limit=limit,
        count=page.item_count,
        total_records=page.total_records,
    )
