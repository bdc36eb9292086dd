"""Product persistence: create, update, archive and inventory changes.

Derived state (primary image flag) is normalized here, explicitly, right
before every write.
"""

import uuid
from typing import Optional

from fastapi import HTTPException, status
from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.catalog_service.models import (
    InventoryOperation,
    Product,
    ProductImage,
    ProductStatus,
)
from services.catalog_service.schemas import (
    ProductCreate,
    ProductImageIn,
    ProductUpdate,
)
from services.catalog_service.services.images import normalize_primary_image
from services.catalog_service.services.inventory import (
    apply_inventory_operation,
    stock_status_of,
)
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DUPLICATE_SKU = "SKU already exists"

UPDATABLE_FIELDS = (
    "name",
    "description",
    "short_description",
    "sku",
    "category",
    "subcategory",
    "tags",
    "price",
    "compare_price",
    "cost_price",
    "status",
    "featured",
)
NULLABLE_FIELDS = frozenset(
    {"short_description", "sku", "subcategory", "compare_price", "cost_price"}
)


def _build_images(images: list[ProductImageIn]) -> list[ProductImage]:
    return [
        ProductImage(url=image.url, alt=image.alt, is_primary=image.is_primary)
        for image in images
    ]


def _placeholder_images() -> list[ProductImage]:
    url = get_settings().DEFAULT_PRODUCT_IMAGE_URL
    if not url:
        return []
    return [ProductImage(url=url, alt="Product image", is_primary=True)]


def prepare_for_save(product: Product) -> Product:
    """Normalize primary image flags and display order before a write."""
    normalize_primary_image(product.images)
    for position, image in enumerate(product.images):
        image.sort_order = position
    return product


async def _sku_taken(
    db: AsyncSession, sku: Optional[str], exclude_id: Optional[uuid.UUID] = None
) -> bool:
    if not sku:
        return False
    query = select(Product.id).where(Product.sku == sku)
    if exclude_id is not None:
        query = query.where(Product.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def _commit(db: AsyncSession, product: Product) -> Product:
    prepare_for_save(product)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_SKU)
    await db.refresh(product)
    return product


async def get_product_or_404(db: AsyncSession, product_id: uuid.UUID) -> Product:
    result = await db.execute(select(Product).where(Product.id == product_id))
    product = result.scalar_one_or_none()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


async def create_product(
    db: AsyncSession, data: ProductCreate, *, actor_id: Optional[uuid.UUID]
) -> Product:
    if await _sku_taken(db, data.sku):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_SKU)

    product = Product(
        name=data.name,
        description=data.description,
        short_description=data.short_description,
        sku=data.sku,
        category=data.category,
        subcategory=data.subcategory,
        tags=data.tags,
        price=data.price,
        compare_price=data.compare_price,
        cost_price=data.cost_price,
        quantity=data.inventory.quantity,
        track_quantity=data.inventory.track_quantity,
        allow_backorder=data.inventory.allow_backorder,
        low_stock_threshold=data.inventory.low_stock_threshold,
        weight=data.dimensions.weight,
        length=data.dimensions.length,
        width=data.dimensions.width,
        height=data.dimensions.height,
        seo_title=data.seo.title,
        seo_description=data.seo.description,
        seo_keywords=data.seo.keywords,
        status=data.status,
        featured=data.featured,
        created_by=actor_id,
        images=_build_images(data.images) or _placeholder_images(),
    )
    db.add(product)
    product = await _commit(db, product)

    logger.info("Created product %s (sku=%s)", product.id, product.sku)
    return product


async def update_product(
    db: AsyncSession,
    product_id: uuid.UUID,
    data: ProductUpdate,
    *,
    actor_id: Optional[uuid.UUID],
) -> Product:
    product = await get_product_or_404(db, product_id)
    changes = data.model_dump(exclude_unset=True)

    if "sku" in changes and changes["sku"] != product.sku:
        if await _sku_taken(db, changes["sku"], exclude_id=product.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_SKU
            )

    for field in UPDATABLE_FIELDS:
        if field not in changes:
            continue
        if changes[field] is None and field not in NULLABLE_FIELDS:
            continue
        setattr(product, field, changes[field])

    if data.inventory is not None:
        for field, value in data.inventory.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(product, field, value)

    if data.dimensions is not None:
        for field, value in data.dimensions.model_dump(exclude_unset=True).items():
            setattr(product, field, value)

    if data.seo is not None:
        seo = data.seo.model_dump(exclude_unset=True)
        if "title" in seo:
            product.seo_title = seo["title"]
        if "description" in seo:
            product.seo_description = seo["description"]
        if "keywords" in seo:
            product.seo_keywords = seo["keywords"]

    if data.images is not None:
        product.images = _build_images(data.images)

    product.updated_by = actor_id
    product = await _commit(db, product)

    logger.info("Updated product %s", product.id)
    return product


async def archive_product(
    db: AsyncSession, product_id: uuid.UUID, *, actor_id: Optional[uuid.UUID]
) -> Product:
    """Soft delete: the row stays, only the status changes."""
    product = await get_product_or_404(db, product_id)
    product.status = ProductStatus.ARCHIVED
    product.updated_by = actor_id
    await db.commit()
    await db.refresh(product)

    logger.info("Archived product %s", product.id)
    return product


async def update_inventory(
    db: AsyncSession,
    product_id: uuid.UUID,
    quantity: int,
    operation: InventoryOperation = InventoryOperation.SET,
    *,
    actor_id: Optional[uuid.UUID] = None,
) -> Product:
    product = await get_product_or_404(db, product_id)

    old_quantity = product.quantity
    product.quantity = apply_inventory_operation(old_quantity, quantity, operation)
    product.updated_by = actor_id
    await db.commit()
    await db.refresh(product)

    logger.info(
        "Inventory for product %s: %d -> %d (%s %d), status=%s",
        product.id,
        old_quantity,
        product.quantity,
        InventoryOperation(operation).value,
        quantity,
        stock_status_of(product).value,
    )
    return product


async def catalog_counts(db: AsyncSession) -> dict[str, int]:
    async def _count(*conditions) -> int:
        query = select(func.count()).select_from(Product)
        if conditions:
            query = query.where(*conditions)
        return (await db.execute(query)).scalar() or 0

    return {
        "total": await _count(),
        "active": await _count(Product.status == ProductStatus.ACTIVE),
        "featured": await _count(
            Product.featured.is_(True), Product.status == ProductStatus.ACTIVE
        ),
    }
