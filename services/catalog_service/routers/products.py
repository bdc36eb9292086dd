"""Product catalog router: listing, search, CRUD and inventory."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.identifiers import parse_id
from libs.common.responses import ApiResponse, PaginatedResponse
from libs.db.session import get_async_db
from pydantic import ValidationError
from services.catalog_service.routers._helpers import (
    actor_id,
    build_inventory_result,
    build_product_response,
    page_meta,
)
from services.catalog_service.schemas import (
    InventoryResult,
    InventoryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from services.catalog_service.services import product_ops
from services.catalog_service.services.query import (
    PageWindow,
    ProductQuery,
    list_products,
    search_products,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/products", tags=["products"])

PRODUCT_ID = "product ID"


def _inventory_update(payload) -> InventoryUpdate:
    """Validate an inventory body, reporting which of the two fields is wrong."""
    try:
        return InventoryUpdate.model_validate(payload)
    except ValidationError as exc:
        fields = {err["loc"][0] for err in exc.errors() if err["loc"]}
        if not fields or "quantity" in fields:
            detail = "Valid quantity is required"
        else:
            detail = "Invalid operation. Use set, add or subtract"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.get("", response_model=PaginatedResponse[ProductResponse])
async def browse_products(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    subcategory: Optional[str] = None,
    featured: Optional[str] = None,
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    search: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: AsyncSession = Depends(get_async_db),
):
    """Browse products with filtering, sorting and pagination.

    Parameters arrive as raw strings; malformed numbers are ignored.
    """
    query = ProductQuery.from_params(
        status=status_filter,
        category=category,
        subcategory=subcategory,
        featured=featured,
        min_price=min_price,
        max_price=max_price,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    result = await list_products(db, query)

    return PaginatedResponse[ProductResponse](
        data=[build_product_response(p) for p in result.items],
        pagination=page_meta(result, query.window.limit),
    )


@router.get("/search/{search}", response_model=PaginatedResponse[ProductResponse])
async def search_catalog(
    search: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: AsyncSession = Depends(get_async_db),
):
    """Free-text search over active products."""
    window = PageWindow.from_params(page, limit)
    result = await search_products(db, search, window)

    return PaginatedResponse[ProductResponse](
        data=[build_product_response(p) for p in result.items],
        pagination=page_meta(result, window.limit),
    )


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_async_db),
):
    """Get a single product by ID, whatever its status."""
    product = await product_ops.get_product_or_404(db, parse_id(product_id, PRODUCT_ID))
    return ApiResponse[ProductResponse](data=build_product_response(product))


@router.post(
    "",
    response_model=ApiResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    payload: ProductCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a new product."""
    product = await product_ops.create_product(
        db, payload, actor_id=actor_id(current_user)
    )
    return ApiResponse[ProductResponse](
        message="Product created successfully",
        data=build_product_response(product),
    )


@router.put("/{product_id}", response_model=ApiResponse[ProductResponse])
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Update an existing product; omitted fields stay untouched."""
    product = await product_ops.update_product(
        db,
        parse_id(product_id, PRODUCT_ID),
        payload,
        actor_id=actor_id(current_user),
    )
    return ApiResponse[ProductResponse](
        message="Product updated successfully",
        data=build_product_response(product),
    )


@router.delete("/{product_id}", response_model=ApiResponse[ProductResponse])
async def archive_product(
    product_id: str,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Archive a product. Products are never physically removed."""
    product = await product_ops.archive_product(
        db, parse_id(product_id, PRODUCT_ID), actor_id=actor_id(current_user)
    )
    return ApiResponse[ProductResponse](
        message="Product archived successfully",
        data=build_product_response(product),
    )


@router.patch("/{product_id}/inventory", response_model=ApiResponse[InventoryResult])
async def update_inventory(
    product_id: str,
    payload: dict = Body(...),
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Set, add to or subtract from the on-hand quantity."""
    update = _inventory_update(payload)
    product = await product_ops.update_inventory(
        db,
        parse_id(product_id, PRODUCT_ID),
        update.quantity,
        update.operation,
        actor_id=actor_id(current_user),
    )
    return ApiResponse[InventoryResult](
        message="Inventory updated successfully",
        data=build_inventory_result(product),
    )
