"""Debug probes, mounted only outside production."""

from fastapi import APIRouter, Depends
from libs.common.responses import ApiResponse, CamelModel
from libs.db.session import get_async_db
from services.catalog_service.routers._helpers import build_product_response
from services.catalog_service.schemas import CatalogCounts, ProductResponse
from services.catalog_service.services.product_ops import catalog_counts
from services.catalog_service.services.query import ProductQuery, list_products
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/debug", tags=["debug"])

SAMPLE_SIZE = 3


class CatalogSnapshot(CamelModel):
    counts: CatalogCounts
    samples: list[ProductResponse]


@router.get("/products", response_model=ApiResponse[CatalogSnapshot])
async def debug_products(db: AsyncSession = Depends(get_async_db)):
    """Product counts and a few active samples, for checking a deployment's data."""
    counts = await catalog_counts(db)
    page = await list_products(db, ProductQuery.from_params(limit=str(SAMPLE_SIZE)))
    return ApiResponse[CatalogSnapshot](
        data=CatalogSnapshot(
            counts=CatalogCounts(**counts),
            samples=[build_product_response(p) for p in page.items],
        )
    )
