"""Product listing: raw query parameters to filter, order and page window."""

import math
import re
from dataclasses import dataclass, field
from typing import Optional

from services.catalog_service.models import Product, ProductStatus
from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement, Select

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

SORTABLE_FIELDS = {
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
    "name": Product.name,
    "price": Product.price,
    "category": Product.category,
    "featured": Product.featured,
    "quantity": Product.quantity,
}

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


# ---------------------------------------------------------------------------
# Lenient parsing: malformed values are dropped, never rejected
# ---------------------------------------------------------------------------


def parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def parse_float(value: Optional[str]) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    lowered = str(value).strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    return None


def parse_status(value: Optional[str]) -> ProductStatus:
    try:
        return ProductStatus(str(value).strip().lower())
    except ValueError:
        return ProductStatus.ACTIVE


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _contains(column, term: str) -> ColumnElement:
    return column.ilike(_like_pattern(term), escape="\\")


def search_terms(search: Optional[str]) -> list[str]:
    return [term for term in (search or "").split() if term]


def text_search_condition(terms: list[str]) -> ColumnElement:
    """Match when any term appears in name, descriptions or tags."""
    clauses = []
    for term in terms:
        clauses.extend(
            [
                _contains(Product.name, term),
                _contains(Product.description, term),
                _contains(Product.short_description, term),
                Product.tags_text.like(_like_pattern(term.lower()), escape="\\"),
            ]
        )
    return or_(*clauses)


# ---------------------------------------------------------------------------
# Query specification
# ---------------------------------------------------------------------------


@dataclass
class PageWindow:
    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT

    @classmethod
    def from_params(cls, page: Optional[str], limit: Optional[str]) -> "PageWindow":
        parsed_page = parse_int(page)
        parsed_limit = parse_int(limit)
        if parsed_page is None or parsed_page < 1:
            parsed_page = 1
        if parsed_limit is None or parsed_limit <= 0:
            parsed_limit = DEFAULT_PAGE_LIMIT
        return cls(page=parsed_page, limit=min(parsed_limit, MAX_PAGE_LIMIT))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class ProductQuery:
    status: ProductStatus = ProductStatus.ACTIVE
    category: Optional[str] = None
    subcategory: Optional[str] = None
    featured: Optional[bool] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    search: list[str] = field(default_factory=list)
    sort_by: str = "createdAt"
    descending: bool = True
    window: PageWindow = field(default_factory=PageWindow)

    @classmethod
    def from_params(
        cls,
        *,
        status: Optional[str] = None,
        category: Optional[str] = None,
        subcategory: Optional[str] = None,
        featured: Optional[str] = None,
        min_price: Optional[str] = None,
        max_price: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> "ProductQuery":
        if sort_by in SORTABLE_FIELDS:
            descending = (sort_order or "").lower() == "desc"
        else:
            sort_by, descending = "createdAt", True

        return cls(
            status=parse_status(status) if status else ProductStatus.ACTIVE,
            category=(category or "").strip() or None,
            subcategory=(subcategory or "").strip() or None,
            featured=parse_bool(featured),
            min_price=parse_float(min_price),
            max_price=parse_float(max_price),
            search=search_terms(search),
            sort_by=sort_by,
            descending=descending,
            window=PageWindow.from_params(page, limit),
        )

    def conditions(self) -> list[ColumnElement]:
        clauses: list[ColumnElement] = [Product.status == self.status]
        if self.category:
            clauses.append(_contains(Product.category, self.category))
        if self.subcategory:
            clauses.append(_contains(Product.subcategory, self.subcategory))
        if self.featured is not None:
            clauses.append(Product.featured == self.featured)
        if self.min_price is not None:
            clauses.append(Product.price >= self.min_price)
        if self.max_price is not None:
            clauses.append(Product.price <= self.max_price)
        if self.search:
            clauses.append(text_search_condition(self.search))
        return clauses

    def order_by(self) -> list:
        column = SORTABLE_FIELDS[self.sort_by]
        primary = column.desc() if self.descending else column.asc()
        return [primary, Product.id.asc()]


@dataclass
class ProductPage:
    items: list[Product]
    current_page: int
    total_pages: int
    item_count: int
    total_records: int


async def _run_paged(
    db: AsyncSession, base: Select, order_by: list, window: PageWindow
) -> ProductPage:
    count_query = select(func.count()).select_from(base.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    result = await db.execute(
        base.order_by(*order_by).offset(window.offset).limit(window.limit)
    )
    items = list(result.scalars().all())

    return ProductPage(
        items=items,
        current_page=window.page,
        total_pages=math.ceil(total / window.limit),
        item_count=len(items),
        total_records=total,
    )


async def list_products(db: AsyncSession, query: ProductQuery) -> ProductPage:
    base = select(Product).where(and_(*query.conditions()))
    return await _run_paged(db, base, query.order_by(), query.window)


async def search_products(
    db: AsyncSession, search: str, window: PageWindow
) -> ProductPage:
    """Active products matching ``search``, name hits first, then newest."""
    terms = search_terms(search)
    if not terms:
        return ProductPage(
            items=[], current_page=window.page, total_pages=0, item_count=0, total_records=0
        )

    base = select(Product).where(
        Product.status == ProductStatus.ACTIVE, text_search_condition(terms)
    )
    name_hit = or_(*[_contains(Product.name, term) for term in terms])
    relevance = case((name_hit, 0), else_=1)
    order_by = [relevance.asc(), Product.created_at.desc(), Product.id.asc()]
    return await _run_paged(db, base, order_by, window)
