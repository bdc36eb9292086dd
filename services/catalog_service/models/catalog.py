"""Catalog models: products and their images."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.catalog_service.models.enums import ProductStatus, enum_values
from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates


class Product(Base):
    """Products listed in the storefront (e.g., 'Charcoal Three-Piece Suit')."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint(
            "compare_price IS NULL OR compare_price >= 0",
            name="ck_products_compare_price_non_negative",
        ),
        CheckConstraint(
            "cost_price IS NULL OR cost_price >= 0",
            name="ck_products_cost_price_non_negative",
        ),
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        CheckConstraint(
            "low_stock_threshold >= 0", name="ck_products_low_stock_non_negative"
        ),
        Index("ix_products_category_subcategory", "category", "subcategory"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Descriptive
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    short_description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    sku: Mapped[Optional[str]] = mapped_column(
        String(64), unique=True, nullable=True
    )  # NULLs do not collide, so SKU stays optional
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    subcategory: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # Lower-cased tags, one per line; kept in step with `tags` for search
    tags_text: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Pricing
    price: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=False, index=True
    )
    compare_price: Mapped[Optional[float]] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=True
    )  # "was" price for sales display
    cost_price: Mapped[Optional[float]] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=True
    )

    # Inventory
    quantity: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False, index=True
    )
    track_quantity: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true", nullable=False
    )
    allow_backorder: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    low_stock_threshold: Mapped[int] = mapped_column(
        Integer, default=10, server_default="10", nullable=False
    )

    # Dimensions
    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    length: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    width: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    height: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # SEO
    seo_title: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    seo_description: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    seo_keywords: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Status
    status: Mapped[ProductStatus] = mapped_column(
        SAEnum(
            ProductStatus,
            values_callable=enum_values,
            name="product_status_enum",
        ),
        default=ProductStatus.DRAFT,
        server_default="draft",
        nullable=False,
        index=True,
    )
    featured: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False, index=True
    )

    # Actors (users table lives in the accounts service)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    # Relationships
    images = relationship(
        "ProductImage",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductImage.sort_order",
        lazy="selectin",
    )

    @validates("tags")
    def _sync_tags_text(self, key, value):
        self.tags_text = "\n".join(str(tag).lower() for tag in value or [])
        return value

    def __repr__(self):
        return f"<Product {self.name}>"


class ProductImage(Base):
    """Product images, in display order."""

    __tablename__ = "product_images"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    url: Mapped[str] = mapped_column(Text, nullable=False)  # may hold a data URI
    alt: Mapped[str] = mapped_column(String(255), default="", server_default="")
    is_primary: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    # Relationships
    product = relationship("Product", back_populates="images")

    def __repr__(self):
        return f"<ProductImage {self.url[:40]}>"
