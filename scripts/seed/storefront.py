"""Seed a development storefront: one admin, three customers and a sample catalogue.

Skips everything when any user already exists.

Usage:
    python scripts/seed/storefront.py
"""

import asyncio
import io
import os
import sys

# Add backend root to path so we can import modules
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from libs.common.config import get_settings
from libs.common.logging import configure_logging, get_logger
from libs.db.config import Database
from PIL import Image
from services.accounts_service.models import User, UserRole
from services.accounts_service.schemas import UserCreate
from services.accounts_service.services.account_ops import register_user
from services.catalog_service.schemas import ProductCreate
from services.catalog_service.services.product_ops import create_product
from services.media_service.storage import StorageService, public_url
from sqlalchemy import func, select

logger = get_logger("seed.storefront")

SWATCH_SIZE = (600, 800)

USERS = [
    {
        "username": "admin",
        "email": "admin@suits-world.com",
        "password": "admin123",
        "profile": {
            "firstName": "Admin",
            "lastName": "User",
            "bio": "Administrator of The Suits World",
        },
    },
    {
        "username": "johndoe",
        "email": "john@example.com",
        "password": "password123",
        "profile": {
            "firstName": "John",
            "lastName": "Doe",
            "bio": "Business professional and loyal customer",
        },
    },
    {
        "username": "sarahjones",
        "email": "sarah@example.com",
        "password": "password123",
        "profile": {
            "firstName": "Sarah",
            "lastName": "Jones",
            "bio": "Corporate executive with excellent style",
        },
    },
    {
        "username": "mikewilson",
        "email": "mike@example.com",
        "password": "password123",
        "profile": {
            "firstName": "Mike",
            "lastName": "Wilson",
            "bio": "Wedding planner and formal wear enthusiast",
        },
    },
]


def _product(name, sku, subcategory, price, compare, cost, quantity, threshold, **extra):
    return {
        "name": name,
        "description": extra.pop("description", f"{name} from The Suits World."),
        "shortDescription": extra.pop("short", None),
        "price": price,
        "comparePrice": compare,
        "costPrice": cost,
        "sku": sku,
        "category": extra.pop("category", "mens"),
        "subcategory": subcategory,
        "tags": extra.pop("tags", []),
        "swatch": extra.pop("swatch"),
        "inventory": {
            "quantity": quantity,
            "trackQuantity": True,
            "allowBackorder": extra.pop("backorder", False),
            "lowStockThreshold": threshold,
        },
        "dimensions": {"weight": extra.pop("weight", None)},
        "status": "active",
        "featured": extra.pop("featured", False),
    }


PRODUCTS = [
    _product(
        "Executive Navy Business Suit",
        "SW-ENS-001",
        "corporate-suits",
        599,
        799,
        299,
        24,
        5,
        description=(
            "A sophisticated navy blue business suit crafted from premium wool. "
            "Perfect for board meetings and formal business occasions."
        ),
        short="Premium navy wool business suit with modern slim fit",
        tags=["business", "navy", "wool", "slim-fit", "executive"],
        swatch=(27, 38, 59),
        weight=2.5,
        featured=True,
    ),
    _product(
        "Classic Charcoal Three-Piece",
        "SW-CCT-002",
        "three-piece-suits",
        899,
        1199,
        449,
        12,
        3,
        short="Classic charcoal three-piece suit with waistcoat",
        tags=["charcoal", "three-piece", "classic", "formal", "wedding"],
        swatch=(54, 54, 58),
        weight=3.2,
        featured=True,
    ),
    _product(
        "Wedding Day Premium Tuxedo",
        "SW-WPT-003",
        "wedding-suits",
        1299,
        1699,
        649,
        8,
        2,
        short="Premium black tuxedo with satin lapels",
        tags=["tuxedo", "black", "wedding", "formal", "satin"],
        swatch=(12, 12, 14),
        weight=2.8,
        backorder=True,
        featured=True,
    ),
    _product(
        "Midnight Blue Prom Suit",
        "SW-MBP-004",
        "prom-suits",
        449,
        599,
        224,
        15,
        5,
        tags=["prom", "midnight-blue", "modern", "special-occasion"],
        swatch=(25, 25, 70),
        weight=2.3,
    ),
    _product(
        "Classic Navy Blazer",
        "SW-CNB-005",
        "blazers",
        349,
        449,
        174,
        32,
        10,
        tags=["blazer", "navy", "versatile", "business-casual"],
        swatch=(31, 45, 84),
        weight=1.8,
    ),
    _product(
        "Premium Silk Tie Collection",
        "SW-PST-011",
        "ties-accessories",
        89,
        129,
        44,
        67,
        20,
        tags=["tie", "silk", "accessories"],
        swatch=(128, 24, 36),
    ),
    _product(
        "Leather Oxford Dress Shoes",
        "SW-LOD-012",
        "formal-shoes",
        299,
        399,
        149,
        28,
        8,
        tags=["shoes", "oxford", "leather"],
        swatch=(74, 44, 28),
    ),
]


async def _store_swatch(session, storage: StorageService, name: str, colour) -> dict:
    """Store a plain colour card as the product photo so its URL is served."""
    buffer = io.BytesIO()
    Image.new("RGB", SWATCH_SIZE, colour).save(buffer, format="PNG")
    filename = await storage.save(session, buffer.getvalue(), f"{name}.png", "image/png")
    return {"url": public_url(filename), "alt": name, "isPrimary": True}


async def seed_storefront(database: Database) -> None:
    async with database.session() as session:
        existing = (await session.execute(select(func.count()).select_from(User))).scalar()
        if existing:
            print(f"  {existing} user(s) already present, skipping")
            return

        admin = None
        for payload in USERS:
            user = await register_user(session, UserCreate.model_validate(payload))
            if user.username == "admin":
                user.role = UserRole.ADMIN
                await session.commit()
                admin = user
            print(f"  Created user {user.username}")

        storage = StorageService()
        for payload in PRODUCTS:
            payload = dict(payload)
            colour = payload.pop("swatch")
            payload["images"] = [
                await _store_swatch(session, storage, payload["name"], colour)
            ]
            product = await create_product(
                session, ProductCreate.model_validate(payload), actor_id=admin.id
            )
            print(f"  Created product {product.sku} {product.name}")


async def main() -> None:
    configure_logging()
    settings = get_settings()
    database = Database(settings=settings)
    await database.connect(create_tables=True)
    try:
        await seed_storefront(database)
    finally:
        await database.dispose()
    logger.info("Seeding finished")


if __name__ == "__main__":
    asyncio.run(main())
