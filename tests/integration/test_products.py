"""Integration tests for the product catalog endpoints."""

import uuid

import pytest
from services.catalog_service.models import Product, ProductStatus
from sqlalchemy import func, select
from tests.factories import ProductFactory, _minutes_ago


def _payload(**overrides):
    payload = {
        "name": "Classic Charcoal Three-Piece",
        "description": "Charcoal three-piece with waistcoat.",
        "price": 899,
        "comparePrice": 1199,
        "costPrice": 449,
        "sku": "sw-cct-002",
        "category": "mens",
        "subcategory": "three-piece-suits",
        "tags": ["charcoal", "formal"],
        "status": "active",
        "inventory": {"quantity": 12, "trackQuantity": True, "lowStockThreshold": 3},
    }
    payload.update(overrides)
    return payload


async def _add(db_session, *products):
    db_session.add_all(products)
    await db_session.commit()
    return products


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_low_stock(client, admin_headers, admin_user):
    """POST /api/products: quantity 5 under threshold 10 reads as low-stock."""
    response = await client.post(
        "/api/products",
        json=_payload(
            inventory={"quantity": 5, "trackQuantity": True, "lowStockThreshold": 10}
        ),
        headers=admin_headers,
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Product created successfully"
    data = body["data"]
    assert data["sku"] == "SW-CCT-002"
    assert data["stockStatus"] == "low-stock"
    assert data["discountPercentage"] == 25
    assert data["profitMargin"] == 50
    assert data["isAvailable"] is True
    assert data["createdBy"] == str(admin_user.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_normalizes_primary_image(client, admin_headers):
    response = await client.post(
        "/api/products",
        json=_payload(
            images=[
                {"url": "/api/upload/images/a.png", "alt": "Front"},
                {"url": "/api/upload/images/b.png", "isPrimary": True},
                {"url": "/api/upload/images/c.png", "isPrimary": True},
            ]
        ),
        headers=admin_headers,
    )

    assert response.status_code == 201, response.text
    images = response.json()["data"]["images"]
    assert [image["isPrimary"] for image in images] == [False, True, False]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_duplicate_sku_persists_nothing(
    client, admin_headers, db_session
):
    await _add(db_session, ProductFactory.create(sku="SW-DUP-001"))

    response = await client.post(
        "/api/products", json=_payload(sku="sw-dup-001"), headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "SKU already exists"}
    count = (await db_session.execute(select(func.count()).select_from(Product))).scalar()
    assert count == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_validation_errors(client, admin_headers):
    response = await client.post(
        "/api/products", json={"price": -1}, headers=admin_headers
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation error"
    assert any(error.startswith("name") for error in body["errors"])
    assert any(error.startswith("price") for error in body["errors"])


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_requires_admin(client, customer_headers):
    response = await client.post(
        "/api/products", json=_payload(), headers=customer_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_requires_token(client):
    response = await client.post("/api/products", json=_payload())

    assert response.status_code == 401
    assert response.json()["message"] == "No token provided"


# ---------------------------------------------------------------------------
# Browse / search
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_browse_defaults_to_active_newest_first(client, db_session):
    older = ProductFactory.create(name="Older Suit", created_at=_minutes_ago(10))
    newer = ProductFactory.create(name="Newer Suit", created_at=_minutes_ago(1))
    draft = ProductFactory.create(name="Draft Suit", status=ProductStatus.DRAFT)
    await _add(db_session, older, newer, draft)

    response = await client.get("/api/products")

    assert response.status_code == 200
    body = response.json()
    assert [p["name"] for p in body["data"]] == ["Newer Suit", "Older Suit"]
    assert body["pagination"] == {
        "current": 1,
        "total": 1,
        "count": 2,
        "totalRecords": 2,
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_browse_pagination_math(client, db_session):
    await _add(
        db_session,
        *[
            ProductFactory.create(name=f"Suit {i}", created_at=_minutes_ago(30 - i))
            for i in range(25)
        ],
    )

    response = await client.get("/api/products", params={"page": 3, "limit": 10})

    body = response.json()
    assert body["pagination"] == {
        "current": 3,
        "total": 3,
        "count": 5,
        "totalRecords": 25,
    }
    assert body["data"][0]["name"] == "Suit 4"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_browse_price_range_is_inclusive(client, db_session):
    await _add(
        db_session,
        ProductFactory.create(name="Tie", price=89),
        ProductFactory.create(name="Blazer", price=349),
        ProductFactory.create(name="Tuxedo", price=1299),
    )

    response = await client.get(
        "/api/products",
        params={"minPrice": "89", "maxPrice": "349", "sortBy": "price", "sortOrder": "asc"},
    )

    assert [p["name"] for p in response.json()["data"]] == ["Tie", "Blazer"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_browse_ignores_malformed_numbers(client, db_session):
    await _add(db_session, ProductFactory.create())

    response = await client.get(
        "/api/products", params={"minPrice": "cheap", "page": "x", "limit": "y"}
    )

    assert response.status_code == 200
    assert response.json()["pagination"]["totalRecords"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_browse_filters_category_case_insensitively(client, db_session):
    await _add(
        db_session,
        ProductFactory.create(name="Girls Suit", category="childrens"),
        ProductFactory.create(name="Navy Suit", category="mens", featured=True),
    )

    response = await client.get("/api/products", params={"category": "CHILD"})
    assert [p["name"] for p in response.json()["data"]] == ["Girls Suit"]

    response = await client.get("/api/products", params={"featured": "true"})
    assert [p["name"] for p in response.json()["data"]] == ["Navy Suit"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_browse_by_status(client, db_session):
    await _add(
        db_session,
        ProductFactory.create(name="Live"),
        ProductFactory.create(name="Gone", status=ProductStatus.ARCHIVED),
    )

    response = await client.get("/api/products", params={"status": "archived"})
    assert [p["name"] for p in response.json()["data"]] == ["Gone"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_search_matches_name_description_and_tags(client, db_session):
    await _add(
        db_session,
        ProductFactory.create(
            name="Wedding Tuxedo", tags=["black"], created_at=_minutes_ago(5)
        ),
        ProductFactory.create(
            name="Silk Tie",
            description="Pairs with any tuxedo.",
            tags=["silk"],
            created_at=_minutes_ago(1),
        ),
        ProductFactory.create(name="Oxford Shoes", tags=["tuxedo-shoes"]),
        ProductFactory.create(name="Navy Blazer", tags=["navy"]),
        ProductFactory.create(name="Archived Tuxedo", status=ProductStatus.ARCHIVED),
    )

    response = await client.get("/api/products/search/tuxedo")

    assert response.status_code == 200
    names = [p["name"] for p in response.json()["data"]]
    assert names[0] == "Wedding Tuxedo"
    assert set(names) == {"Wedding Tuxedo", "Silk Tie", "Oxford Shoes"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_search_matches_non_ascii_tags(client, db_session):
    await _add(
        db_session,
        ProductFactory.create(name="Espresso Waistcoat", tags=["café", "Brown"]),
        ProductFactory.create(name="Navy Blazer", tags=["navy"]),
    )

    response = await client.get("/api/products/search/café")

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["totalRecords"] == 1
    assert body["data"][0]["name"] == "Espresso Waistcoat"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_search_punctuation_does_not_match_every_tagged_product(
    client, db_session
):
    await _add(
        db_session,
        ProductFactory.create(name="Navy Blazer", tags=["navy", "wool"]),
        ProductFactory.create(name="Grey Blazer", tags=["grey", "wool"]),
    )

    for term in (",", "%22"):
        response = await client.get(f"/api/products/search/{term}")
        assert response.status_code == 200
        assert response.json()["pagination"]["totalRecords"] == 0


# ---------------------------------------------------------------------------
# Get / update / archive
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_product_by_id(client, db_session):
    (product,) = await _add(db_session, ProductFactory.create(status=ProductStatus.DRAFT))

    response = await client.get(f"/api/products/{product.id}")

    assert response.status_code == 200
    assert response.json()["data"]["id"] == str(product.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_product_malformed_and_missing_ids(client):
    response = await client.get("/api/products/not-a-uuid")
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid product ID"

    response = await client.get(f"/api/products/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Product not found"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_product_is_partial(client, admin_headers, admin_user, db_session):
    (product,) = await _add(
        db_session,
        ProductFactory.create(name="Navy Suit", price=599, low_stock_threshold=5),
    )

    response = await client.put(
        f"/api/products/{product.id}",
        json={"price": 549, "inventory": {"lowStockThreshold": 30}},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["name"] == "Navy Suit"
    assert data["price"] == 549
    assert data["inventory"]["lowStockThreshold"] == 30
    assert data["inventory"]["quantity"] == 24
    assert data["stockStatus"] == "low-stock"
    assert data["updatedBy"] == str(admin_user.id)



@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_product_images_keeps_one_primary(client, admin_headers, db_session):
    (product,) = await _add(
        db_session,
        ProductFactory.create(
            images=[{"url": "/api/upload/images/old.png", "is_primary": True}]
        ),
    )

    response = await client.put(
        f"/api/products/{product.id}",
        json={
            "images": [
                {"url": "/api/upload/images/front.png", "alt": "Front"},
                {"url": "/api/upload/images/side.png", "isPrimary": True},
                {"url": "/api/upload/images/back.png", "isPrimary": True},
            ]
        },
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    images = response.json()["data"]["images"]
    assert [image["url"] for image in images] == [
        "/api/upload/images/front.png",
        "/api/upload/images/side.png",
        "/api/upload/images/back.png",
    ]
    assert [image["isPrimary"] for image in images] == [False, True, False]

@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_product_to_taken_sku(client, admin_headers, db_session):
    first, second = await _add(
        db_session,
        ProductFactory.create(sku="SW-AAA-001"),
        ProductFactory.create(sku="SW-BBB-002"),
    )

    response = await client.put(
        f"/api/products/{second.id}", json={"sku": "SW-AAA-001"}, headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["message"] == "SKU already exists"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_archive_product_keeps_row(client, admin_headers, db_session):
    (product,) = await _add(db_session, ProductFactory.create())

    response = await client.delete(f"/api/products/{product.id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Product archived successfully"
    assert response.json()["data"]["status"] == "archived"

    listing = await client.get("/api/products")
    assert listing.json()["data"] == []

    still_there = await client.get(f"/api/products/{product.id}")
    assert still_there.status_code == 200


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_inventory_set_zero_is_out_of_stock(client, admin_headers, db_session):
    (product,) = await _add(db_session, ProductFactory.create(quantity=8))

    response = await client.patch(
        f"/api/products/{product.id}/inventory",
        json={"quantity": 0, "operation": "set"},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["message"] == "Inventory updated successfully"
    assert body["data"]["inventory"]["quantity"] == 0
    assert body["data"]["stockStatus"] == "out-of-stock"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_inventory_add_and_subtract(client, admin_headers, db_session):
    (product,) = await _add(
        db_session, ProductFactory.create(quantity=4, low_stock_threshold=5)
    )
    url = f"/api/products/{product.id}/inventory"

    response = await client.patch(
        url, json={"quantity": 10, "operation": "add"}, headers=admin_headers
    )
    assert response.json()["data"]["inventory"]["quantity"] == 14
    assert response.json()["data"]["stockStatus"] == "in-stock"

    response = await client.patch(
        url, json={"quantity": 50, "operation": "subtract"}, headers=admin_headers
    )
    assert response.json()["data"]["inventory"]["quantity"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_inventory_rejects_bad_input(client, admin_headers, db_session):
    (product,) = await _add(db_session, ProductFactory.create())
    url = f"/api/products/{product.id}/inventory"

    response = await client.patch(
        url, json={"quantity": -3, "operation": "set"}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Valid quantity is required"

    response = await client.patch(
        url, json={"quantity": 3, "operation": "multiply"}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid operation. Use set, add or subtract"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_without_images_uses_configured_placeholder(
    client, admin_headers, monkeypatch
):
    from libs.common.config import get_settings

    monkeypatch.setattr(
        get_settings(), "DEFAULT_PRODUCT_IMAGE_URL", "/static/placeholder.png"
    )

    response = await client.post("/api/products", json=_payload(), headers=admin_headers)

    assert response.status_code == 201, response.text
    assert response.json()["data"]["images"] == [
        {"url": "/static/placeholder.png", "alt": "Product image", "isPrimary": True}
    ]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_deactivated_admin_cannot_create_products(
    client, admin_user, admin_headers, db_session
):
    admin_user.is_active = False
    await db_session.commit()

    response = await client.post("/api/products", json=_payload(), headers=admin_headers)

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"
    total = await db_session.scalar(select(func.count()).select_from(Product))
    assert total == 0
