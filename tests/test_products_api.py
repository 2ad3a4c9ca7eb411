from decimal import Decimal

from services.product_service.models import Product

NEW_PRODUCT = {
    "description": "Sprocket",
    "lotNumber": "L-900",
    "price": 12.5,
    "stock": 40,
    "entryDate": "2024-03-01T00:00:00Z",
}


async def test_list_products_hides_inactive(client, catalog, admin_headers):
    response = await client.get("/api/products", headers=admin_headers)

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [1, 2]


async def test_products_require_admin_role(client, catalog, customer_headers):
    response = await client.get("/api/products", headers=customer_headers)

    assert response.status_code == 403


async def test_get_product_by_id(client, catalog, admin_headers):
    response = await client.get("/api/products/1", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["description"] == "Widget"
    assert body["lotNumber"] == "L-001"
    assert Decimal(str(body["price"])) == Decimal("5.00")
    assert body["stock"] == 10
    assert body["active"] is True


async def test_inactive_product_is_not_found(client, catalog, admin_headers):
    response = await client.get("/api/products/3", headers=admin_headers)

    assert response.status_code == 404


async def test_create_product(client, admin_headers):
    response = await client.post("/api/products", json=NEW_PRODUCT, headers=admin_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["id"] > 0
    assert Decimal(str(body["price"])) == Decimal("12.5")
    assert body["active"] is True


async def test_duplicate_description_is_a_conflict(client, catalog, admin_headers):
    payload = dict(NEW_PRODUCT, description="Widget")

    response = await client.post("/api/products", json=payload, headers=admin_headers)

    assert response.status_code == 409


async def test_invalid_product_is_a_bad_request(client, admin_headers):
    payload = dict(NEW_PRODUCT, description="ab", stock=-1)

    response = await client.post("/api/products", json=payload, headers=admin_headers)

    assert response.status_code == 400
    locs = [e["loc"] for e in response.json()["errors"]]
    assert "description" in locs
    assert "stock" in locs


async def test_update_product(client, catalog, admin_headers, stock_of):
    payload = dict(NEW_PRODUCT, description="Widget XL", stock=3)

    response = await client.put("/api/products/1", json=payload, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["description"] == "Widget XL"
    assert await stock_of(1) == 3


async def test_update_to_taken_description_is_a_conflict(client, catalog, admin_headers):
    payload = dict(NEW_PRODUCT, description="Gadget")

    response = await client.put("/api/products/1", json=payload, headers=admin_headers)

    assert response.status_code == 409


async def test_update_missing_product_is_not_found(client, catalog, admin_headers):
    response = await client.put("/api/products/99", json=NEW_PRODUCT, headers=admin_headers)

    assert response.status_code == 404


async def test_delete_is_a_soft_delete(client, catalog, admin_headers, session_factory):
    response = await client.delete("/api/products/2", headers=admin_headers)

    assert response.status_code == 204
    assert (await client.get("/api/products/2", headers=admin_headers)).status_code == 404

    async with session_factory() as session:
        product = await session.get(Product, 2)
        assert product is not None
        assert product.active is False


async def test_deactivated_product_cannot_be_ordered(client, catalog, admin_headers, customer_headers):
    await client.delete("/api/products/1", headers=admin_headers)
    order = {
        "userId": 2,
        "username": "bob",
        "products": [{"productId": 1, "description": "Widget", "amount": 1}],
    }

    response = await client.post("/api/invoices", json=order, headers=customer_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "unknown_reference"


async def test_create_product_accepts_lowercase_field_names(client, admin_headers):
    payload = {
        "description": "Flange",
        "lotnumber": "L-901",
        "price": 3,
        "stock": 7,
        "entrydate": "2024-03-01T00:00:00Z",
    }

    response = await client.post("/api/products", json=payload, headers=admin_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["lotNumber"] == "L-901"
    assert body["price"] == 3.0
    assert body["entryDate"].startswith("2024-03-01")
