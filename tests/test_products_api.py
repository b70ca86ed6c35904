"""Catalog: public reads, owner/manager writes, tenant isolation."""

from tests.conftest import auth_headers, make_product, make_user
from app.models.menu.category import Category
from app.models.user import UserRole

TENANT = {"X-Tenant": "pizzamario"}


async def test_public_product_listing_with_filters(client, db, tenant, category, margherita):
    await make_product(db, tenant, "Hawaii", "16.00", category=category, is_active=False)

    resp = await client.get("/products", headers=TENANT)
    assert resp.status_code == 200
    products = resp.json()["data"]
    assert {p["name"] for p in products} == {"Margherita", "Hawaii"}
    margherita_row = next(p for p in products if p["name"] == "Margherita")
    assert margherita_row["price"] == 12.5
    assert margherita_row["category"]["slug"] == "pizzas"

    resp = await client.get("/products", params={"is_active": "true"}, headers=TENANT)
    assert [p["name"] for p in resp.json()["data"]] == ["Margherita"]

    resp = await client.get("/products", params={"is_popular": "true"}, headers=TENANT)
    assert [p["name"] for p in resp.json()["data"]] == ["Margherita"]


async def test_by_category_groups_active_products(client, db, tenant, category, margherita):
    drinks = Category(tenant_id=tenant.id, name="Dranken", slug="drinks", sort_order=2)
    hidden = Category(tenant_id=tenant.id, name="Seizoen", slug="seasonal", sort_order=3, is_active=False)
    db.add_all([drinks, hidden])
    await db.commit()
    await make_product(db, tenant, "Cola", "2.50", category=drinks)
    await make_product(db, tenant, "Fanta", "2.50", category=drinks, is_active=False)

    resp = await client.get("/products/by-category", headers=TENANT)

    assert resp.status_code == 200
    groups = resp.json()["data"]
    assert [g["slug"] for g in groups] == ["pizzas", "drinks"]
    assert [p["name"] for p in groups[1]["products"]] == ["Cola"]


async def test_single_product_is_tenant_scoped(client, margherita, other_tenant):
    resp = await client.get(f"/products/{margherita.id}", headers=TENANT)
    assert resp.status_code == 200
    assert resp.json()["data"]["name"] == "Margherita"

    resp = await client.get(f"/products/{margherita.id}", headers={"X-Tenant": "sushibar"})
    assert resp.status_code == 404


async def test_owner_creates_category_and_product(client, tenant, owner_headers):
    resp = await client.post("/products/categories", json={"name": "Pasta Speciale"}, headers=owner_headers)
    assert resp.status_code == 201
    category = resp.json()["data"]
    assert category["slug"] == "pasta-speciale"

    resp = await client.post("/products/categories", json={"name": "Pasta speciale"}, headers=owner_headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "CATEGORY_EXISTS"

    resp = await client.post(
        "/products",
        json={"name": "Penne Bolognese", "price": 13.5, "category_id": category["id"]},
        headers=owner_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["price"] == 13.5

    resp = await client.get("/products/categories", headers=TENANT)
    assert [c["name"] for c in resp.json()["data"]] == ["Pasta Speciale"]


async def test_manager_updates_product(client, db, tenant, margherita):
    manager = await make_user(db, "manager@pizzamario.nl", UserRole.MANAGER, tenant)

    resp = await client.patch(
        f"/products/{margherita.id}",
        json={"price": "13.00", "is_popular": False},
        headers=auth_headers(manager, "pizzamario"),
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["price"] == 13.0
    assert data["is_popular"] is False
    assert data["name"] == "Margherita"


async def test_category_must_belong_to_tenant(client, db, other_tenant, owner_headers, margherita):
    foreign = Category(tenant_id=other_tenant.id, name="Sushi", slug="sushi")
    db.add(foreign)
    await db.commit()

    resp = await client.post(
        "/products", json={"name": "Maki", "price": 6, "category_id": foreign.id}, headers=owner_headers
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_CATEGORY"

    resp = await client.patch(f"/products/{margherita.id}", json={"category_id": foreign.id}, headers=owner_headers)
    assert resp.status_code == 400


async def test_catalog_writes_need_owner_or_manager(client, category, employee_headers):
    resp = await client.post("/products/categories", json={"name": "Desserts"}, headers=employee_headers)
    assert resp.status_code == 403

    resp = await client.post("/products/categories", json={"name": "Desserts"}, headers=TENANT)
    assert resp.status_code == 401


async def test_patch_missing_product(client, tenant, owner_headers):
    resp = await client.patch("/products/missing", json={"price": 1}, headers=owner_headers)
    assert resp.status_code == 404


async def test_patch_rejects_null_for_required_fields(client, margherita, owner_headers):
    for field in ("price", "name", "category_id", "is_active"):
        resp = await client.patch(f"/products/{margherita.id}", json={field: None}, headers=owner_headers)
        assert resp.status_code == 400, field
        assert resp.json()["code"] == "VALIDATION_ERROR"

    resp = await client.patch(f"/products/{margherita.id}", json={"description": None}, headers=owner_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["price"] == 12.5
