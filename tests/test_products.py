"""
Tests del servicio y los endpoints de productos.
"""
import re
from decimal import Decimal

import pytest

from catalog_admin.core.exceptions import NotFoundException, ValidationException
from catalog_admin.models import Product
from catalog_admin.services.product_service import product_service

API = "/api/v1"


# ================================================================
# SERVICIO
# ================================================================

def test_create_assigns_category_and_slug(db, make_category):
    shoes = make_category("Shoes")

    product = product_service.create(db, {
        "name": "Trail Runner",
        "base_price": Decimal("59.90"),
        "category_id": shoes.id,
    })

    assert product.slug == "trail-runner"
    assert product.category.id == shoes.id
    assert product.images == []

    duplicate = product_service.create(db, {
        "name": "Trail Runner",
        "base_price": Decimal("10"),
        "category_id": shoes.id,
    })
    assert re.fullmatch(r"trail-runner-\d+", duplicate.slug)


def test_create_requires_existing_category(db):
    with pytest.raises(ValidationException, match="Category not found"):
        product_service.create(db, {"name": "Orphan", "base_price": Decimal("1"), "category_id": "missing"})

    assert db.query(Product).count() == 0


def test_update_moves_product_and_regenerates_slug(db, make_category, make_product):
    shoes = make_category("Shoes")
    hats = make_category("Hats")
    product = make_product("Cap", shoes)

    updated = product_service.update(db, product.id, {"name": "Baseball Cap", "category_id": hats.id})

    assert updated.slug == "baseball-cap"
    assert updated.category_id == hats.id

    with pytest.raises(ValidationException, match="Category not found"):
        product_service.update(db, product.id, {"category_id": "missing"})

    with pytest.raises(NotFoundException, match="Product not found"):
        product_service.update(db, "missing", {"name": "Nope"})


def test_list_filters_by_search_category_and_status(db, make_category, make_product):
    shoes = make_category("Shoes")
    hats = make_category("Hats")
    make_product("Runner 100%", shoes)
    make_product("Runner Pro", shoes, is_active=False)
    make_product("Sun Hat", hats)

    products, total = product_service.list(db, search="runner")
    assert total == 2
    assert {p.name for p in products} == {"Runner 100%", "Runner Pro"}

    products, total = product_service.list(db, search="%")
    assert [p.name for p in products] == ["Runner 100%"]

    products, total = product_service.list(db, category_id=shoes.id, is_active=True)
    assert [p.name for p in products] == ["Runner 100%"]

    products, total = product_service.list(db, page=2, limit=2)
    assert total == 3
    assert len(products) == 1


def test_list_by_category_includes_direct_children_and_active_only(db, make_category, make_product):
    root = make_category("Clothing")
    child = make_category("Shirts", parent=root)
    grandchild = make_category("Polo", parent=child)
    make_product("Jacket", root)
    make_product("Tee", child)
    make_product("Old Tee", child, is_active=False)
    make_product("Polo Classic", grandchild)

    category, products, total = product_service.list_by_category(db, root.id)
    assert category.id == root.id
    assert total == 2
    assert {p.name for p in products} == {"Jacket", "Tee"}

    _, products, total = product_service.list_by_category(db, root.id, include_subcategories=False)
    assert [p.name for p in products] == ["Jacket"]

    with pytest.raises(NotFoundException, match="Category not found"):
        product_service.list_by_category(db, "missing")


def test_delete_product(db, make_category, make_product):
    product = make_product("Cap", make_category("Hats"))

    product_service.delete(db, product.id)

    assert db.query(Product).count() == 0
    with pytest.raises(NotFoundException):
        product_service.delete(db, product.id)


# ================================================================
# ENDPOINTS
# ================================================================

def test_product_crud_flow(admin_client, make_category, db):
    shoes = make_category("Shoes")
    hats = make_category("Hats")

    created = admin_client.post(f"{API}/products", json={
        "name": "Trail Runner",
        "basePrice": "59.90",
        "categoryId": shoes.id,
        "images": ["https://cdn.example.com/runner.jpg"],
    })
    assert created.status_code == 201
    body = created.json()
    assert body["message"] == "Product created successfully"
    product = body["data"]["product"]
    assert product["slug"] == "trail-runner"
    assert product["category"]["name"] == "Shoes"
    assert Decimal(product["basePrice"]) == Decimal("59.90")

    detail = admin_client.get(f"{API}/products/{product['id']}")
    assert detail.status_code == 200
    assert detail.json()["data"]["product"]["images"] == ["https://cdn.example.com/runner.jpg"]

    moved = admin_client.put(f"{API}/products/{product['id']}", json={"categoryId": hats.id})
    assert moved.status_code == 200
    assert moved.json()["data"]["product"]["categoryId"] == hats.id

    status = admin_client.patch(f"{API}/products/{product['id']}/status", json={"isActive": False})
    assert status.json()["message"] == "Product deactivated successfully"

    listed = admin_client.get(f"{API}/products", params={"isActive": "false"}).json()["data"]
    assert [item["id"] for item in listed["products"]] == [product["id"]]
    assert listed["pagination"]["totalItems"] == 1

    deleted = admin_client.delete(f"{API}/products/{product['id']}")
    assert deleted.json()["message"] == "Product deleted successfully"
    assert admin_client.get(f"{API}/products/{product['id']}").status_code == 404


def test_product_validation_errors(admin_client, make_category):
    shoes = make_category("Shoes")

    missing_category = admin_client.post(f"{API}/products", json={
        "name": "Orphan",
        "basePrice": "10.00",
        "categoryId": "missing",
    })
    assert missing_category.status_code == 400
    assert missing_category.json()["message"] == "Category not found"

    bad_price = admin_client.post(f"{API}/products", json={
        "name": "Free",
        "basePrice": "0",
        "categoryId": shoes.id,
    })
    assert bad_price.status_code == 400
    assert bad_price.json()["code"] == "VALIDATION_ERROR"


def test_products_by_category_endpoint(admin_client, make_category, make_product):
    root = make_category("Clothing")
    child = make_category("Shirts", parent=root)
    make_product("Tee", child)

    data = admin_client.get(f"{API}/products/category/{root.id}").json()["data"]
    assert data["category"]["slug"] == "clothing"
    assert [item["name"] for item in data["products"]] == ["Tee"]

    assert admin_client.get(f"{API}/products/category/missing").status_code == 404


def test_moving_products_with_category_delete(admin_client, make_category, make_product, db):
    source = make_category("Source")
    target = make_category("Target")
    make_product("Cap", source)

    response = admin_client.delete(f"{API}/categories/{source.id}", params={"moveProductsTo": target.id})
    assert response.status_code == 200

    data = admin_client.get(f"{API}/products/category/{target.id}").json()["data"]
    assert [item["name"] for item in data["products"]] == ["Cap"]


def test_product_routes_require_products_permission(client, make_admin, auth_headers, make_category):
    make_category("Shoes")
    reader = make_admin("reader@catalogadmin.com", permissions={"products": {"read": True}})

    listed = client.get(f"{API}/products", headers=auth_headers(reader))
    assert listed.status_code == 200

    denied = client.post(f"{API}/products", headers=auth_headers(reader), json={
        "name": "Nope",
        "basePrice": "1.00",
        "categoryId": "whatever",
    })
    assert denied.status_code == 403
    assert denied.json()["message"] == "Permission 'products.create' required"
