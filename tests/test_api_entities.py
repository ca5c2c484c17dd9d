import pytest

from repositories.errors import StorageUnavailableError


def test_list_products(client):
    response = client.get("/api/products")
    assert response.status_code == 200
    body = response.json()
    assert [p["id"] for p in body] == ["P1", "P2", "P3"]
    assert body[0]["categoryId"] == "CAT2"


def test_get_missing_product_is_404(client):
    response = client.get("/api/products/NOPE")
    assert response.status_code == 404
    assert response.json()["detail"] == "Product not found"


def test_get_missing_set_message(client):
    assert client.get("/api/sets/NOPE").json()["detail"] == "Product set not found"


def test_put_with_mismatched_id_is_rejected(client):
    p2 = client.get("/api/products/P2").json()
    response = client.put("/api/products/P1", json=p2)
    assert response.status_code == 400

    # Neither product changed
    assert client.get("/api/products/P1").json()["name"] == "Кровать Милан"
    assert client.get("/api/products/P2").json() == p2


def test_put_missing_product_is_404(client):
    body = {"id": "P404", "name": "Нет", "slug": "net", "price": 10}
    assert client.put("/api/products/P404", json=body).status_code == 404


def test_create_update_delete_category(client):
    created = client.post("/api/categories", json={"id": "CAT9", "name": "Прихожие", "slug": "hallway"})
    assert created.status_code == 201

    body = created.json()
    body["description"] = "Мебель для прихожей"
    assert client.put("/api/categories/CAT9", json=body).status_code == 200
    assert client.get("/api/categories/CAT9").json()["description"] == "Мебель для прихожей"

    assert client.delete("/api/categories/CAT9").json() == {"success": True}
    assert client.get("/api/categories/CAT9").status_code == 404
    # Deleting again is harmless
    assert client.delete("/api/categories/CAT9").status_code == 200


def test_duplicate_slug_is_conflict(client):
    body = {"id": "P7", "name": "Copycat", "slug": "bed-milan", "price": 10}
    response = client.post("/api/products", json=body)
    assert response.status_code == 409
    assert client.get("/api/products/P7").status_code == 404


def test_discount_above_price_is_rejected(client):
    body = {"id": "P8", "name": "Акция", "slug": "promo", "price": 100, "discount": 150}
    assert client.post("/api/products", json=body).status_code == 400


def test_legacy_single_category_set_is_accepted(client):
    body = {"id": "S5", "name": "Гостиная", "slug": "living", "categoryId": "CAT3", "items": []}
    response = client.post("/api/sets", json=body)
    assert response.status_code == 201
    assert response.json()["categoryIds"] == ["CAT3"]


def test_admin_routes_require_login(client):
    assert client.get("/api/admin/products").status_code == 401
    assert client.post("/api/admin/products/P1/duplicate").status_code == 401
    assert client.get("/api/admin/dashboard").status_code == 401


def test_admin_crud_writes_audit_log(admin_client):
    body = {"id": "P10", "name": "Тумба", "slug": "tumba", "price": 250}
    assert admin_client.post("/api/admin/products", json=body).status_code == 201
    assert admin_client.delete("/api/admin/products/P10").status_code == 200

    logs = admin_client.get("/api/admin/logs", params={"resource": "product"}).json()
    actions = [entry["action"] for entry in logs["items"]]
    assert actions == ["DELETE", "CREATE"]
    assert {entry["actor"] for entry in logs["items"]} == {"admin"}


def test_duplicate_product(admin_client):
    response = admin_client.post("/api/admin/products/P1/duplicate")
    assert response.status_code == 201
    copy = response.json()
    assert copy["id"].startswith("PROD")
    assert copy["name"] == "Кровать Милан (Copy)"
    assert copy["slug"] == "bed-milan-copy"
    assert copy["price"] == 1000

    second = admin_client.post("/api/admin/products/P1/duplicate").json()
    assert second["slug"] == "bed-milan-copy-2"


def test_duplicate_set(admin_client):
    copy = admin_client.post("/api/admin/sets/S1/duplicate").json()
    assert copy["id"].startswith("SET")
    assert copy["slug"] == "bedroom-milan-copy"
    assert [i["productId"] for i in copy["items"]] == ["P1", "P2"]


def test_duplicate_missing_is_404(admin_client):
    assert admin_client.post("/api/admin/sets/NOPE/duplicate").status_code == 404


def test_set_validation(admin_client, store):
    assert admin_client.get("/api/admin/sets/S1/validation").json()["valid"] is True

    broken = store.sets.get_by_id("S1").model_copy(deep=True)
    broken.items[1].default_quantity = 5
    broken.items[0].product_id = "GONE"
    store.sets.save(broken)

    report = admin_client.get("/api/admin/sets/S1/validation").json()
    assert report["valid"] is False
    assert report["missingProductIds"] == ["GONE"]
    assert report["problems"]["P2"] == ["defaultQuantity is above maxQuantity"]


def test_dashboard_counts(admin_client):
    assert admin_client.get("/api/admin/dashboard").json() == {
        "products": 3, "categories": 3, "sets": 1, "backend": "json",
    }


def test_storage_failure_is_generic_500(client, store, monkeypatch):
    def boom():
        raise StorageUnavailableError("connection refused on 10.0.0.5")

    monkeypatch.setattr(store.products, "get_all", boom)
    response = client.get("/api/products")
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch products"}


@pytest.mark.parametrize("path", ["/api/products", "/api/categories", "/api/sets"])
def test_missing_data_file_is_500(client, data_dir, path):
    for name in ("products.json", "categories.json", "product-sets.json"):
        (data_dir / name).unlink()
    assert client.get(path).status_code == 500
