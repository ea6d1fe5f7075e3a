"""Integration tests for catalog and inventory endpoints via TestClient."""


class TestProductAPI:
    def test_create_returns_draft_product(self, client):
        response = client.post(
            "/products",
            json={"name": "Linen Shirt", "price": "AED 149.00", "variants": [{"name": "White", "stock": 3}]},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "draft"
        assert body["in_stock"] is True
        assert body["variants"] == [{"name": "White", "stock": 3, "in_stock": True}]

    def test_publish_and_unpublish(self, client, api_product):
        product_id = api_product()
        assert client.get(f"/products/{product_id}").json()["status"] == "published"

        response = client.put(f"/products/{product_id}/unpublish")
        assert response.json()["status"] == "draft"

    def test_unknown_product_is_404(self, client):
        response = client.get("/products/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"

    def test_invalid_product_is_400(self, client):
        response = client.post("/products", json={"name": "No price"})

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"
        assert "price" in response.json()["details"]


class TestInventoryAPI:
    def test_check_availability(self, client, api_product):
        product_id = api_product()

        response = client.get(f"/products/{product_id}/inventory", params={"variant": "White"})

        assert response.status_code == 200
        assert response.json() == {"available": 5, "is_in_stock": True}

    def test_decrement(self, client, api_product):
        product_id = api_product()

        response = client.put(f"/products/{product_id}/inventory", json={"variant": "White", "quantity": 2})

        assert response.status_code == 200
        assert response.json()["remaining"] == 3
        assert response.json()["updated_variant"] == {"name": "White", "stock": 3, "in_stock": True}

    def test_insufficient_stock_is_409(self, client, api_product):
        product_id = api_product()

        response = client.put(f"/products/{product_id}/inventory", json={"variant": "White", "quantity": 9})

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "InsufficientStock"
        assert body["details"]["available"] == 5
        assert client.get(f"/products/{product_id}/inventory", params={"variant": "White"}).json()["available"] == 5

    def test_missing_variant_is_400(self, client, api_product):
        product_id = api_product()

        response = client.put(f"/products/{product_id}/inventory", json={"quantity": 1})

        assert response.status_code == 400
        assert "variant" in response.json()["details"]

    def test_zero_quantity_is_400(self, client, api_product):
        product_id = api_product()

        response = client.put(f"/products/{product_id}/inventory", json={"variant": "White", "quantity": 0})

        assert response.status_code == 400
        assert "quantity" in response.json()["details"]

    def test_unknown_variant_is_404(self, client, api_product):
        product_id = api_product()

        response = client.get(f"/products/{product_id}/inventory", params={"variant": "Crimson"})

        assert response.status_code == 404
        assert response.json()["error"] == "VariantNotFound"

    def test_restock(self, client, api_product):
        product_id = api_product()
        client.put(f"/products/{product_id}/inventory", json={"variant": "White", "quantity": 5})

        response = client.put(f"/products/{product_id}/restock", json={"variant": "White", "quantity": 2})

        assert response.json()["in_stock"] is True
        assert client.get(f"/products/{product_id}").json()["in_stock"] is True
