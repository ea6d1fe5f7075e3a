import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.api import cart_router, order_router, product_router, review_router
from storefront.api.errors import register_error_handlers
from storefront.identity import set_identity_provider
from storefront.identity.provider import JWTIdentityProvider

SECRET = "test-secret"


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(review_router)
    register_error_handlers(app)
    set_identity_provider(JWTIdentityProvider(secret=SECRET))
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def auth_headers():
    """Bearer headers for a shopper, signed with the test secret."""

    def _headers(user_id="shopper-1"):
        token = JWTIdentityProvider(secret=SECRET).issue(user_id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def api_product(client):
    """Create and publish a product over HTTP, returning its id."""

    def _create(name="Linen Shirt", price="AED 100.00", variants=None, **extra):
        body = {
            "name": name,
            "price": price,
            "variants": variants if variants is not None else [{"name": "White", "stock": 5}],
            **extra,
        }
        response = client.post("/products", json=body)
        assert response.status_code == 201, response.text
        product_id = response.json()["id"]
        assert client.put(f"/products/{product_id}/publish").status_code == 200
        return product_id

    return _create
