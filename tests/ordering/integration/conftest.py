import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.errors import register_error_handlers
from ordering.api.routes import cart_router, order_router, product_router

ADMIN = {"X-User-Id": "admin-001", "X-User-Role": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    register_error_handlers(app)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def create_product(client):
    """Register a product over HTTP as an administrator and return its id."""

    def _create(name="Widget", price=10.0, stock=10):
        response = client.post("/products", json={"name": name, "price": price, "stock": stock}, headers=ADMIN)
        assert response.status_code == 201
        return response.json()["product_id"]

    return _create
