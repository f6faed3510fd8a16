"""Integration tests for Product API endpoints via TestClient."""

from ordering.catalogue import set_catalogue
from ordering.catalogue.fake_adapter import FakeCatalogue

ADMIN = {"X-User-Id": "admin-001", "X-User-Role": "admin"}
CUSTOMER = {"X-User-Id": "user-001", "X-User-Role": "user"}


class TestRegisterProduct:
    def test_admin_registers_product(self, client):
        response = client.post("/products", json={"name": "Anvil", "price": 99.5, "stock": 3}, headers=ADMIN)

        assert response.status_code == 201
        product_id = response.json()["product_id"]

        product = client.get(f"/products/{product_id}").json()["product"]
        assert product["name"] == "Anvil"
        assert product["stock"] == 3
        assert product["is_active"] is True

    def test_customer_is_forbidden(self, client):
        response = client.post("/products", json={"name": "Anvil", "price": 1.0}, headers=CUSTOMER)
        assert response.status_code == 403

    def test_anonymous_is_unauthenticated(self, client):
        response = client.post("/products", json={"name": "Anvil", "price": 1.0})
        assert response.status_code == 401

    def test_invalid_body(self, client):
        response = client.post("/products", json={"name": "  ", "price": -1}, headers=ADMIN)
        assert response.status_code == 400

    def test_unknown_product(self, client):
        assert client.get("/products/prod-404").status_code == 404


class TestAdjustStock:
    def test_subtract(self, client, create_product):
        product_id = create_product(stock=10)

        response = client.patch(
            f"/products/{product_id}/stock",
            json={"stock": 4, "operation": "subtract"},
            headers=ADMIN,
        )

        assert response.status_code == 200
        assert response.json() == {
            "product_id": product_id,
            "previous_stock": 10,
            "new_stock": 6,
            "operation": "subtract",
        }

    def test_subtract_floors_at_zero(self, client, create_product):
        product_id = create_product(stock=2)

        response = client.patch(
            f"/products/{product_id}/stock",
            json={"stock": 5, "operation": "subtract"},
            headers=ADMIN,
        )

        assert response.json()["new_stock"] == 0

    def test_unknown_operation(self, client, create_product):
        product_id = create_product()
        response = client.patch(
            f"/products/{product_id}/stock",
            json={"stock": 5, "operation": "multiply"},
            headers=ADMIN,
        )
        assert response.status_code == 400

    def test_customer_is_forbidden(self, client, create_product):
        product_id = create_product()
        response = client.patch(f"/products/{product_id}/stock", json={"stock": 5}, headers=CUSTOMER)
        assert response.status_code == 403

    def test_contention_is_an_internal_error(self, client, monkeypatch):
        class _Conflicting(FakeCatalogue):
            def compare_and_set_stock(self, product_id, expected, new):
                return False

        monkeypatch.setenv("LEDGER_MAX_CAS_ATTEMPTS", "2")
        catalogue = _Conflicting()
        catalogue.add_product("prod-001", stock=5)
        set_catalogue(catalogue)

        response = client.patch("/products/prod-001/stock", json={"stock": 1}, headers=ADMIN)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestCatalogueMaintenance:
    def test_price_change(self, client, create_product):
        product_id = create_product(price=10.0)

        response = client.put(f"/products/{product_id}/price", json={"price": 7.5}, headers=ADMIN)

        assert response.status_code == 200
        assert client.get(f"/products/{product_id}").json()["product"]["price"] == 7.5

    def test_deactivate_and_activate(self, client, create_product):
        product_id = create_product()

        assert client.put(f"/products/{product_id}/deactivate", headers=ADMIN).status_code == 200
        assert client.get(f"/products/{product_id}").json()["product"]["is_active"] is False

        assert client.put(f"/products/{product_id}/activate", headers=ADMIN).status_code == 200
        assert client.get(f"/products/{product_id}").json()["product"]["is_active"] is True

    def test_deactivate_unknown_product(self, client):
        assert client.put("/products/prod-404/deactivate", headers=ADMIN).status_code == 404
