"""Application tests for cart item management commands."""

import pytest
from ordering.cart.cart import Cart
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from ordering.cart.queries import get_cart
from ordering.catalogue.management import DeactivateProduct, UpdateProductPrice
from ordering.errors import InsufficientStock, ItemNotFound
from ordering.inventory.stock import StockLevel
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _add(product_id, quantity=1, customer_id="user-001"):
    current_domain.process(
        AddToCart(customer_id=customer_id, product_id=product_id, quantity=quantity),
        asynchronous=False,
    )


class TestAddToCartCommand:
    def test_add_item_persists(self, register_product):
        product_id = register_product(price=10.0)
        _add(product_id, 2)

        cart = current_domain.repository_for(Cart).get("user-001")
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2
        assert cart.items[0].unit_price == 10.0
        assert cart.subtotal == 20.0

    def test_add_same_product_twice(self, register_product):
        product_id = register_product(price=10.0)
        _add(product_id, 2)
        _add(product_id, 1)

        cart = current_domain.repository_for(Cart).get("user-001")
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3
        assert cart.total_items == 3

    def test_uses_current_price(self, register_product):
        product_id = register_product(price=10.0)
        _add(product_id, 1)
        current_domain.process(UpdateProductPrice(product_id=product_id, price=8.0), asynchronous=False)
        _add(product_id, 1)

        cart = current_domain.repository_for(Cart).get("user-001")
        assert cart.items[0].unit_price == 8.0
        assert cart.subtotal == 16.0

    def test_unknown_product(self):
        with pytest.raises(ObjectNotFoundError) as exc:
            _add("prod-404")
        assert exc.value.messages == {"product_id": ["Product not found or unavailable"]}

    def test_inactive_product(self, register_product):
        product_id = register_product()
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)

        with pytest.raises(ObjectNotFoundError):
            _add(product_id)

    def test_insufficient_stock(self, register_product):
        product_id = register_product(stock=2)

        with pytest.raises(InsufficientStock) as exc:
            _add(product_id, 3)

        assert exc.value.available == 2
        assert exc.value.requested == 3

    def test_adding_does_not_reserve(self, register_product):
        product_id = register_product(stock=5)
        _add(product_id, 4)

        assert current_domain.repository_for(StockLevel).get(product_id).available == 5

    def test_zero_quantity_rejected(self, register_product):
        product_id = register_product()
        with pytest.raises(ValidationError):
            AddToCart(customer_id="user-001", product_id=product_id, quantity=0)

    def test_carts_are_per_customer(self, register_product):
        product_id = register_product()
        _add(product_id, 1, customer_id="user-001")
        _add(product_id, 2, customer_id="user-002")

        assert get_cart("user-001")["total_items"] == 1
        assert get_cart("user-002")["total_items"] == 2


class TestUpdateCartItemCommand:
    def test_update_quantity_persists(self, register_product):
        product_id = register_product(price=10.0)
        _add(product_id, 1)

        current_domain.process(
            UpdateCartItem(customer_id="user-001", product_id=product_id, quantity=4),
            asynchronous=False,
        )

        cart = current_domain.repository_for(Cart).get("user-001")
        assert cart.items[0].quantity == 4
        assert cart.subtotal == 40.0

    def test_zero_quantity_removes(self, register_product):
        product_id = register_product()
        _add(product_id, 1)

        current_domain.process(
            UpdateCartItem(customer_id="user-001", product_id=product_id, quantity=0),
            asynchronous=False,
        )

        assert get_cart("user-001")["items"] == []

    def test_item_not_in_cart(self, register_product):
        product_id = register_product()
        with pytest.raises(ItemNotFound):
            current_domain.process(
                UpdateCartItem(customer_id="user-001", product_id=product_id, quantity=1),
                asynchronous=False,
            )

    def test_missing_item_reported_before_stock(self, register_product):
        product_id = register_product(stock=2)

        with pytest.raises(ItemNotFound):
            current_domain.process(
                UpdateCartItem(customer_id="user-001", product_id=product_id, quantity=5),
                asynchronous=False,
            )

    def test_update_beyond_stock(self, register_product):
        product_id = register_product(stock=3)
        _add(product_id, 1)

        with pytest.raises(InsufficientStock):
            current_domain.process(
                UpdateCartItem(customer_id="user-001", product_id=product_id, quantity=4),
                asynchronous=False,
            )


class TestRemoveAndClearCommands:
    def test_remove_item(self, register_product):
        first = register_product(name="First")
        second = register_product(name="Second")
        _add(first)
        _add(second)

        current_domain.process(RemoveFromCart(customer_id="user-001", product_id=first), asynchronous=False)

        cart = get_cart("user-001")
        assert [item["product_id"] for item in cart["items"]] == [second]
        assert cart["unique_items"] == 1

    def test_remove_absent_item(self, register_product):
        product_id = register_product()
        _add(product_id)

        current_domain.process(RemoveFromCart(customer_id="user-001", product_id="prod-404"), asynchronous=False)

        assert get_cart("user-001")["unique_items"] == 1

    def test_clear(self, register_product):
        _add(register_product(name="First"))
        _add(register_product(name="Second"))

        current_domain.process(ClearCart(customer_id="user-001"), asynchronous=False)

        cart = get_cart("user-001")
        assert cart["items"] == []
        assert cart["subtotal"] == 0.0
        assert cart["total_items"] == 0


class TestGetCart:
    def test_lazily_created(self):
        cart = get_cart("user-new")

        assert cart["customer_id"] == "user-new"
        assert cart["items"] == []
        assert current_domain.repository_for(Cart).get("user-new") is not None
