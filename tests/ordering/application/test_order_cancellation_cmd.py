"""Application tests for order cancellation by customers and administrators."""

import json

import pytest
from ordering.catalogue.queries import get_product
from ordering.errors import AlreadyCancelled
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import PlaceOrder
from ordering.order.order import Order
from ordering.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


@pytest.fixture()
def placed(register_product, address):
    first = register_product(name="First", stock=10)
    second = register_product(name="Second", stock=4)
    order_id = current_domain.process(
        PlaceOrder(
            customer_id="user-001",
            items=json.dumps([{"product_id": first, "quantity": 3}, {"product_id": second, "quantity": 4}]),
            shipping_address=json.dumps(address),
        ),
        asynchronous=False,
    )
    return order_id, first, second


def _cancel(order_id, customer_id="user-001", reason=None):
    current_domain.process(
        CancelOrder(order_id=order_id, customer_id=customer_id, reason=reason),
        asynchronous=False,
    )


class TestCancelOrderCommand:
    def test_owner_cancels_pending_order(self, placed):
        order_id, first, second = placed

        _cancel(order_id, reason="Ordered by mistake")

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "cancelled"
        assert order.cancelled_by == "customer"
        assert order.cancel_reason == "Ordered by mistake"
        assert get_product(first)["stock"] == 10
        assert get_product(second)["stock"] == 4

    def test_other_customer_gets_not_found(self, placed):
        order_id, first, _ = placed

        with pytest.raises(ObjectNotFoundError) as exc:
            _cancel(order_id, customer_id="user-002")

        assert exc.value.messages == {"_entity": ["Order not found or cannot be cancelled"]}
        assert current_domain.repository_for(Order).get(order_id).status == "pending"
        assert get_product(first)["stock"] == 7

    def test_confirmed_order_gets_not_found(self, placed):
        order_id, _, _ = placed
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="confirmed"), asynchronous=False)

        with pytest.raises(ObjectNotFoundError) as exc:
            _cancel(order_id)
        assert exc.value.messages == {"_entity": ["Order not found or cannot be cancelled"]}

    def test_unknown_order_gets_not_found(self):
        with pytest.raises(ObjectNotFoundError) as exc:
            _cancel("order-404")
        assert exc.value.messages == {"_entity": ["Order not found or cannot be cancelled"]}

    def test_already_cancelled_gets_not_found(self, placed):
        order_id, first, _ = placed
        _cancel(order_id)

        with pytest.raises(ObjectNotFoundError):
            _cancel(order_id)
        assert get_product(first)["stock"] == 10

    def test_reason_length_limit(self, placed):
        order_id, _, _ = placed
        with pytest.raises(ValidationError):
            CancelOrder(order_id=order_id, customer_id="user-001", reason="x" * 501)


class TestAdminCancellation:
    def test_admin_cancels_confirmed_order_of_any_customer(self, placed):
        order_id, first, second = placed
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="confirmed"), asynchronous=False)

        current_domain.process(
            CancelOrder(order_id=order_id, customer_id="admin-001", reason="Fraud check", by_admin=True),
            asynchronous=False,
        )

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "cancelled"
        assert order.cancelled_by == "admin"
        assert get_product(first)["stock"] == 10
        assert get_product(second)["stock"] == 4

    def test_admin_cancelling_twice_is_a_conflict(self, placed):
        order_id, first, _ = placed
        admin_cancel = CancelOrder(order_id=order_id, customer_id="admin-001", by_admin=True)
        current_domain.process(admin_cancel, asynchronous=False)

        with pytest.raises(AlreadyCancelled):
            current_domain.process(
                CancelOrder(order_id=order_id, customer_id="admin-001", by_admin=True),
                asynchronous=False,
            )
        assert get_product(first)["stock"] == 10

    def test_admin_cannot_cancel_delivered_order(self, placed):
        order_id, _, _ = placed
        for status in ("confirmed", "processing", "shipped", "delivered"):
            current_domain.process(UpdateOrderStatus(order_id=order_id, status=status), asynchronous=False)

        with pytest.raises(ValidationError):
            current_domain.process(
                CancelOrder(order_id=order_id, customer_id="admin-001", by_admin=True),
                asynchronous=False,
            )
