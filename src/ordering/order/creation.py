"""Order placement: commands and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.domain import ordering
from ordering.order.builder import OrderBuilder
from ordering.order.order import Order


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity}
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict, defaults to shipping
    notes = Text()
    tax_rate = Float()
    shipping_cost = Float()


@ordering.command(part_of="Order")
class PlaceOrderFromCart:
    customer_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict, defaults to shipping
    notes = Text()
    tax_rate = Float()
    shipping_cost = Float()


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order = OrderBuilder().build(
            customer_id=command.customer_id,
            items=_loads(command.items),
            shipping_address=_loads(command.shipping_address),
            billing_address=_loads(command.billing_address) if command.billing_address else None,
            notes=command.notes,
            tax_rate=command.tax_rate,
            shipping_cost=command.shipping_cost,
        )
        return str(order.id)

    @handle(PlaceOrderFromCart)
    def place_order_from_cart(self, command):
        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_customer(command.customer_id)
        if cart.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})

        order = OrderBuilder().build(
            customer_id=command.customer_id,
            items=[{"product_id": str(item.product_id), "quantity": item.quantity} for item in cart.items],
            shipping_address=_loads(command.shipping_address),
            billing_address=_loads(command.billing_address) if command.billing_address else None,
            notes=command.notes,
            tax_rate=command.tax_rate,
            shipping_cost=command.shipping_cost,
        )

        # Only once the order is stored
        cart.clear()
        cart_repo.add(cart)
        return str(order.id)
