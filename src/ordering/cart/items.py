"""Cart item management — commands and handler.

Adding to the cart checks the product is on sale and that enough stock is
available right now. The stock check is advisory: nothing is reserved until
an order is placed.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.catalogue import get_catalogue
from ordering.domain import ordering
from ordering.errors import InsufficientStock, ItemNotFound

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="Cart")
class UpdateCartItem:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@ordering.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


def _available_product(product_id):
    records = get_catalogue().find_products_by_ids([product_id])
    product = records[0] if records else None
    if product is None or not product.is_active:
        raise ObjectNotFoundError({"product_id": ["Product not found or unavailable"]})
    return product


@ordering.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = _available_product(command.product_id)
        if product.stock < command.quantity:
            raise InsufficientStock(product.id, available=product.stock, requested=command.quantity)

        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        cart.add_item(product_id=product.id, quantity=command.quantity, unit_price=product.price)
        repo.add(cart)

        logger.info(
            "Item added to cart",
            customer_id=str(command.customer_id),
            product_id=product.id,
            quantity=command.quantity,
        )

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        if cart._line_for(command.product_id) is None:
            raise ItemNotFound(command.product_id)

        if command.quantity > 0:
            product = _available_product(command.product_id)
            if product.stock < command.quantity:
                raise InsufficientStock(product.id, available=product.stock, requested=command.quantity)

        cart.update_item(command.product_id, command.quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        cart.remove_item(command.product_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        cart.clear()
        repo.add(cart)
