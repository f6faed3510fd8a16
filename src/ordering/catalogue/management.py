"""Catalogue maintenance — commands and handler."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product
from ordering.domain import ordering
from ordering.inventory.stock import StockLevel

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Product")
class RegisterProduct:
    name = String(required=True, max_length=200)
    sku = String(max_length=50)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)


@ordering.command(part_of="Product")
class UpdateProductPrice:
    product_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)


@ordering.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@ordering.command(part_of="Product")
class ActivateProduct:
    product_id = Identifier(required=True)


@ordering.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        initial_stock = command.stock or 0
        product = Product.register(
            name=command.name,
            price=command.price,
            initial_stock=initial_stock,
            sku=command.sku,
        )
        current_domain.repository_for(Product).add(product)
        current_domain.repository_for(StockLevel).add(StockLevel.open(str(product.id), initial_stock))

        logger.info("Product registered", product_id=str(product.id), stock=initial_stock)
        return str(product.id)

    @handle(UpdateProductPrice)
    def update_price(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.change_price(command.price)
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)

    @handle(ActivateProduct)
    def activate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.activate()
        repo.add(product)
