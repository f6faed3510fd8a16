"""Catalogue adapter backed by the Product and StockLevel repositories."""

from protean.utils.globals import current_domain

from ordering.catalogue.port import Catalogue, ProductRecord
from ordering.catalogue.product import Product
from ordering.inventory.stock import StockLevel


class ProductStoreCatalogue(Catalogue):
    """Reads products and applies conditional stock updates through the configured database."""

    def find_products_by_ids(self, product_ids):
        products = current_domain.repository_for(Product).find_by_ids(product_ids)
        levels = current_domain.repository_for(StockLevel).levels_for([product.id for product in products])
        return [
            ProductRecord(
                id=str(product.id),
                name=product.name,
                price=product.price,
                stock=levels.get(str(product.id), 0),
                is_active=bool(product.is_active),
            )
            for product in products
        ]

    def stock_of(self, product_id):
        return current_domain.repository_for(StockLevel).stock_of(product_id)

    def compare_and_set_stock(self, product_id, expected, new):
        return current_domain.repository_for(StockLevel).compare_and_set_stock(product_id, expected, new)
