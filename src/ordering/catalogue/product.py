"""Product aggregate (CQRS) — the catalogue record the ordering flow reads.

The aggregate owns a product's name, price and active flag. Units on hand
are tracked separately by the StockLevel aggregate and only change through
the inventory ledger.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String

from ordering.catalogue.events import (
    ProductActivated,
    ProductDeactivated,
    ProductPriceChanged,
    ProductRegistered,
)
from ordering.domain import ordering


@ordering.aggregate
class Product:
    name = String(required=True, max_length=200)
    sku = String(max_length=50)
    price = Float(required=True, min_value=0.0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, name, price, initial_stock=0, sku=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            sku=sku,
            price=price,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductRegistered(
                product_id=str(product.id),
                name=name,
                price=price,
                initial_stock=initial_stock,
                registered_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Catalogue maintenance
    # -------------------------------------------------------------------
    def change_price(self, new_price):
        if new_price is None or new_price < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})

        previous_price = self.price
        self.price = new_price
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous_price,
                new_price=new_price,
            )
        )

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Product is already inactive"]})

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(ProductDeactivated(product_id=str(self.id), deactivated_at=now))

    def activate(self):
        if self.is_active:
            raise ValidationError({"is_active": ["Product is already active"]})

        now = datetime.now(UTC)
        self.is_active = True
        self.updated_at = now
        self.raise_(ProductActivated(product_id=str(self.id), activated_at=now))


@ordering.repository(part_of=Product)
class ProductRepository:
    def find_by_ids(self, product_ids) -> list[Product]:
        ids = [str(product_id) for product_id in product_ids]
        if not ids:
            return []
        return self._dao.query.filter(id__in=ids).all().items
