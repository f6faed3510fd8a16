"""Order builder: turns a list of wanted items into a persisted, fully reserved order.

Placing an order is a short saga over the inventory ledger:

    1. normalise the item list (duplicates merged, quantities checked)
    2. resolve every product; missing or inactive ones fail the whole order
    3. pre-check stock for every line (nothing reserved yet)
    4. price the lines with the catalogue's current prices
    5. reserve each line; if one fails, release the ones already taken
    6. create and store the order; if that fails, release everything

Either the order exists with stock reserved for every item, or no stock
was taken at all.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering import settings
from ordering.catalogue import get_catalogue
from ordering.errors import InsufficientStock
from ordering.inventory.ledger import InventoryLedger
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderLine:
    product_id: str
    product_name: str
    quantity: int
    unit_price: float

    @property
    def line_total(self):
        return round(self.unit_price * self.quantity, 2)

    def as_item(self):
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "line_total": self.line_total,
        }


def merge_items(items):
    """Combine requested items into one quantity per product, keeping first-seen order."""
    if not items:
        raise ValidationError({"items": ["Order must contain at least one item"]})

    merged: dict[str, int] = {}
    for item in items:
        product_id = item.get("product_id")
        quantity = item.get("quantity")
        if not product_id:
            raise ValidationError({"items": ["Every item needs a product_id"]})
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValidationError({"items": [f"Quantity for product {product_id} must be a positive integer"]})
        merged[str(product_id)] = merged.get(str(product_id), 0) + quantity

    return merged


class OrderBuilder:
    def __init__(self, catalogue=None, ledger=None):
        self._catalogue = catalogue if catalogue is not None else get_catalogue()
        self._ledger = ledger if ledger is not None else InventoryLedger(self._catalogue)

    def build(
        self,
        customer_id,
        items,
        shipping_address,
        billing_address=None,
        notes=None,
        tax_rate=None,
        shipping_cost=None,
    ) -> Order:
        tax_rate = settings.default_tax_rate() if tax_rate is None else tax_rate
        shipping_cost = settings.default_shipping_cost() if shipping_cost is None else shipping_cost
        if not 0 <= tax_rate <= 1:
            raise ValidationError({"tax_rate": ["Tax rate must be between 0 and 1"]})
        if shipping_cost < 0:
            raise ValidationError({"shipping_cost": ["Shipping cost cannot be negative"]})
        shipping_cost = round(shipping_cost, 2)

        wanted = merge_items(items)
        lines = self._price_lines(wanted)

        subtotal = round(sum(line.unit_price * line.quantity for line in lines), 2)
        pricing = {
            "subtotal": subtotal,
            "tax_rate": tax_rate,
            "tax_amount": round(subtotal * tax_rate, 2),
            "shipping_cost": shipping_cost,
        }

        reserved = self._reserve_all(lines)
        try:
            order = Order.place(
                customer_id=customer_id,
                items_data=[line.as_item() for line in lines],
                shipping_address=shipping_address,
                billing_address=billing_address,
                pricing=pricing,
                notes=notes,
            )
            current_domain.repository_for(Order).add(order)
        except Exception:
            logger.warning("Order could not be stored, releasing reserved stock", customer_id=str(customer_id))
            self._release_all(reserved)
            raise

        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(customer_id),
            items=len(lines),
            grand_total=order.pricing.grand_total,
        )
        return order

    # -------------------------------------------------------------------
    # Saga steps
    # -------------------------------------------------------------------
    def _price_lines(self, wanted) -> list[OrderLine]:
        records = {record.id: record for record in self._catalogue.find_products_by_ids(list(wanted))}

        unavailable = [pid for pid in wanted if pid not in records or not records[pid].is_active]
        if unavailable:
            raise ValidationError({"items": [f"Products not found or inactive: {', '.join(unavailable)}"]})

        for product_id, quantity in wanted.items():
            if records[product_id].stock < quantity:
                raise InsufficientStock(product_id, available=records[product_id].stock, requested=quantity)

        return [
            OrderLine(
                product_id=product_id,
                product_name=records[product_id].name,
                quantity=quantity,
                unit_price=records[product_id].price,
            )
            for product_id, quantity in wanted.items()
        ]

    def _reserve_all(self, lines) -> list[OrderLine]:
        reserved: list[OrderLine] = []
        try:
            for line in lines:
                self._ledger.reserve(line.product_id, line.quantity)
                reserved.append(line)
        except Exception as exc:
            logger.warning(
                "Reservation failed, rolling back",
                product_id=getattr(exc, "product_id", None),
                already_reserved=len(reserved),
            )
            self._release_all(reserved)
            raise
        return reserved

    def _release_all(self, reserved):
        for line in reversed(reserved):
            try:
                self._ledger.release(line.product_id, line.quantity)
            except Exception:
                logger.exception(
                    "Could not release reserved stock",
                    product_id=line.product_id,
                    quantity=line.quantity,
                )
